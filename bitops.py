from typing import Iterable, List

from errors import InvalidBitValue, UnexpectedEof


class Bit(int):
    """A single binary digit.

    ``Bit`` is an ``int`` restricted to the values 0 and 1, so it compares
    equal to the plain integers 0 and 1 and can be used wherever those are
    expected. The characters ``'0'`` and ``'1'`` are *not* bits.

    :raises InvalidBitValue: If ``value`` is not the integer 0 or 1.
    """

    __slots__ = ()

    def __new__(cls, value=0):
        if isinstance(value, str):
            raise InvalidBitValue(
                f"Cannot create a bit from the string {value!r}; "
                "use the numbers 0 and 1 instead"
            )
        if not isinstance(value, int):
            raise InvalidBitValue(f"Illegal value for a bit: {value!r}")
        if value in (ord("0"), ord("1")):
            raise InvalidBitValue(
                f"Cannot create a bit from {value}, the character code of "
                f"{chr(value)!r}; use the numbers 0 and 1 instead"
            )
        if value not in (0, 1):
            raise InvalidBitValue(f"Illegal value for a bit: {value}")
        return super().__new__(cls, value)

    def __repr__(self):
        return f"Bit({int(self)})"

    def __str__(self):
        return "1" if self else "0"


ZERO = Bit(0)
ONE = Bit(1)


def to_bits(values: Iterable[int]) -> List[Bit]:
    """Convert an iterable of 0/1 integers into a list of :class:`Bit`.

    :param values: Integers to convert.
    :type values: Iterable[int]
    :returns: The converted bits.
    :rtype: List[Bit]
    :raises InvalidBitValue: If any value is not 0 or 1.
    """
    return [Bit(v) for v in values]


class BitWriter:
    """Bit-packing writer.

    Accumulates individual bits into bytes and buffers them until
    flushed. Bits fill each byte from the least significant position
    upwards: the ``i``-th bit of a byte is stored as ``1 << i``.

    :ivar buffer: Internal byte buffer holding fully written bytes.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    :ivar bits_written: Total number of bits written so far.
    :type bits_written: int
    """

    def __init__(self):
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_written = 0

    def write_bit(self, bit: int):
        """Append a single bit.

        :param bit: Bit to append; any truthy value is written as 1.
        :type bit: Bit
        :returns: None
        :rtype: None
        """
        if bit:
            self.bit_buffer |= 1 << self.bit_count
        self.bit_count += 1
        self.bits_written += 1
        if self.bit_count == 8:
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0

    def write_bits(self, bits: Iterable[int]):
        """Append every bit of ``bits`` in order.

        :param bits: Bits to append.
        :type bits: Iterable[Bit]
        :returns: None
        :rtype: None
        """
        for bit in bits:
            self.write_bit(bit)

    def write_bytes(self, data: bytes):
        """Write raw bytes, aligning pending bits to the next byte boundary.

        If there are pending bits in ``bit_buffer``, the partial byte is
        zero-padded and appended before writing ``data``.

        :param data: Byte sequence to append to the output.
        :type data: bytes
        :returns: None
        :rtype: None
        """
        self._align()
        self.buffer.extend(data)

    def flush(self) -> bytes:
        """Flush remaining bits (if any) and return the full byte buffer.

        Any partial byte in ``bit_buffer`` is padded with zeros in its
        unused high positions before being appended.

        :returns: The accumulated bytes written so far.
        :rtype: bytes
        """
        self._align()
        return bytes(self.buffer)

    def _align(self):
        if self.bit_count > 0:
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0


class BitReader:
    """Bit-unpacking reader, the counterpart of :class:`BitWriter`.

    :ivar data: Input data to read bits/bytes from.
    :type data: bytes
    :ivar pos: Current position in ``data`` (byte index).
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_index: Position of the next bit to read in ``bit_buffer`` (0-8).
    :type bit_index: int
    """

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.bit_buffer = 0
        self.bit_index = 8

    def read_bit(self) -> Bit:
        """Read the next bit.

        :returns: The next bit in the order it was written.
        :rtype: Bit
        :raises UnexpectedEof: If the data is exhausted.
        """
        if self.bit_index == 8:
            if self.pos >= len(self.data):
                raise UnexpectedEof("Unexpected end of data when reading bits")
            self.bit_buffer = self.data[self.pos]
            self.pos += 1
            self.bit_index = 0
        bit = ONE if self.bit_buffer & (1 << self.bit_index) else ZERO
        self.bit_index += 1
        return bit

    def read_bits(self, nbits: int) -> List[Bit]:
        """Read ``nbits`` bits.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The bits read, in order.
        :rtype: List[Bit]
        :raises UnexpectedEof: If the data ends before ``nbits`` bits are read.
        """
        return [self.read_bit() for _ in range(nbits)]

    def read_bytes(self, nbytes: int) -> bytes:
        """Read ``nbytes`` raw bytes from the stream.

        Any unread bits of the current byte are discarded first.

        :param nbytes: Number of bytes to read.
        :type nbytes: int
        :returns: The next ``nbytes`` bytes.
        :rtype: bytes
        :raises UnexpectedEof: If fewer than ``nbytes`` bytes remain.
        """
        self.bit_index = 8
        if self.pos + nbytes > len(self.data):
            raise UnexpectedEof("Unexpected end of data when reading bytes")
        result = self.data[self.pos:self.pos + nbytes]
        self.pos += nbytes
        return result
