import struct

from bitops import BitWriter, BitReader
from errors import (
    BadFormat,
    InvalidSymbolCount,
    IoError,
    MalformedTree,
    Truncated,
)
from huffman import EncodedData, compress, decompress

MAGIC = 0xC5106BA7  #: Container magic number, stored little-endian
HEADER = struct.Struct("<I")
MAX_SYMBOLS = 256  #: Leaf count must fit in one byte after subtracting one


def check_integrity(data: EncodedData):
    """Validate the invariants a container must satisfy before writing.

    :param data: Encoded data to check.
    :type data: EncodedData
    :returns: None
    :rtype: None
    :raises InvalidSymbolCount: If there are fewer than 2 or more than 256 leaves.
    :raises MalformedTree: If the shape is not ``2 * leaves - 1`` bits long.
    :raises BadFormat: If a leaf symbol does not fit in one byte.
    """
    count = len(data.tree_leaves)
    if count < 2:
        raise InvalidSymbolCount(
            "Flattened encoding tree does not contain at least two leaves"
        )
    if count > MAX_SYMBOLS:
        raise InvalidSymbolCount(
            f"Flattened encoding tree has {count} leaves, at most "
            f"{MAX_SYMBOLS} fit in a container"
        )
    if len(data.tree_shape) != 2 * count - 1:
        raise MalformedTree(
            "Flattened encoding tree has mismatch in counts of tree shape "
            "bits and tree leaves"
        )
    for symbol in data.tree_leaves:
        if len(symbol) != 1 or ord(symbol) > 0xFF:
            raise BadFormat(f"Leaf symbol {symbol!r} does not fit in one byte")


def serialize(data: EncodedData) -> bytes:
    """Serialize ``data`` into the container format.

    Layout:
    - Magic: ``0xC5106BA7`` (uint32, little-endian)
    - Leaf count minus one: uint8
    - Leaves: one byte each, in flatten pre-order
    - Valid bits in the final byte: uint8 (1-8)
    - Tree shape bits followed by message bits, packed LSB-first

    :param data: Encoded data to serialize.
    :type data: EncodedData
    :returns: Container bytes.
    :rtype: bytes
    """
    check_integrity(data)

    total_bits = len(data.tree_shape) + len(data.message_bits)
    final_bits = total_bits % 8 or 8

    output = BitWriter()
    output.write_bytes(HEADER.pack(MAGIC))
    output.write_bytes(bytes([len(data.tree_leaves) - 1]))
    output.write_bytes("".join(data.tree_leaves).encode("latin-1"))
    output.write_bytes(bytes([final_bits]))
    output.write_bits(data.tree_shape)
    output.write_bits(data.message_bits)
    return output.flush()


def deserialize(blob: bytes) -> EncodedData:
    """Parse container bytes produced by :func:`serialize`.

    :param blob: Container bytes.
    :type blob: bytes
    :returns: The encoded data.
    :rtype: EncodedData
    :raises BadFormat: If the magic header is missing or wrong, or the final
        byte bit count is out of range.
    :raises InvalidSymbolCount: If the leaf count is below two.
    :raises Truncated: If a region ends early.
    """
    if len(blob) < HEADER.size or HEADER.unpack_from(blob)[0] != MAGIC:
        raise BadFormat("Data does not start with the Huffman container header")
    pos = HEADER.size

    if pos >= len(blob):
        raise Truncated("Unable to read leaf count")
    count = blob[pos] + 1
    pos += 1
    if count < 2:
        raise InvalidSymbolCount("Leaf count too low")

    if pos + count > len(blob):
        raise Truncated("Unable to read all tree leaves")
    leaves = list(blob[pos:pos + count].decode("latin-1"))
    pos += count

    if pos >= len(blob):
        raise Truncated("Unable to read final byte bit count")
    final_bits = blob[pos]
    pos += 1
    if not 1 <= final_bits <= 8:
        raise BadFormat(f"Invalid final byte bit count: {final_bits}")

    payload = blob[pos:]
    shape_len = 2 * count - 1
    bits_to_read = (len(payload) - 1) * 8 + final_bits if payload else 0
    if bits_to_read < shape_len:
        raise Truncated("Unable to read all tree shape bits")

    reader = BitReader(payload)
    shape = reader.read_bits(shape_len)
    message = reader.read_bits(bits_to_read - shape_len)
    return EncodedData(shape, leaves, message)


def read_raw_binary(filename: str) -> bytes:
    """Read a whole file in binary mode.

    :raises IoError: If the file cannot be opened or read.
    """
    try:
        with open(filename, "rb") as f:
            return f.read()
    except OSError as exc:
        raise IoError(
            f"Error reading {filename}: {exc.strerror or exc}", filename
        ) from exc


def write_raw_binary(data: bytes, filename: str):
    """Write ``data`` to a file in binary mode, replacing any contents.

    :raises IoError: If the file cannot be opened or written.
    """
    try:
        with open(filename, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise IoError(
            f"Error writing {filename}: {exc.strerror or exc}", filename
        ) from exc


def write_encoded_data(data: EncodedData, filename: str):
    """Serialize ``data`` and write it to ``filename``."""
    write_raw_binary(serialize(data), filename)


def read_encoded_data(filename: str) -> EncodedData:
    """Read and parse a container file."""
    return deserialize(read_raw_binary(filename))


class Archiver:
    """Compress arbitrary bytes into container bytes and back.

    Each byte of input is one symbol. No case folding is applied, so any
    content round-trips exactly.
    """

    def compress(self, data: bytes) -> bytes:
        """Compress raw ``data`` into container bytes.

        :param data: Input bytes to compress.
        :type data: bytes
        :returns: Container bytes.
        :rtype: bytes
        :raises InsufficientSymbols: If ``data`` has fewer than two distinct bytes.
        """
        encoded = compress(data.decode("latin-1"), fold_case=False)
        return serialize(encoded)

    def decompress(self, blob: bytes) -> bytes:
        """Decompress container bytes produced by :meth:`compress`.

        :param blob: Container bytes.
        :type blob: bytes
        :returns: Original bytes.
        :rtype: bytes
        """
        return decompress(deserialize(blob)).encode("latin-1")
