class HuffmanError(Exception):
    """Base class for every error raised by the compressor."""


class InvalidBitValue(HuffmanError, ValueError):
    """A :class:`bitops.Bit` was constructed from something other than 0 or 1."""


class InsufficientSymbols(HuffmanError, ValueError):
    """Input has fewer than two distinct symbols, so no tree can be built."""


class UnknownSymbol(HuffmanError, KeyError):
    """A symbol to encode does not appear in the encoding tree."""

    def __str__(self):
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class MalformedTree(HuffmanError, ValueError):
    """A tree or its flattened form violates the full-binary-tree shape."""


class BadFormat(HuffmanError, ValueError):
    """Serialized data is not a valid compressed container."""


class Truncated(BadFormat):
    """Serialized data ends before a required region."""


class InvalidSymbolCount(BadFormat):
    """Leaf count is outside the 2..256 range the container can hold."""


class UnexpectedEof(HuffmanError, EOFError):
    """A bit reader ran out of bytes."""


class IoError(HuffmanError, OSError):
    """Reading or writing a file failed.

    :ivar filename: Path of the file being accessed.
    :type filename: str
    """

    def __init__(self, message: str, filename: str):
        super().__init__(message)
        self.filename = filename

    def __str__(self):
        return self.args[0]
