import random

import pytest

from archiver import (
    MAGIC,
    Archiver,
    deserialize,
    read_encoded_data,
    read_raw_binary,
    serialize,
    write_encoded_data,
    write_raw_binary,
)
from errors import (
    BadFormat,
    InsufficientSymbols,
    InvalidSymbolCount,
    IoError,
    MalformedTree,
    Truncated,
)
from huffman import EncodedData, compress

STREETTEST_BLOB = b"\xa7\x6b\x10\xc5\x03TRSE\x02\x8d\xca\x73\x01"


def test_serialize_example_layout():
    blob = serialize(compress("STREETTEST"))
    assert blob[:4] == MAGIC.to_bytes(4, "little")
    assert blob == STREETTEST_BLOB


def test_deserialize_example():
    data = deserialize(STREETTEST_BLOB)
    assert data == compress("STREETTEST")


@pytest.mark.parametrize(
    "text", ["HAPPY HIP HOP", "AB", "ABABABAB", "The quick brown fox " * 20]
)
def test_container_roundtrip(text):
    data = compress(text)
    back = deserialize(serialize(data))
    assert back.tree_shape == data.tree_shape
    assert back.tree_leaves == data.tree_leaves
    assert back.message_bits == data.message_bits


def test_serialize_does_not_drain_input():
    data = compress("COOL GUY")
    shape, leaves, bits = list(data.tree_shape), list(data.tree_leaves), list(data.message_bits)
    serialize(data)
    assert (data.tree_shape, data.tree_leaves, data.message_bits) == (shape, leaves, bits)


def test_serialize_rejects_invalid_data():
    with pytest.raises(InvalidSymbolCount):
        serialize(EncodedData([0], ["A"], []))
    with pytest.raises(MalformedTree):
        serialize(EncodedData([1, 0, 0, 0], ["A", "B"], []))
    with pytest.raises(BadFormat):
        serialize(EncodedData([1, 0, 0], ["A", "–"], [0, 1]))
    many = [chr(i) for i in range(257)]
    with pytest.raises(InvalidSymbolCount):
        serialize(EncodedData([1] * 256 + [0] * 257, many, []))


@pytest.mark.parametrize(
    "blob, error",
    [
        (b"", BadFormat),
        (b"BAD!\x01AB\x08\x00", BadFormat),
        (STREETTEST_BLOB[:4], Truncated),
        (STREETTEST_BLOB[:4] + b"\x00AB\x01\x00", InvalidSymbolCount),
        (STREETTEST_BLOB[:7], Truncated),
        (STREETTEST_BLOB[:9], Truncated),
        (STREETTEST_BLOB[:9] + b"\x00\x8d", BadFormat),
        (STREETTEST_BLOB[:10], Truncated),
        (STREETTEST_BLOB[:9] + b"\x03\x05", Truncated),
    ],
)
def test_deserialize_errors(blob, error):
    with pytest.raises(error):
        deserialize(blob)


def test_container_errors_are_value_errors():
    with pytest.raises(ValueError):
        deserialize(b"nope")


def test_archiver_roundtrip_all_bytes():
    data = bytes(range(256))
    arch = Archiver()
    assert arch.decompress(arch.compress(data)) == data


def test_archiver_roundtrip_random():
    rng = random.Random(1234)
    data = bytes(rng.getrandbits(8) for _ in range(4096))
    arch = Archiver()
    comp = arch.compress(data)
    assert arch.decompress(comp) == data


def test_archiver_keeps_case_and_shrinks_text():
    data = b"Nana Nana Nana Nana Nana Nana Nana Nana Batman" * 10
    arch = Archiver()
    comp = arch.compress(data)
    assert len(comp) < len(data)
    assert arch.decompress(comp) == data


@pytest.mark.parametrize("data", [b"", b"A" * 100])
def test_archiver_insufficient_symbols(data):
    with pytest.raises(InsufficientSymbols):
        Archiver().compress(data)


def test_encoded_data_file_roundtrip(tmp_path):
    path = tmp_path / "out.huf"
    data = compress("HAPPY HIP HOP")
    write_encoded_data(data, str(path))
    assert read_encoded_data(str(path)) == data


def test_raw_binary_roundtrip(tmp_path):
    path = tmp_path / "raw.bin"
    write_raw_binary(b"\r\n\x00\x1a", str(path))
    assert read_raw_binary(str(path)) == b"\r\n\x00\x1a"


def test_raw_binary_io_errors(tmp_path):
    missing = str(tmp_path / "missing.bin")
    with pytest.raises(IoError) as excinfo:
        read_raw_binary(missing)
    assert excinfo.value.filename == missing
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    with pytest.raises(OSError):
        write_raw_binary(b"x", str(tmp_path / "no" / "such" / "dir.bin"))
