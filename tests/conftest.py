import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


def make_example_tree():
    """Build the example tree used across tests.

    Shape::

              *
            /   \\
           T     *
                / \\
               *   E
              / \\
             R   S
    """
    from huffman import EncodingTreeNode as N

    return N(zero=N("T"), one=N(zero=N(zero=N("R"), one=N("S")), one=N("E")))


@pytest.fixture()
def example_tree():
    return make_example_tree()


@pytest.fixture()
def sample_file(tmp_path: Path):
    """Write a small binary file with a spread of byte values."""
    path = tmp_path / "sample.bin"
    path.write_bytes(b"Hello World!\n" * 3 + bytes(range(256)) + b"\x00\xff")
    return path
