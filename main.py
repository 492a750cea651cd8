import argparse
import os
import sys

from archiver import Archiver, read_raw_binary, write_raw_binary
from errors import HuffmanError

COMPRESSED_EXTENSION = ".huf"  #: Appended to the name of compressed files
DECOMPRESSED_PREFIX = "unhuf."  #: Prepended to the name of decompressed files


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman coding file compressor"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    comp = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    comp.add_argument("input", help="File to compress")
    comp.add_argument(
        "-o",
        "--output",
        help=f"Output file (default: input + '{COMPRESSED_EXTENSION}')",
    )

    decomp = subparsers.add_parser(
        "decompress", aliases=["d"], help="Decompress a file"
    )
    decomp.add_argument("input", help=f"{COMPRESSED_EXTENSION} file to decompress")
    decomp.add_argument(
        "-o",
        "--output",
        help=f"Output file (default: '{DECOMPRESSED_PREFIX}' + input name "
             f"without '{COMPRESSED_EXTENSION}')",
    )

    for sub in (comp, decomp):
        sub.add_argument(
            "-f", "--force", action="store_true",
            help="Overwrite the output file if it exists",
        )
        sub.add_argument(
            "-q", "--quiet", action="store_true",
            help="Only report errors",
        )

    subparsers.add_parser(
        "shell", aliases=["s"], help="Interactive compress/decompress menu"
    )

    return parser


def compressed_name(in_path: str) -> str:
    """Default output path when compressing ``in_path``.

    :param in_path: File being compressed.
    :type in_path: str
    :returns: ``in_path`` with the compressed extension appended.
    :rtype: str
    """
    return in_path + COMPRESSED_EXTENSION


def decompressed_name(in_path: str) -> str:
    """Default output path when decompressing ``in_path``.

    The compressed extension is stripped and the decompressed prefix is
    added to the file name, keeping the directory.

    :param in_path: File being decompressed.
    :type in_path: str
    :returns: Output path next to ``in_path``.
    :rtype: str
    """
    head, tail = os.path.split(in_path)
    root, ext = os.path.splitext(tail)
    if ext != COMPRESSED_EXTENSION:
        root = tail
    return os.path.join(head, DECOMPRESSED_PREFIX + root)


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


def _report(quiet: bool, *args):
    if not quiet:
        print(*args)


def compress_file(in_path: str, out_path: str, quiet: bool = False) -> int:
    """Compress ``in_path`` into ``out_path``.

    :param in_path: File to compress.
    :type in_path: str
    :param out_path: Destination container file.
    :type out_path: str
    :param quiet: Suppress status lines.
    :type quiet: bool
    :returns: Number of compressed bytes written.
    :rtype: int
    :raises HuffmanError: If reading, compressing or writing fails.
    """
    data = read_raw_binary(in_path)
    _report(quiet, f"Reading {len(data)} bytes from {in_path}")
    _report(quiet, "Compressing ...")
    comp = Archiver().compress(data)
    write_raw_binary(comp, out_path)
    _report(quiet, f"Wrote {len(comp)} compressed bytes to {out_path}")
    _report(quiet, "Size before compression: ", _fmt_bytes(len(data)))
    _report(quiet, "Size after compression: ", _fmt_bytes(len(comp)))
    _report(quiet, f"Compression ratio: {len(data) / len(comp):.2f}")
    return len(comp)


def decompress_file(in_path: str, out_path: str, quiet: bool = False) -> int:
    """Decompress the container ``in_path`` into ``out_path``.

    :param in_path: Container file to decompress.
    :type in_path: str
    :param out_path: Destination file.
    :type out_path: str
    :param quiet: Suppress status lines.
    :type quiet: bool
    :returns: Number of decompressed bytes written.
    :rtype: int
    :raises HuffmanError: If reading, parsing, decoding or writing fails.
    """
    comp = read_raw_binary(in_path)
    _report(quiet, f"Reading {len(comp)} bytes from {in_path}")
    _report(quiet, "Decompressing ...")
    data = Archiver().decompress(comp)
    write_raw_binary(data, out_path)
    _report(quiet, f"Wrote {len(data)} decompressed bytes to {out_path}")
    return len(data)


def _ask_yes_no(prompt: str) -> bool:
    while True:
        answer = input(prompt).strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Please answer y or n.")


def _run_one(compressing: bool, in_path: str, out_path: str,
             force: bool, quiet: bool) -> bool:
    """Run a single compress/decompress, reporting errors as ``[!]`` lines.

    :returns: ``True`` on success.
    :rtype: bool
    """
    if os.path.exists(out_path) and not force:
        print(f"[!] Output file already exists: {out_path} "
              "(use --force to overwrite)")
        return False
    action = compress_file if compressing else decompress_file
    try:
        action(in_path, out_path, quiet)
    except HuffmanError as e:
        verb = "compress" if compressing else "decompress"
        print(f"[!] Unable to {verb} {in_path}: {e}")
        return False
    return True


def shell():
    """Interactive menu loop: compress, decompress or quit.

    :returns: None
    :rtype: None
    """
    print("Welcome to Shrink-It!")
    print("This program uses the Huffman coding algorithm for compression.")
    print("Any type of file can be encoded using a Huffman code.")
    print("Decompressing the result will faithfully reproduce the original.")
    while True:
        print()
        print("Your options are:")
        print("C) compress file")
        print("D) decompress file")
        print("Q) quit")
        print()
        try:
            choice = input("Enter your choice: ").strip().upper()
        except EOFError:
            break
        if choice == "Q":
            break
        if choice not in ("C", "D"):
            continue
        compressing = choice == "C"
        in_path = input(
            "File to compress: " if compressing else "File to decompress: "
        ).strip()
        if not in_path:
            print("Operation canceled.")
            continue
        out_path = (compressed_name(in_path) if compressing
                    else decompressed_name(in_path))
        print(f"Writing file: {out_path}")
        force = False
        if os.path.exists(out_path):
            if not _ask_yes_no("File already exists. Overwrite? (y/n) "):
                print("Operation canceled.")
                continue
            force = True
        _run_one(compressing, in_path, out_path, force, quiet=False)


def main():
    """Entry point for the CLI tool.

    :returns: None
    :rtype: None
    """
    parser = get_parser()
    args = parser.parse_args()

    if args.cmd in ["shell", "s"]:
        shell()
        return

    compressing = args.cmd in ["compress", "c"]
    out_path = args.output or (
        compressed_name(args.input) if compressing
        else decompressed_name(args.input)
    )
    if not _run_one(compressing, args.input, out_path, args.force, args.quiet):
        sys.exit(1)


if __name__ == "__main__":
    main()
