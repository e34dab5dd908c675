import argparse
import os
import sys

from typing import List, Optional
from codec import HuffmanCodec
from errors import HuffmanError


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="huffpack",
        description="Huffman coding compressor for single files",
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    for name, alias, help_text in (
        ("compress", "c", "Compress the input file"),
        ("decompress", "d", "Decompress the input file"),
    ):
        sub = subparsers.add_parser(name, aliases=[alias], help=help_text)
        sub.add_argument("input", help="Input file path")
        sub.add_argument("output", help="Output file path")
        sub.add_argument(
            "-P",
            "--no-progress",
            action="store_true",
            help="Hide the progress line",
        )
        sub.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Print each processing step",
        )

    return parser


PROGRESS_WIDTH = 72  #: Columns cleared by each in-place progress redraw


def _print_progress(line: str) -> None:
    """Redraw the progress line in place.

    The line is padded to ``PROGRESS_WIDTH`` so a shorter update fully covers
    the previous one.

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stdout.write("\r" + line.ljust(PROGRESS_WIDTH))
    sys.stdout.flush()


def _print_stage(message: str) -> None:
    """Print the name of a processing step on its own line.

    :param message: Step name reported by the codec.
    :type message: str
    :returns: None
    :rtype: None
    """
    print(f"{message}...")


def _fmt_pct(part: int, whole: int) -> str:
    """Format ``part`` as a share of ``whole``, like `` 42.5%``.

    Used both for progress and for the compressed size relative to the
    original, so values above 100% are shown as they are.

    :param part: Units completed, or compressed size.
    :type part: int
    :param whole: Total units, or original size.
    :type whole: int
    :returns: Percentage with one decimal, ``"-"`` if ``whole`` is not positive.
    :rtype: str
    """
    if whole <= 0:
        return "-"
    return f"{100.0 * part / whole:5.1f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count, exact below 1 KiB and binary-prefixed above.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string such as ``"140 B"`` or ``"2.50 MiB"``.
    :rtype: str
    """
    if n < 1024:
        return f"{n} B"
    size = float(n)
    for unit in ("KiB", "MiB", "GiB", "TiB"):
        size /= 1024
        if size < 1024:
            return f"{size:.2f} {unit}"
    return f"{size / 1024:.2f} PiB"


class FileProgress:
    """Callable progress reporter for one file.

    Redraws the line only when the whole-percent value changes.

    :ivar label: Action label (e.g., "Compressing" or "Decompressing").
    :type label: str
    :ivar path: Path displayed for the file being processed.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        """Initialize the progress reporter.

        :param label: Action label.
        :type label: str
        :param path: Path to display.
        :type path: str
        :returns: None
        :rtype: None
        """
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Bytes processed so far.
        :type done: int
        :param total: Total bytes to process.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def _remove_partial(path: str) -> None:
    """Delete an output file left behind by a failed operation."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def _check_distinct_paths(input_path: str, output_path: str) -> None:
    """Refuse to write over the file being read.

    Opening the output truncates it, so writing to the input file would
    destroy the data before the codec reads it.

    :param input_path: File to read.
    :type input_path: str
    :param output_path: File to write.
    :type output_path: str
    :returns: None
    :rtype: None
    :raises ValueError: If both paths name the same file.
    """
    if os.path.exists(output_path) and os.path.samefile(input_path, output_path):
        raise ValueError(
            f"Input and output are the same file: {output_path}"
        )


def compress_file(
    input_path: str,
    output_path: str,
    hide_progress: bool = True,
    verbose: bool = False,
) -> int:
    """Compress ``input_path`` into ``output_path``.

    Prints the sizes before and after compression and the ratio. On failure
    the output file is removed and the error is re-raised.

    :param input_path: File to compress.
    :type input_path: str
    :param output_path: Destination file.
    :type output_path: str
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :param verbose: Whether to print each processing step.
    :type verbose: bool
    :returns: Size of the compressed file in bytes.
    :rtype: int
    :raises OSError: If a file cannot be opened, read or written.
    :raises ValueError: If ``input_path`` and ``output_path`` are the same file.
    """
    codec = HuffmanCodec(on_stage=_print_stage if verbose else None)
    _check_distinct_paths(input_path, output_path)
    on_prog = None if hide_progress else FileProgress("Compressing", input_path)
    with open(input_path, "rb") as src, open(output_path, "wb") as dst:
        try:
            written = codec.compress(src, dst, on_progress=on_prog)
        except Exception:
            dst.close()
            _remove_partial(output_path)
            raise
        original = src.tell()
    if on_prog is not None:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print("Size before compression: ", _fmt_bytes(original))
    print("Size after compression: ", _fmt_bytes(written))
    if written:
        print(
            f"Compression ratio: {original / written:.2f}"
            f" ({_fmt_pct(written, original).strip()} of original)"
        )
    return written


def decompress_file(
    input_path: str,
    output_path: str,
    hide_progress: bool = True,
    verbose: bool = False,
) -> int:
    """Decompress ``input_path`` into ``output_path``.

    On failure the output file is removed and the error is re-raised.

    :param input_path: Compressed file.
    :type input_path: str
    :param output_path: Destination file.
    :type output_path: str
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :param verbose: Whether to print each processing step.
    :type verbose: bool
    :returns: Size of the decompressed file in bytes.
    :rtype: int
    :raises OSError: If a file cannot be opened, read or written.
    :raises ValueError: If ``input_path`` and ``output_path`` are the same file.
    :raises MalformedHeaderError: If the header is invalid.
    :raises CorruptStreamError: If the bitstream is truncated or invalid.
    """
    codec = HuffmanCodec(on_stage=_print_stage if verbose else None)
    _check_distinct_paths(input_path, output_path)
    on_prog = None if hide_progress else FileProgress("Decompressing", input_path)
    with open(input_path, "rb") as src, open(output_path, "wb") as dst:
        try:
            written = codec.decompress(src, dst, on_progress=on_prog)
        except Exception:
            dst.close()
            _remove_partial(output_path)
            raise
    if on_prog is not None:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print("Decompressed size: ", _fmt_bytes(written))
    return written


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI tool.

    :param argv: Command-line arguments, ``sys.argv[1:]`` if omitted.
    :type argv: Optional[List[str]]
    :returns: Process exit status (0 on success, 1 on failure).
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.cmd in ["compress", "c"]:
        action, label = compress_file, "Compression"
    else:
        action, label = decompress_file, "Decompression"

    try:
        action(args.input, args.output, args.no_progress, args.verbose)
    except FileNotFoundError as e:
        print(f"[!] File not found: {e.filename}")
        return 1
    except OSError as e:
        print(f"[!] I/O error: {e}")
        return 1
    except HuffmanError as e:
        print(f"[!] {label} failed: {e}")
        return 1
    except ValueError as e:
        print(f"[!] {e}")
        return 1
    print(f"{label} successful!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
