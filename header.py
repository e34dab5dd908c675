"""Container header codec.

Header layout (little-endian):
- Symbol count: uint32
- For each symbol, in ascending symbol order:
- - Symbol: uint8
- - Frequency: uint64

An empty frequency table is written as nothing at all, so the container of an
empty input is an empty file.
"""
import struct
from typing import BinaryIO, Dict

from errors import MalformedHeaderError

COUNT_FORMAT = "<I"  #: Symbol count field
ENTRY_FORMAT = "<BQ"  #: One (symbol, frequency) entry
COUNT_SIZE = struct.calcsize(COUNT_FORMAT)
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)
MAX_SYMBOLS = 256


def write_header(stream: BinaryIO, frequencies: Dict[int, int]) -> int:
    """Serialize a frequency table.

    :param stream: Writable binary stream.
    :type stream: BinaryIO
    :param frequencies: Mapping from symbol (0-255) to count.
    :type frequencies: Dict[int, int]
    :returns: Number of bytes written.
    :rtype: int
    """
    if not frequencies:
        return 0
    data = bytearray(struct.pack(COUNT_FORMAT, len(frequencies)))
    for symbol in sorted(frequencies):
        data += struct.pack(ENTRY_FORMAT, symbol, frequencies[symbol])
    stream.write(data)
    return len(data)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read ``size`` bytes, fewer only if the stream ends first."""
    data = b""
    while len(data) < size:
        chunk = stream.read(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def read_header(stream: BinaryIO) -> Dict[int, int]:
    """Read a frequency table written by :func:`write_header`.

    :param stream: Readable binary stream positioned at the container start.
    :type stream: BinaryIO
    :returns: Mapping from symbol to count in ascending symbol order, or
        ``{}`` if the stream is already at its end (empty container).
    :rtype: Dict[int, int]
    :raises MalformedHeaderError: If the header is truncated, declares no
        symbols or more than 256, repeats a symbol or holds a zero frequency.
    """
    raw = _read_exact(stream, COUNT_SIZE)
    if not raw:
        return {}
    if len(raw) < COUNT_SIZE:
        raise MalformedHeaderError("Truncated symbol count")
    (count,) = struct.unpack(COUNT_FORMAT, raw)
    if count == 0 or count > MAX_SYMBOLS:
        raise MalformedHeaderError(f"Invalid symbol count: {count}")

    raw = _read_exact(stream, count * ENTRY_SIZE)
    if len(raw) < count * ENTRY_SIZE:
        raise MalformedHeaderError(
            f"Header declares {count} symbols but only "
            f"{len(raw) // ENTRY_SIZE} are present"
        )

    frequencies: Dict[int, int] = {}
    for symbol, freq in struct.iter_unpack(ENTRY_FORMAT, raw):
        if symbol in frequencies:
            raise MalformedHeaderError(f"Duplicate symbol in header: {symbol}")
        if freq == 0:
            raise MalformedHeaderError(f"Zero frequency for symbol {symbol}")
        frequencies[symbol] = freq
    return dict(sorted(frequencies.items()))
