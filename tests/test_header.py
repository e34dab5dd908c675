import io
import struct
import pytest

from errors import MalformedHeaderError
from header import COUNT_SIZE, ENTRY_SIZE, read_header, write_header


def test_header_layout_is_little_endian():
    out = io.BytesIO()
    written = write_header(out, {ord("b"): 2, ord("a"): 3})
    expected = (
        struct.pack("<I", 2)
        + b"a" + struct.pack("<Q", 3)
        + b"b" + struct.pack("<Q", 2)
    )
    assert out.getvalue() == expected
    assert written == len(expected) == COUNT_SIZE + 2 * ENTRY_SIZE


def test_header_roundtrip_full_alphabet():
    freqs = {s: s * 1000 + 1 for s in range(256)}
    freqs[7] = 2 ** 40
    out = io.BytesIO()
    write_header(out, freqs)
    stream = io.BytesIO(out.getvalue() + b"\xFF\xEE")
    assert read_header(stream) == freqs
    assert stream.read() == b"\xFF\xEE"


def test_empty_table_writes_nothing_and_reads_back_empty():
    out = io.BytesIO()
    assert write_header(out, {}) == 0
    assert out.getvalue() == b""
    assert read_header(io.BytesIO(b"")) == {}


def test_truncated_entries_raise():
    out = io.BytesIO()
    write_header(out, {1: 5, 2: 6, 3: 7})
    truncated = out.getvalue()[:-ENTRY_SIZE - 1]
    with pytest.raises(MalformedHeaderError):
        read_header(io.BytesIO(truncated))


def test_truncated_count_raises():
    with pytest.raises(MalformedHeaderError):
        read_header(io.BytesIO(b"\x01\x00"))


@pytest.mark.parametrize("count", [0, 257, 0xFFFFFFFF])
def test_invalid_count_raises(count):
    with pytest.raises(MalformedHeaderError):
        read_header(io.BytesIO(struct.pack("<I", count)))


def test_duplicate_symbol_raises():
    data = struct.pack("<I", 2) + struct.pack("<BQ", 9, 1) * 2
    with pytest.raises(MalformedHeaderError):
        read_header(io.BytesIO(data))


def test_zero_frequency_raises():
    data = struct.pack("<I", 1) + struct.pack("<BQ", 9, 0)
    with pytest.raises(MalformedHeaderError):
        read_header(io.BytesIO(data))


def test_malformed_header_is_value_error():
    with pytest.raises(ValueError):
        read_header(io.BytesIO(b"\x05\x00\x00\x00"))
