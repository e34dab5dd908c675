import pytest


def test_fmt_pct_and_bytes(m):
    assert m._fmt_pct(0, 0) == "-"
    assert m._fmt_pct(1, 8) == " 12.5%"
    assert m._fmt_pct(10, 10) == "100.0%"
    assert m._fmt_pct(3, 2) == "150.0%"

    assert m._fmt_bytes(0) == "0 B"
    assert m._fmt_bytes(1023) == "1023 B"
    assert m._fmt_bytes(1024) == "1.00 KiB"
    assert m._fmt_bytes(5 * 1024 ** 3 // 2) == "2.50 GiB"


def test_print_progress_pads_line(capsys, m):
    m._print_progress("Compressing a.txt 100.0%")
    m._print_progress("x")
    out = capsys.readouterr().out
    width = m.PROGRESS_WIDTH
    assert out == (
        "\r" + "Compressing a.txt 100.0%".ljust(width) + "\r" + "x".ljust(width)
    )


def test_file_progress_calls_bucketed(no_progress, m):
    p = m.FileProgress("Compressing", "x.txt")
    p(0, 100)
    p(0, 100)
    p(10, 100)
    p(10, 100)
    p(19, 100)
    p(19, 100)
    p(5, 0)
    assert len(no_progress) == 3
    assert all(line.startswith("Compressing x.txt") for line in no_progress)


def test_cli_parser_accepts_subcommands(m):
    parser = m.get_parser()
    ns = parser.parse_args(["compress", "in.bin", "out.huf"])
    assert ns.cmd in ("compress", "c")
    assert not ns.no_progress and not ns.verbose
    ns2 = parser.parse_args(["d", "in.huf", "out.bin", "-P", "-v"])
    assert ns2.cmd in ("decompress", "d")
    assert ns2.no_progress and ns2.verbose


def test_cli_parser_requires_paths(m):
    parser = m.get_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["compress", "only-input"])
