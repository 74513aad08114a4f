"""Tests for captured output line splitting."""

from runcmd.utils.lines import decode_output, split_output_lines


def test_trailing_newline_trimmed() -> None:
    """Trailing newline does not produce an empty line."""
    assert split_output_lines(b"a\nb\n") == ["a", "b"]


def test_no_trailing_newline() -> None:
    """Output without a final newline splits the same way."""
    assert split_output_lines(b"err1\nerr2") == ["err1", "err2"]


def test_empty_stream_has_no_lines() -> None:
    """An empty stream contributes nothing."""
    assert split_output_lines(b"") == []
    assert split_output_lines(None) == []


def test_leading_newlines_trimmed_inner_blank_kept() -> None:
    """Only the outer newlines are trimmed."""
    assert split_output_lines(b"\n\na\n\nb\n") == ["a", "", "b"]


def test_newline_only_stream_yields_one_empty_line() -> None:
    """A stream of bare newlines is not empty."""
    assert split_output_lines(b"\n\n") == [""]


def test_undecodable_bytes_replaced() -> None:
    """Invalid UTF-8 does not raise."""
    assert decode_output(b"ok\xff") == "ok�"


def test_str_passthrough() -> None:
    """Already-decoded text is split as is."""
    assert split_output_lines("x\ny\n") == ["x", "y"]
