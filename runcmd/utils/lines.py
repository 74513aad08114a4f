"""Captured output helpers."""


def decode_output(data: bytes | str | None, encoding: str = "utf-8") -> str:
    """Decode stream bytes, replacing undecodable sequences."""
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(encoding, errors="replace")
    return data


def split_output_lines(data: bytes | str | None, encoding: str = "utf-8") -> list[str]:
    """Split one stream's captured output into lines.

    Leading and trailing newlines are trimmed before splitting, so a stream
    ending in "\\n" does not produce a trailing empty line. Blank lines in
    the middle are kept. A stream holding only newlines yields one empty
    line.

    Args:
        data: Raw stream contents
        encoding: Text encoding of the stream

    Returns:
        List of lines, empty when the stream produced nothing
    """
    text = decode_output(data, encoding)
    if not text:
        return []
    return text.strip("\n").split("\n")
