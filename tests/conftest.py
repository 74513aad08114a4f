"""Shared fixtures for runcmd tests."""

import asyncio
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def script(tmp_path: Path) -> Callable[[str], str]:
    """Write a Python script and return the command text that runs it.

    Local runners split command text on whitespace, so tests drive real
    processes through small scripts instead of ``sh -c`` one-liners.
    """
    counter = 0

    def _make(body: str) -> str:
        nonlocal counter
        counter += 1
        path = tmp_path / f"cmd_{counter}.py"
        path.write_text(textwrap.dedent(body))
        return f"{sys.executable} {path}"

    return _make


def make_reader(data: bytes = b"") -> asyncio.StreamReader:
    """Stream already holding data and end-of-stream.

    Must be called while an event loop is running.
    """
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    reader.feed_eof()
    return reader


def make_writer() -> MagicMock:
    """Stdin stand-in supporting write_eof, like SSHWriter."""
    writer = MagicMock()
    writer.can_write_eof.return_value = True
    writer.drain = AsyncMock()
    return writer


def make_ssh_process(
    stdout: bytes = b"",
    stderr: bytes = b"",
    exit_status: int | None = 0,
    exit_signal: tuple[str, bool, str, str] | None = None,
) -> MagicMock:
    """Mock asyncssh.SSHClientProcess with fed output streams."""
    process = MagicMock()
    process.stdin = make_writer()
    process.stdout = make_reader(stdout)
    process.stderr = make_reader(stderr)
    process.wait = AsyncMock(
        return_value=MagicMock(exit_status=exit_status, exit_signal=exit_signal)
    )
    process.close = MagicMock()
    process.wait_closed = AsyncMock()
    return process


def make_ssh_connection(process: Any = None) -> MagicMock:
    """Mock asyncssh.SSHClientConnection whose sessions return process."""
    conn = MagicMock()
    conn.create_process = AsyncMock(return_value=process)
    conn.is_closed = MagicMock(return_value=False)
    conn.close = MagicMock()
    conn.wait_closed = AsyncMock()
    return conn
