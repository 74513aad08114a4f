"""Pipe handles for a command's stdin, stdout and stderr.

A worker hands out its pipes as soon as it is created, but the streams
behind them only exist once the backend has started: asyncio allocates the
OS pipes in the same call that spawns a local process, and asyncssh opens the
channel streams when the remote command is executed. The handles below are
created unbound and attached to the live streams by the backend on start.

Both asyncio's ``StreamReader``/``StreamWriter`` and asyncssh's
``SSHReader``/``SSHWriter`` satisfy the small stream surface used here.
"""

import logging
from typing import Any

import asyncssh

from runcmd.errors import StreamError

logger = logging.getLogger(__name__)

# Errors a stream may raise before normal end-of-stream
_STREAM_ERRORS = (OSError, asyncssh.Error)

# Raised when the other side has already gone away; for stdin this is EOF
_EOF_ERRORS = (BrokenPipeError, ConnectionResetError)


class _Pipe:
    def __init__(self, name: str) -> None:
        self.name = name
        self._stream: Any = None

    def attach(self, stream: Any) -> None:
        """Bind this handle to a live stream."""
        self._stream = stream

    @property
    def is_attached(self) -> bool:
        """Check if the backend has bound a stream to this pipe."""
        return self._stream is not None

    def _require_stream(self) -> Any:
        if self._stream is None:
            raise StreamError(f"{self.name} pipe is not connected; start the command first")
        return self._stream

    def __repr__(self) -> str:
        state = "attached" if self.is_attached else "detached"
        return f"<{type(self).__name__} {self.name} {state}>"


class PipeReader(_Pipe):
    """Readable end of a command's stdout or stderr.

    Once end-of-stream has been seen, further reads return ``b""`` without
    touching the underlying stream, so an exhausted pipe can be drained any
    number of times.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._eof = False

    async def read(self, n: int = -1) -> bytes:
        """Read up to n bytes, or everything up to end-of-stream when n < 0.

        Raises:
            StreamError: If the pipe is not connected or the read fails
        """
        if self._eof:
            return b""
        stream = self._require_stream()
        try:
            data = await stream.read(n)
        except _STREAM_ERRORS as e:
            raise StreamError(f"reading {self.name} failed: {e}") from e

        if n < 0 or not data:
            self._eof = True
        return data

    async def readline(self) -> bytes:
        """Read one line, including its trailing newline if present."""
        if self._eof:
            return b""
        stream = self._require_stream()
        try:
            line = await stream.readline()
        except (*_STREAM_ERRORS, ValueError) as e:
            raise StreamError(f"reading {self.name} failed: {e}") from e

        if not line:
            self._eof = True
        return line

    def at_eof(self) -> bool:
        """Check if end-of-stream has been reached."""
        if self._eof:
            return True
        return self._stream is not None and self._stream.at_eof()


class PipeWriter(_Pipe):
    """Writable end of a command's stdin."""

    def __init__(self, name: str = "stdin") -> None:
        super().__init__(name)
        self._closed = False

    def write(self, data: bytes) -> None:
        """Queue data for the command's stdin.

        Raises:
            StreamError: If the pipe is not connected or already closed
        """
        if self._closed:
            raise StreamError(f"{self.name} pipe is closed")
        self._require_stream().write(data)

    async def drain(self) -> None:
        """Wait until queued data has been flushed to the command."""
        stream = self._require_stream()
        try:
            await stream.drain()
        except _STREAM_ERRORS as e:
            raise StreamError(f"writing {self.name} failed: {e}") from e

    async def close(self) -> None:
        """Signal end-of-input to the command.

        Closing a pipe whose reader has already gone away is treated as a
        graceful end of input. Closing twice is a no-op.

        Raises:
            StreamError: If the pipe is not connected, or closing fails for
                any other reason
        """
        if self._closed:
            return
        stream = self._require_stream()
        self._closed = True

        try:
            # write_eof keeps an SSH channel open for reading; close() would not
            if stream.can_write_eof():
                stream.write_eof()
            else:
                stream.close()
        except _EOF_ERRORS as e:
            logger.debug("%s already closed by peer: %s", self.name, e)
        except _STREAM_ERRORS as e:
            raise StreamError(f"closing {self.name} failed: {e}") from e

    def is_closing(self) -> bool:
        """Check if the pipe has been closed."""
        return self._closed
