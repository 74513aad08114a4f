"""Command worker: one command invocation driven over a backend session.

The worker implements the lifecycle that both backends share:

- ``start()`` launches the command.
- ``wait()`` drains stderr to end-of-stream, closes stdin, waits for the
  backend to terminate and then releases the backend, in that order. A
  failure to close stdin or an abnormal exit is reported as an
  ExecutionError carrying the captured stderr text.
- ``run()`` is start, read all of stdout, read all of stderr, wait.

Stderr is drained through a single accumulating buffer, so the bytes read
by ``run()`` are the same ones ``wait()`` uses for its diagnostic, and a
second drain of an exhausted stream returns immediately.
"""

import logging

from runcmd.errors import ExecutionError, StreamError, WorkerStateError
from runcmd.models import WorkerState
from runcmd.pipes import PipeReader, PipeWriter
from runcmd.protocols import BackendSession
from runcmd.utils.lines import decode_output, split_output_lines

logger = logging.getLogger(__name__)


class CommandWorker:
    """Runs one command on a local or remote backend session."""

    def __init__(self, session: BackendSession, encoding: str = "utf-8") -> None:
        """Initialize worker.

        Args:
            session: Backend session with unstarted, unbound pipes
            encoding: Encoding used to decode captured output
        """
        self._session = session
        self._encoding = encoding
        self._state = WorkerState.CREATED
        self._stderr_data = bytearray()

    @property
    def state(self) -> WorkerState:
        """Current lifecycle state."""
        return self._state

    @property
    def session(self) -> BackendSession:
        """Backend session this worker drives."""
        return self._session

    def stdin_pipe(self) -> PipeWriter:
        """Command's stdin, for callers feeding input themselves."""
        return self._session.stdin

    def stdout_pipe(self) -> PipeReader:
        """Command's stdout, for callers reading output themselves."""
        return self._session.stdout

    def stderr_pipe(self) -> PipeReader:
        """Command's stderr, for callers reading output themselves."""
        return self._session.stderr

    async def start(self) -> None:
        """Start the command.

        Raises:
            WorkerStateError: If the command was already started
            ResourceAcquisitionError: If the backend could not allocate its streams
            ExecutionError: If the backend could not launch the command
        """
        if self._state is not WorkerState.CREATED:
            raise WorkerStateError("command already started")
        logger.debug("Starting command: %s", self._session)
        await self._session.start()
        self._state = WorkerState.STARTED

    async def wait(self) -> None:
        """Wait for the command to finish and release its backend.

        Stderr is drained to end-of-stream before stdin is closed, so the
        command's diagnostic output is captured even if the caller never
        read it. Stdout is not drained: a caller who does not read stdout
        from a command that writes more than the pipe buffer holds will
        block here. Likewise, a command that reads stdin until end-of-input
        must have its stdin pipe closed by the caller before wait(), since
        stderr is drained first.

        Calling wait() again after it has completed reports the same
        outcome without touching the exhausted streams.

        Raises:
            WorkerStateError: If the command was never started
            StreamError: If draining stderr fails
            ExecutionError: If closing stdin fails or the command exits
                abnormally; the error carries the captured stderr text
        """
        if self._state is WorkerState.CREATED:
            raise WorkerStateError("command not started")

        try:
            await self._drain_stderr()
            diagnostic = decode_output(bytes(self._stderr_data), self._encoding)

            try:
                await self._session.stdin.close()
            except StreamError as e:
                raise ExecutionError(e, diagnostic) from e

            try:
                status = await self._session.wait()
            except ExecutionError as e:
                raise ExecutionError(e.cause, diagnostic, e.exit_status) from e

            if not status.success:
                logger.debug("Command failed: %s (%s)", self._session, status)
                raise ExecutionError(status.description, diagnostic, status)
        finally:
            self._state = WorkerState.WAITED
            await self._session.close()

    async def run(self) -> list[str]:
        """Run the command to completion and collect its output lines.

        Stdout is read to end-of-stream first, then stderr. The two streams
        are not drained concurrently: a command that fills both pipe buffers
        before exiting can block. Use the pipe accessors and read the
        streams concurrently for such commands.

        Returns:
            Stdout lines followed by stderr lines

        Raises:
            ExecutionError: If the command fails to start or exits abnormally;
                output read so far is discarded
            StreamError: If reading stdout or stderr fails
        """
        try:
            await self.start()
            stdout_data = await self._session.stdout.read()
            await self._drain_stderr()
            await self.wait()
        finally:
            await self._session.close()

        return split_output_lines(stdout_data, self._encoding) + split_output_lines(
            bytes(self._stderr_data), self._encoding
        )

    async def _drain_stderr(self) -> None:
        """Read the remainder of stderr into the diagnostic buffer."""
        data = await self._session.stderr.read()
        if data:
            self._stderr_data.extend(data)

    def __repr__(self) -> str:
        return f"<CommandWorker {self._session} state={self._state.value}>"
