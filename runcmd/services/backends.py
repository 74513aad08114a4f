"""Backend sessions: the local process and the remote SSH session a worker drives.

Both backends expose the same shape: three pipe handles, plus ``start``,
``wait`` and ``close`` coroutines. ``wait`` reports an ExitStatus and caches
it, so it can be awaited again after the command has terminated. ``close``
is idempotent.
"""

import asyncio
import errno
import logging
import signal
from typing import TYPE_CHECKING

import asyncssh

from runcmd.errors import ExecutionError, ResourceAcquisitionError
from runcmd.models import ExitStatus
from runcmd.pipes import PipeReader, PipeWriter

if TYPE_CHECKING:
    from asyncio.subprocess import Process

logger = logging.getLogger(__name__)

# Spawn failures caused by exhausted descriptors or process slots
_RESOURCE_ERRNOS = frozenset({errno.EMFILE, errno.ENFILE, errno.EAGAIN, errno.ENOMEM})


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


class LocalProcessSession:
    """A command executed as a local OS process, without a shell."""

    def __init__(self, argv: list[str]) -> None:
        """Initialize local process session.

        Args:
            argv: Program name followed by its arguments
        """
        self.argv = argv
        self.stdin = PipeWriter("stdin")
        self.stdout = PipeReader("stdout")
        self.stderr = PipeReader("stderr")
        self._process: "Process | None" = None
        self._exit_status: ExitStatus | None = None

    @property
    def pid(self) -> int | None:
        """OS process id, once started."""
        return self._process.pid if self._process is not None else None

    async def start(self) -> None:
        """Spawn the process with all three streams piped.

        Raises:
            ResourceAcquisitionError: If pipes or a process slot could not be allocated
            ExecutionError: If the program could not be executed
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *self.argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            if e.errno in _RESOURCE_ERRNOS:
                raise ResourceAcquisitionError("cannot allocate process pipes", e) from e
            raise ExecutionError(e) from e

        self._process = process
        self.stdin.attach(process.stdin)
        self.stdout.attach(process.stdout)
        self.stderr.attach(process.stderr)
        logger.debug("Started local process %s (pid=%d)", self.argv[0], process.pid)

    async def wait(self) -> ExitStatus:
        """Wait for the process to exit and report how it terminated."""
        if self._exit_status is not None:
            return self._exit_status
        if self._process is None:
            raise ExecutionError("process not started")

        returncode = await self._process.wait()
        if returncode < 0:
            self._exit_status = ExitStatus(code=None, signal=_signal_name(-returncode))
        else:
            self._exit_status = ExitStatus(code=returncode)
        logger.debug(
            "Local process %s (pid=%d) finished: %s",
            self.argv[0],
            self._process.pid,
            self._exit_status,
        )
        return self._exit_status

    async def close(self) -> None:
        """Release the process if wait() never reported its exit.

        A process that was waited is already reaped and this is a no-op.
        Otherwise the subprocess transport is closed, which closes the three
        pipes and kills the process if it is still running.
        """
        if self._process is None or self._exit_status is not None:
            return
        transport = self._process._transport
        if not transport.is_closing():
            logger.debug(
                "Closing unwaited local process %s (pid=%d)", self.argv[0], self._process.pid
            )
            transport.close()

    def __str__(self) -> str:
        return " ".join(self.argv)


class RemoteShellSession:
    """A command executed by the remote user's shell over one SSH session.

    Every instance opens its own session channel on the shared connection.
    """

    def __init__(self, conn: asyncssh.SSHClientConnection, command: str) -> None:
        """Initialize remote shell session.

        Args:
            conn: Established SSH connection to open the session on
            command: Command text passed verbatim to the remote shell
        """
        self.command = command
        self.stdin = PipeWriter("stdin")
        self.stdout = PipeReader("stdout")
        self.stderr = PipeReader("stderr")
        self._conn = conn
        self._process: asyncssh.SSHClientProcess | None = None
        self._exit_status: ExitStatus | None = None
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Check if the session has been closed."""
        return self._closed

    async def start(self) -> None:
        """Open the session channel and execute the command on it.

        Raises:
            ResourceAcquisitionError: If the session channel could not be opened
            ExecutionError: If the remote side refused to run the command
        """
        if self._closed:
            raise ResourceAcquisitionError("SSH session already closed")
        try:
            # encoding=None keeps the streams in bytes, like local pipes
            process = await self._conn.create_process(self.command, encoding=None)
        except (asyncssh.ChannelOpenError, asyncssh.DisconnectError) as e:
            raise ResourceAcquisitionError("cannot open SSH session", e) from e
        except (OSError, asyncssh.Error) as e:
            raise ExecutionError(e) from e

        self._process = process
        self.stdin.attach(process.stdin)
        self.stdout.attach(process.stdout)
        self.stderr.attach(process.stderr)
        logger.debug("Started remote command: %s", self.command)

    async def wait(self) -> ExitStatus:
        """Wait for the remote command to finish and report how it terminated.

        Raises:
            ExecutionError: If the session broke before reporting a status
        """
        if self._exit_status is not None:
            return self._exit_status
        if self._process is None:
            raise ExecutionError("session not started")

        try:
            completed = await self._process.wait(check=False)
        except (OSError, asyncssh.Error) as e:
            raise ExecutionError(e) from e

        if completed.exit_signal:
            name = completed.exit_signal[0]
            if not name.startswith("SIG"):
                name = f"SIG{name}"
            self._exit_status = ExitStatus(code=None, signal=name)
        else:
            self._exit_status = ExitStatus(code=completed.exit_status)
        logger.debug("Remote command finished: %s (%s)", self.command, self._exit_status)
        return self._exit_status

    async def close(self) -> None:
        """Close the session channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._process is None:
            return
        self._process.close()
        await self._process.wait_closed()
        logger.debug("Closed SSH session for: %s", self.command)

    def __str__(self) -> str:
        return self.command
