"""Protocol interfaces shared by the local and remote implementations.

Callers depend on ``Runner`` and ``Worker`` rather than on the concrete
classes, so local and remote execution are interchangeable:

    async def uptime(runner: Runner) -> list[str]:
        worker = await runner.command("uptime")
        return await worker.run()

    await uptime(new_local_runner())
    await uptime(await new_remote_key_auth_runner("deploy", "web1:22", "~/.ssh/id_ed25519"))

``BackendSession`` is the contract the worker needs from a backend; any
object with this shape can be driven by ``CommandWorker``, which is how the
tests substitute in-memory sessions.
"""

from typing import Protocol, runtime_checkable

from runcmd.models import ExitStatus
from runcmd.pipes import PipeReader, PipeWriter


@runtime_checkable
class BackendSession(Protocol):
    """A local process or remote session that has not been started yet."""

    stdin: PipeWriter
    stdout: PipeReader
    stderr: PipeReader

    async def start(self) -> None:
        """Launch the command and attach the three pipes."""
        ...

    async def wait(self) -> ExitStatus:
        """Wait for termination. Repeated calls return the cached status."""
        ...

    async def close(self) -> None:
        """Release the backend. Must be a no-op when already closed."""
        ...


@runtime_checkable
class Worker(Protocol):
    """One command invocation."""

    async def start(self) -> None:
        """Start the command."""
        ...

    async def wait(self) -> None:
        """Wait for the command to finish and release its resources.

        Raises:
            ExecutionError: If the command exits abnormally
        """
        ...

    async def run(self) -> list[str]:
        """Start, collect stdout then stderr lines, and wait."""
        ...

    def stdin_pipe(self) -> PipeWriter:
        """Raw stdin handle."""
        ...

    def stdout_pipe(self) -> PipeReader:
        """Raw stdout handle."""
        ...

    def stderr_pipe(self) -> PipeReader:
        """Raw stderr handle."""
        ...


@runtime_checkable
class Runner(Protocol):
    """Factory producing workers for one execution target."""

    async def command(self, cmd: str) -> Worker:
        """Prepare a worker for cmd without starting it.

        Raises:
            InvalidArgumentError: If cmd is empty
            ResourceAcquisitionError: If the backend cannot be acquired
        """
        ...
