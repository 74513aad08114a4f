"""Tests for remote command execution over mocked asyncssh sessions."""

import asyncssh
import pytest
from conftest import make_ssh_connection, make_ssh_process

from runcmd.errors import (
    ExecutionError,
    InvalidArgumentError,
    ResourceAcquisitionError,
    WorkerStateError,
)
from runcmd.models import SSHTarget, WorkerState
from runcmd.protocols import Runner
from runcmd.services.backends import RemoteShellSession
from runcmd.services.runners import RemoteRunner


@pytest.mark.asyncio
async def test_command_prepares_session_without_opening_it() -> None:
    """command() wires pipes but does not exec anything yet."""
    conn = make_ssh_connection(make_ssh_process())
    runner = RemoteRunner(conn)

    worker = await runner.command("ls -la /var/log | head")

    assert isinstance(runner, Runner)
    assert isinstance(worker.session, RemoteShellSession)
    assert worker.session.command == "ls -la /var/log | head"
    assert worker.stdin_pipe() is not None
    assert worker.stdout_pipe() is not None
    assert worker.stderr_pipe() is not None
    conn.create_process.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("cmd", ["", "  "])
async def test_empty_command_rejected(cmd: str) -> None:
    """Empty command text fails before any session is opened."""
    conn = make_ssh_connection(make_ssh_process())

    with pytest.raises(InvalidArgumentError):
        await RemoteRunner(conn).command(cmd)
    conn.create_process.assert_not_called()


@pytest.mark.asyncio
async def test_run_executes_command_verbatim() -> None:
    """Command text is sent unmodified, with byte streams."""
    process = make_ssh_process(stdout=b"a\nb\n")
    conn = make_ssh_connection(process)
    worker = await RemoteRunner(conn).command("echo 'a b' && exit 0")

    lines = await worker.run()

    assert lines == ["a", "b"]
    conn.create_process.assert_awaited_once_with("echo 'a b' && exit 0", encoding=None)
    process.stdin.write_eof.assert_called_once()
    process.close.assert_called_once()
    process.wait_closed.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_stderr_only_success() -> None:
    """Stderr text of a successful remote command is output."""
    conn = make_ssh_connection(make_ssh_process(stderr=b"err1\nerr2"))
    worker = await RemoteRunner(conn).command("cmd")

    assert await worker.run() == ["err1", "err2"]


@pytest.mark.asyncio
async def test_run_failure_composes_stderr() -> None:
    """Non-zero remote exit includes the status and stderr text."""
    process = make_ssh_process(stderr=b"boom", exit_status=1)
    worker = await RemoteRunner(make_ssh_connection(process)).command("false")

    with pytest.raises(ExecutionError) as exc_info:
        await worker.run()

    assert str(exc_info.value) == "exit status 1\nboom"
    process.close.assert_called_once()


@pytest.mark.asyncio
async def test_exit_signal_reported() -> None:
    """Remote signal termination is described with the SIG prefix."""
    process = make_ssh_process(exit_status=-1, exit_signal=("TERM", False, "", ""))
    worker = await RemoteRunner(make_ssh_connection(process)).command("sleep 100")

    with pytest.raises(ExecutionError, match="signal: SIGTERM"):
        await worker.run()


@pytest.mark.asyncio
async def test_missing_exit_status_is_failure() -> None:
    """A session closed without an exit status did not succeed."""
    process = make_ssh_process(exit_status=None)
    worker = await RemoteRunner(make_ssh_connection(process)).command("reboot")

    with pytest.raises(ExecutionError, match="exited without exit status"):
        await worker.run()


@pytest.mark.asyncio
async def test_session_closed_after_failed_wait() -> None:
    """The session is closed on failure and cannot be used again."""
    process = make_ssh_process(stderr=b"nope", exit_status=127)
    worker = await RemoteRunner(make_ssh_connection(process)).command("missing")
    await worker.start()

    with pytest.raises(ExecutionError):
        await worker.wait()

    assert worker.session.is_closed
    process.close.assert_called_once()
    with pytest.raises(WorkerStateError):
        await worker.start()
    with pytest.raises(ResourceAcquisitionError):
        await worker.session.start()


@pytest.mark.asyncio
async def test_wait_twice_closes_once() -> None:
    """Repeated wait() re-drains nothing and does not close twice."""
    process = make_ssh_process(stdout=b"ok\n")
    worker = await RemoteRunner(make_ssh_connection(process)).command("true")
    await worker.start()

    await worker.wait()
    await worker.wait()

    process.wait.assert_awaited_once()
    process.close.assert_called_once()


@pytest.mark.asyncio
async def test_each_command_gets_its_own_session() -> None:
    """Sessions are never reused across commands."""
    first, second = make_ssh_process(stdout=b"1"), make_ssh_process(stdout=b"2")
    conn = make_ssh_connection()
    conn.create_process.side_effect = [first, second]
    runner = RemoteRunner(conn)

    assert await (await runner.command("echo 1")).run() == ["1"]
    assert await (await runner.command("echo 2")).run() == ["2"]

    assert conn.create_process.await_count == 2
    first.close.assert_called_once()
    second.close.assert_called_once()


@pytest.mark.asyncio
async def test_channel_open_failure_is_resource_error() -> None:
    """Failing to open a session channel is a resource acquisition error."""
    conn = make_ssh_connection()
    conn.create_process.side_effect = asyncssh.ChannelOpenError(2, "SSH connection closed")
    worker = await RemoteRunner(conn).command("uptime")

    with pytest.raises(ResourceAcquisitionError, match="cannot open SSH session"):
        await worker.run()
    assert worker.state is WorkerState.CREATED


@pytest.mark.asyncio
async def test_connection_lost_during_wait() -> None:
    """A broken session during wait is an execution error; session still closed."""
    process = make_ssh_process(stderr=b"partial")
    process.wait.side_effect = asyncssh.ConnectionLost("Connection lost")
    worker = await RemoteRunner(make_ssh_connection(process)).command("long-job")

    with pytest.raises(ExecutionError) as exc_info:
        await worker.run()

    assert isinstance(exc_info.value.cause, asyncssh.ConnectionLost)
    assert exc_info.value.diagnostic == "partial"
    process.close.assert_called_once()


@pytest.mark.asyncio
async def test_stdin_eof_after_remote_exit_is_not_failure() -> None:
    """A channel that no longer accepts data is a graceful end of input."""
    process = make_ssh_process(stdout=b"done\n")
    process.stdin.write_eof.side_effect = BrokenPipeError("Channel not open for sending")
    worker = await RemoteRunner(make_ssh_connection(process)).command("true")

    assert await worker.run() == ["done"]


@pytest.mark.asyncio
async def test_close_connection_blocks_new_commands() -> None:
    """After close_connection(), command() fails with a resource error."""
    conn = make_ssh_connection(make_ssh_process())
    runner = RemoteRunner(conn, target=SSHTarget("deploy", "web1"))

    await runner.close_connection()
    await runner.close_connection()

    assert runner.is_closed
    conn.close.assert_called_once()
    conn.wait_closed.assert_awaited_once()
    with pytest.raises(ResourceAcquisitionError, match="SSH connection is closed"):
        await runner.command("uptime")


@pytest.mark.asyncio
async def test_connection_dropped_by_server_blocks_new_commands() -> None:
    """A transport that reports closed fails command() before any session."""
    conn = make_ssh_connection(make_ssh_process())
    conn.is_closed.return_value = True
    runner = RemoteRunner(conn, target=SSHTarget("deploy", "web1"))

    with pytest.raises(ResourceAcquisitionError, match="SSH connection is closed"):
        await runner.command("uptime")

    assert not runner.is_closed
    conn.create_process.assert_not_called()


@pytest.mark.asyncio
async def test_async_context_manager_closes_connection() -> None:
    """Leaving the runner's context closes its connection."""
    conn = make_ssh_connection(make_ssh_process(stdout=b"up\n"))

    async with RemoteRunner(conn) as runner:
        assert await (await runner.command("uptime")).run() == ["up"]

    conn.close.assert_called_once()
