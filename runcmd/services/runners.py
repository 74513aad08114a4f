"""Runners: factories that turn command text into workers.

``LocalRunner`` spawns local processes; ``RemoteRunner`` opens a new SSH
session per command on one authenticated connection.
"""

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

import asyncssh

from runcmd.config import HostKeyVerifier, Settings
from runcmd.errors import InvalidArgumentError, ResourceAcquisitionError
from runcmd.models import SSHTarget
from runcmd.services.backends import LocalProcessSession, RemoteShellSession
from runcmd.services.connection import connect_with_key, connect_with_password
from runcmd.services.worker import CommandWorker

logger = logging.getLogger(__name__)


def _require_command(cmd: str) -> str:
    if not cmd or not cmd.strip():
        raise InvalidArgumentError("command cannot be empty")
    return cmd


class LocalRunner:
    """Runs commands as local processes.

    Command text is split on whitespace into a program and its arguments;
    no shell is involved, so quoting and shell syntax are not interpreted.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    async def command(self, cmd: str) -> CommandWorker:
        """Prepare a worker for cmd without starting it.

        Raises:
            InvalidArgumentError: If cmd is empty
        """
        argv = _require_command(cmd).split()
        return CommandWorker(LocalProcessSession(argv), encoding=self.encoding)


class RemoteRunner:
    """Runs commands over SSH sessions on one authenticated connection."""

    def __init__(
        self,
        conn: asyncssh.SSHClientConnection,
        target: SSHTarget | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """Initialize remote runner.

        Args:
            conn: Established, authenticated connection (owned by the runner)
            target: Endpoint the connection was dialed to, for logging
            encoding: Encoding used to decode captured output
        """
        self.target = target
        self.encoding = encoding
        self._conn = conn
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Check if close_connection() has been called."""
        return self._closed

    async def command(self, cmd: str) -> CommandWorker:
        """Prepare a worker on a new session for cmd without starting it.

        The command text is passed verbatim to the remote user's shell.

        Raises:
            InvalidArgumentError: If cmd is empty
            ResourceAcquisitionError: If the connection has been closed, by
                close_connection() or by the remote end
        """
        _require_command(cmd)
        if self._closed:
            raise ResourceAcquisitionError("SSH connection is closed")
        if self._conn.is_closed():
            logger.warning("SSH connection to %s was lost", self.target or "remote host")
            raise ResourceAcquisitionError("SSH connection is closed")
        return CommandWorker(RemoteShellSession(self._conn, cmd), encoding=self.encoding)

    async def close_connection(self) -> None:
        """Close the underlying SSH connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        logger.info("Closing SSH connection to %s", self.target or "remote host")
        self._conn.close()
        await self._conn.wait_closed()

    async def __aenter__(self) -> "RemoteRunner":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close_connection()


def new_local_runner(settings: Settings | None = None) -> LocalRunner:
    """Create a runner for local commands. Always succeeds."""
    settings = settings or Settings.from_env()
    return LocalRunner(encoding=settings.encoding)


# Default for known_hosts: resolve the path from settings
_FROM_SETTINGS = object()


def _resolve_known_hosts(
    settings: Settings,
    host_keys: HostKeyVerifier | None,
    known_hosts: Any,
) -> str | None:
    if known_hosts is None:
        logger.warning("Host key verification disabled for this connection")
        return None
    if known_hosts is not _FROM_SETTINGS:
        return str(known_hosts)

    if host_keys is None:
        try:
            host_keys = HostKeyVerifier(
                known_hosts_path=settings.known_hosts,
                strict_checking=settings.strict_host_key_checking,
            )
        except FileNotFoundError as e:
            raise ResourceAcquisitionError("cannot verify SSH host keys", e) from e
    return host_keys.get_known_hosts_path()


def _pick_timeout(settings: Settings, connect_timeout: int | None) -> int:
    return settings.connect_timeout if connect_timeout is None else connect_timeout


async def new_remote_key_auth_runner(
    user: str,
    host_address: str,
    private_key_path: str | Path,
    passphrase: str | None = None,
    *,
    known_hosts: Any = _FROM_SETTINGS,
    connect_timeout: int | None = None,
    settings: Settings | None = None,
    host_keys: HostKeyVerifier | None = None,
) -> RemoteRunner:
    """Connect with a private key and return a runner for that connection.

    Args:
        user: Remote login name
        host_address: ``host``, ``host:port`` or ``[v6addr]:port``
        private_key_path: Path to the private key file
        passphrase: Passphrase for an encrypted key
        known_hosts: known_hosts file to verify against, or None to skip
            verification (defaults to the path resolved from settings)
        connect_timeout: Dial timeout in seconds (defaults to settings)
        settings: Runtime settings (defaults to the environment)
        host_keys: Host key verifier (defaults to one built from settings)

    Raises:
        InvalidArgumentError: If host_address is malformed
        ResourceAcquisitionError: If the key file is missing, unreadable or
            unparseable, or the connection cannot be established
    """
    settings = settings or Settings.from_env()
    target = SSHTarget.parse(user, host_address)
    conn = await connect_with_key(
        target,
        private_key_path,
        passphrase=passphrase,
        known_hosts=_resolve_known_hosts(settings, host_keys, known_hosts),
        connect_timeout=_pick_timeout(settings, connect_timeout),
    )
    return RemoteRunner(conn, target=target, encoding=settings.encoding)


async def new_remote_pass_auth_runner(
    user: str,
    host_address: str,
    password: str,
    *,
    known_hosts: Any = _FROM_SETTINGS,
    connect_timeout: int | None = None,
    settings: Settings | None = None,
    host_keys: HostKeyVerifier | None = None,
) -> RemoteRunner:
    """Connect with a password and return a runner for that connection.

    known_hosts, connect_timeout, settings and host_keys behave as in
    new_remote_key_auth_runner().

    Raises:
        InvalidArgumentError: If host_address is malformed
        ResourceAcquisitionError: If the connection cannot be established
    """
    settings = settings or Settings.from_env()
    target = SSHTarget.parse(user, host_address)
    conn = await connect_with_password(
        target,
        password,
        known_hosts=_resolve_known_hosts(settings, host_keys, known_hosts),
        connect_timeout=_pick_timeout(settings, connect_timeout),
    )
    return RemoteRunner(conn, target=target, encoding=settings.encoding)