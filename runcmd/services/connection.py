"""SSH connection helpers used by the remote runner constructors."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import asyncssh

from runcmd.errors import ResourceAcquisitionError
from runcmd.models import SSHTarget

logger = logging.getLogger(__name__)


def load_private_key(key_path: str | Path, passphrase: str | None = None) -> asyncssh.SSHKey:
    """Read and parse a private key file.

    Args:
        key_path: Path to the private key (``~`` is expanded)
        passphrase: Passphrase for an encrypted key

    Returns:
        Parsed private key

    Raises:
        ResourceAcquisitionError: If the file is missing, unreadable or not a
            parseable private key
    """
    path = Path(key_path).expanduser()
    if not path.exists():
        raise ResourceAcquisitionError(
            "private key not found",
            FileNotFoundError(f"No such file: {path}"),
        )

    try:
        return asyncssh.read_private_key(str(path), passphrase)
    except (asyncssh.KeyImportError, asyncssh.KeyEncryptionError) as e:
        raise ResourceAcquisitionError(f"cannot parse private key {path}", e) from e
    except OSError as e:
        raise ResourceAcquisitionError(f"cannot read private key {path}", e) from e


async def _dial(
    target: SSHTarget,
    known_hosts: str | None,
    connect_timeout: int | None,
    **auth: Any,
) -> asyncssh.SSHClientConnection:
    logger.info(
        "Opening SSH connection to %s (host_key_check=%s)",
        target,
        "on" if known_hosts else "off",
    )
    try:
        conn = await asyncssh.connect(
            target.host,
            port=target.port,
            username=target.user,
            known_hosts=known_hosts,
            connect_timeout=connect_timeout or None,
            **auth,
        )
    except (OSError, asyncio.TimeoutError, asyncssh.Error) as e:
        logger.debug("SSH connection to %s failed: %s", target, e)
        raise ResourceAcquisitionError(f"cannot connect to {target}", e) from e

    logger.info("SSH connection established to %s", target)
    return conn


async def connect_with_key(
    target: SSHTarget,
    key_path: str | Path,
    passphrase: str | None = None,
    known_hosts: str | None = None,
    connect_timeout: int | None = None,
) -> asyncssh.SSHClientConnection:
    """Dial target authenticating with a single private key.

    Args:
        target: Remote endpoint
        key_path: Path to the private key file
        passphrase: Passphrase for an encrypted key
        known_hosts: known_hosts path, or None to skip host key verification
        connect_timeout: Dial timeout in seconds (None or 0 for no limit)

    Returns:
        Authenticated connection

    Raises:
        ResourceAcquisitionError: If the key cannot be loaded or the dial fails
    """
    key = load_private_key(key_path, passphrase)
    return await _dial(
        target,
        known_hosts,
        connect_timeout,
        client_keys=[key],
        agent_path=None,
    )


async def connect_with_password(
    target: SSHTarget,
    password: str,
    known_hosts: str | None = None,
    connect_timeout: int | None = None,
) -> asyncssh.SSHClientConnection:
    """Dial target authenticating with a password only.

    Raises:
        ResourceAcquisitionError: If the dial fails
    """
    return await _dial(
        target,
        known_hosts,
        connect_timeout,
        password=password,
        client_keys=None,
        agent_path=None,
    )
