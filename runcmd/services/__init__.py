"""Services for runcmd."""

from runcmd.services.backends import LocalProcessSession, RemoteShellSession
from runcmd.services.connection import (
    connect_with_key,
    connect_with_password,
    load_private_key,
)
from runcmd.services.runners import (
    LocalRunner,
    RemoteRunner,
    new_local_runner,
    new_remote_key_auth_runner,
    new_remote_pass_auth_runner,
)
from runcmd.services.worker import CommandWorker

__all__ = [
    "CommandWorker",
    "LocalProcessSession",
    "LocalRunner",
    "RemoteRunner",
    "RemoteShellSession",
    "connect_with_key",
    "connect_with_password",
    "load_private_key",
    "new_local_runner",
    "new_remote_key_auth_runner",
    "new_remote_pass_auth_runner",
]
