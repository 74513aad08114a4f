"""Data models for runcmd."""

from runcmd.models.command import ExitStatus, WorkerState
from runcmd.models.ssh import DEFAULT_SSH_PORT, SSHTarget

__all__ = [
    "DEFAULT_SSH_PORT",
    "ExitStatus",
    "SSHTarget",
    "WorkerState",
]
