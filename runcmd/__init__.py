"""runcmd: run a command locally or over SSH behind one interface."""

from runcmd.errors import (
    ExecutionError,
    InvalidArgumentError,
    ResourceAcquisitionError,
    RuncmdError,
    StreamError,
    WorkerStateError,
)
from runcmd.protocols import Runner, Worker
from runcmd.services import (
    CommandWorker,
    LocalRunner,
    RemoteRunner,
    new_local_runner,
    new_remote_key_auth_runner,
    new_remote_pass_auth_runner,
)

__all__ = [
    "CommandWorker",
    "ExecutionError",
    "InvalidArgumentError",
    "LocalRunner",
    "RemoteRunner",
    "ResourceAcquisitionError",
    "Runner",
    "RuncmdError",
    "StreamError",
    "Worker",
    "WorkerStateError",
    "new_local_runner",
    "new_remote_key_auth_runner",
    "new_remote_pass_auth_runner",
]
