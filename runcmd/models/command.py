"""Command execution data models."""

import enum
from dataclasses import dataclass


class WorkerState(enum.Enum):
    """Lifecycle state of a command worker."""

    CREATED = "created"
    STARTED = "started"
    WAITED = "waited"


@dataclass(frozen=True)
class ExitStatus:
    """How a local process or remote session terminated."""

    code: int | None
    signal: str | None = None

    @property
    def success(self) -> bool:
        """Check if the command exited cleanly with status 0."""
        return self.signal is None and self.code == 0

    @property
    def description(self) -> str:
        """Human readable termination description.

        Returns:
            e.g. "exit status 1", "signal: SIGKILL"
        """
        if self.signal is not None:
            return f"signal: {self.signal}"
        if self.code is None:
            return "exited without exit status"
        return f"exit status {self.code}"

    def __str__(self) -> str:
        return self.description
