"""Error types raised by runners, workers and the connection helpers."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from runcmd.models import ExitStatus


class RuncmdError(Exception):
    """Base class for all runcmd errors."""


class InvalidArgumentError(RuncmdError, ValueError):
    """Caller supplied an unusable argument (e.g. an empty command)."""


class ResourceAcquisitionError(RuncmdError):
    """Failed to acquire a pipe, session, key or connection."""

    def __init__(self, message: str, original_error: BaseException | None = None):
        """Initialize resource acquisition error.

        Args:
            message: What could not be acquired
            original_error: Exception reported by the underlying layer
        """
        self.original_error = original_error
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message)


class ExecutionError(RuncmdError):
    """Command failed to start, or terminated abnormally.

    The rendered message is the underlying failure description followed by
    the text the command wrote to stderr, separated by a newline, when that
    text is non-empty. Both parts stay available as attributes so callers do
    not have to parse the message.
    """

    def __init__(
        self,
        cause: BaseException | str,
        diagnostic: str = "",
        exit_status: "ExitStatus | None" = None,
    ):
        """Initialize execution error.

        Args:
            cause: Underlying exception, or a description of the failure
            diagnostic: Captured stderr text (may be empty)
            exit_status: Exit status reported by the backend, if any
        """
        self.cause = cause
        self.diagnostic = diagnostic
        self.exit_status = exit_status
        message = str(cause)
        if diagnostic:
            message = f"{message}\n{diagnostic}"
        super().__init__(message)


class StreamError(RuncmdError):
    """Reading or writing a command pipe failed before end-of-stream."""


class WorkerStateError(RuncmdError, RuntimeError):
    """Lifecycle operation called in the wrong state."""
