"""Errors that end a check run with an UNKNOWN status."""


class LoadCheckError(Exception):
    """Base exception for check runs that cannot produce a verdict.

    Attributes:
        status_message: Text placed after the UNKNOWN label in the status line.
        exit_code: Process exit code for this failure.
    """

    exit_code = 3

    def __init__(self, message: str, status_message: str | None = None) -> None:
        super().__init__(message)
        self.status_message = status_message or message


class LockConflictError(LoadCheckError):
    """Raised when the lock file already exists."""

    exit_code = 1


class LockFileError(LoadCheckError):
    """Raised when the lock file cannot be created or written."""

    exit_code = 3


class MissingDependencyError(LoadCheckError):
    """Raised when an external command the platform needs is not on PATH."""

    exit_code = 2

    def __init__(self, command: str) -> None:
        super().__init__(
            f"script requires {command} to run. Exiting...",
            f"script unable to locate {command} command dependency",
        )
        self.command = command


class SampleAcquisitionError(LoadCheckError):
    """Raised when the load average or processor count cannot be read."""

    exit_code = 3

    def __init__(self, reason: str) -> None:
        super().__init__(f"unable to sample load: {reason}")
