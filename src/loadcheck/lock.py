"""PID lock file for single-instance check runs.

The lock file holds the decimal PID of the running check. It is created
with O_CREAT | O_EXCL so that checking for and taking the lock is one
atomic step. A lock left behind by a crashed run is never cleared
automatically; it blocks later runs until removed by hand.
"""

import contextlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from loadcheck.errors import LockConflictError, LockFileError

logger = logging.getLogger(__name__)


def read_lock_pid(lock_path: Path) -> int | None:
    """Get the PID recorded in a lock file.

    Returns:
        PID if the file exists and holds one, None otherwise
    """
    try:
        return int(lock_path.read_text().strip())
    except (FileNotFoundError, ValueError):
        return None


def acquire_lock(lock_path: Path) -> int:
    """Create the lock file containing the current PID.

    Args:
        lock_path: Path of the lock file

    Returns:
        PID written to the lock file

    Raises:
        LockConflictError: If the lock file already exists
        LockFileError: If the lock file cannot be created for another reason
    """
    pid = os.getpid()
    try:
        fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        holder = read_lock_pid(lock_path)
        logger.debug("Lock %s already held by PID %s", lock_path, holder)
        raise LockConflictError(
            "Aborted. temp file exists. Previous script may be hung or still running.",
            "temp file exists and previous script may be hung or still running",
        ) from None
    except OSError as e:
        raise LockFileError(f"cannot create lock file {lock_path}: {e}") from e
    try:
        os.write(fd, f"{pid}\n".encode())
    except OSError as e:
        os.close(fd)
        lock_path.unlink(missing_ok=True)
        raise LockFileError(f"cannot write lock file {lock_path}: {e}") from e
    os.close(fd)
    logger.debug("Acquired lock %s for PID %d", lock_path, pid)
    return pid


def release_lock(lock_path: Path) -> None:
    """Remove the lock file if it is owned by the current process."""
    if read_lock_pid(lock_path) != os.getpid():
        logger.warning("Lock %s is not owned by PID %d; leaving it in place", lock_path, os.getpid())
        return
    with contextlib.suppress(FileNotFoundError):
        lock_path.unlink()
    logger.debug("Released lock %s", lock_path)


@contextlib.contextmanager
def held_lock(lock_path: Path) -> Iterator[Path]:
    """Hold the lock for the duration of a with-block.

    The lock is released on every exit from the block. A failure to
    acquire raises before the block runs, leaving the existing file alone.
    """
    acquire_lock(lock_path)
    try:
        yield lock_path
    finally:
        release_lock(lock_path)
