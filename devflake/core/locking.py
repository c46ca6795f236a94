"""
File locking for devflake.

The lock file of a project is rewritten by ``devflake lock``; two processes
updating it at once would interleave writes. Writers hold a sibling
``<file>.lock`` through the ``filelock`` library, which works across processes
and platforms and is released automatically if the holder dies.

Usage:
    from devflake.core.locking import exclusive_file_lock

    with exclusive_file_lock(project_root / "devflake.lock", timeout=30):
        write_lock_file()
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from devflake.core.exceptions import LockFileError

logger = logging.getLogger(__name__)


def lock_path_for(target: Path) -> Path:
    """Return the path of the guard file protecting ``target``."""
    return target.with_name(target.name + ".lock")


@contextmanager
def exclusive_file_lock(target: Path, timeout: float = 30):
    """
    Hold an exclusive lock guarding writes to ``target``.

    Args:
        target: File being protected
        timeout: Maximum wait time in seconds (default: 30)

    Yields:
        None

    Raises:
        LockFileError: If the lock can't be acquired within timeout
    """
    guard = lock_path_for(Path(target))
    lock = FileLock(guard, timeout=timeout)

    try:
        with lock:
            logger.debug(f"Acquired lock: {guard}")
            yield
            logger.debug(f"Released lock: {guard}")
    except LockTimeout as e:
        raise LockFileError(
            f"Could not acquire lock {guard} after {timeout}s. "
            "Another devflake process may be updating it."
        ) from e


__all__ = ["exclusive_file_lock", "lock_path_for", "LockTimeout"]
