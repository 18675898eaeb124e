"""Advisory file locks shared by every worker touching the cache.

Locks are taken with ``fcntl.flock`` on a handle opened for read/write. The
call blocks until the lock is granted and there is no timeout. The lock is
released when the handle is closed, which also happens when the owning
process dies.
"""

import fcntl
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TextIO, TypeVar, Union

T = TypeVar("T")


@contextmanager
def exclusive_lock(path: Union[Path, str]) -> Iterator[TextIO]:
    """Open ``path`` read/write (creating it if absent) and hold an exclusive lock.

    The yielded handle is positioned at the start of the file.
    """
    fd = os.open(path, os.O_CREAT | os.O_RDWR, 0o666)
    handle = os.fdopen(fd, "r+", encoding="utf-8", newline="\n")
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        yield handle
    finally:
        # close() flushes pending writes before the lock goes away
        handle.close()


def with_exclusive_lock(path: Union[Path, str], fn: Callable[[TextIO], T]) -> T:
    """Run ``fn(handle)`` while holding the exclusive lock on ``path``."""
    with exclusive_lock(path) as handle:
        return fn(handle)
