"""
Exclusive file locks shared by every process using a ledger home.

Windows uses msvcrt byte-range locking; everything else uses fcntl.flock.
Both block until the lock is available.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

LOCK_FILENAME = ".lock"


def lock_file(file_handle: IO) -> None:
    """Take an exclusive lock on an open file."""
    if sys.platform == "win32":
        import msvcrt

        # Lock 1 byte at position 0, then return to the end for appending
        file_handle.seek(0)
        msvcrt.locking(file_handle.fileno(), msvcrt.LK_LOCK, 1)
        file_handle.seek(0, 2)
    else:
        import fcntl

        fcntl.flock(file_handle.fileno(), fcntl.LOCK_EX)


def unlock_file(file_handle: IO) -> None:
    if sys.platform == "win32":
        import msvcrt

        file_handle.seek(0)
        msvcrt.locking(file_handle.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl

        fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)


@contextmanager
def home_lock(home: Path) -> Iterator[Path]:
    """Hold the home's lock file for the duration of the block.

    Callers that open, change and journal a ledger inside the block never
    interleave with another process doing the same. `home` must exist.
    """
    path = home / LOCK_FILENAME
    with path.open("a", encoding="utf-8") as f:
        lock_file(f)
        try:
            yield path
        finally:
            unlock_file(f)
