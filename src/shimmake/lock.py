"""Advisory locking of the output root between concurrent invocations."""

from __future__ import annotations

import contextlib
import fcntl
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from .errors import PreconditionError, ShimMakeError

logger = logging.getLogger(__name__)

LOCK_NAME = ".shim-make.lock"


@contextlib.contextmanager
def advisory_lock(directory: Path) -> Iterator[Path | None]:
    """Hold an exclusive lock inside `directory` for the duration of the block.

    Nothing is locked while the directory does not exist yet.
    """
    if not directory.is_dir():
        logger.debug("Not locking %s; directory does not exist", directory)
        yield None
        return

    path = directory / LOCK_NAME
    try:
        fd = os.open(path, os.O_CLOEXEC | os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as exc:
        raise ShimMakeError(f"cannot open lock file {path}: {exc.strerror}") from exc
    try:
        logger.debug("Acquiring lock on %s", path)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            raise PreconditionError(f"{directory} is locked by another shim-make process") from None
        logger.debug("Acquired lock on %s", path)
        yield path
    finally:
        os.close(fd)
