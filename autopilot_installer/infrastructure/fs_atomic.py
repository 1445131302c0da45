from __future__ import annotations

import errno
import os
from pathlib import Path
import time
from typing import Callable, TypeVar

T = TypeVar("T")


def is_retryable_rename_error(exc: OSError) -> bool:
    return getattr(exc, "errno", None) in {errno.EACCES, errno.EPERM, errno.EBUSY, 13, 16}


def bounded_retry(fn: Callable[[], T], attempts: int = 5, backoff_ms: int = 50) -> T:
    last_error: Exception | None = None
    for attempt in range(attempts):
        try:
            return fn()
        except OSError as exc:
            last_error = exc
            if attempt == attempts - 1 or not is_retryable_rename_error(exc):
                raise
            time.sleep(backoff_ms / 1000.0)
    if last_error is not None:
        raise last_error
    raise RuntimeError("bounded_retry failed without exception")


def fsync_dir(path: Path) -> None:
    try:
        fd = os.open(str(path), os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def atomic_rename(src: Path, dst: Path, *, attempts: int = 5, backoff_ms: int = 50) -> None:
    """Rename ``src`` to ``dst`` within one volume; never replaces ``dst``.

    ``os.rename`` silently replaces an existing file on POSIX, so the
    destination is checked first.
    """
    if dst.exists() or dst.is_symlink():
        raise FileExistsError(errno.EEXIST, "destination already exists", str(dst))

    def _rename() -> None:
        os.rename(str(src), str(dst))
        fsync_dir(dst.parent)

    bounded_retry(_rename, attempts=attempts, backoff_ms=backoff_ms)
