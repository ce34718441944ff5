"""Async filesystem operations used by the analyzer and executor."""

from __future__ import annotations

import errno
import os
from pathlib import Path

import aiofiles.os

BUSY_ERRNOS = {errno.EBUSY, errno.ETXTBSY}
# ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION
BUSY_WINERRORS = {32, 33}
NOT_EMPTY_ERRNOS = {errno.ENOTEMPTY, errno.EEXIST}


async def list_dir(path: Path) -> list[Path]:
    names = await aiofiles.os.listdir(path)
    return [path / name for name in sorted(names)]


async def stat_entry(path: Path) -> os.stat_result:
    return await aiofiles.os.stat(path)


async def lstat_entry(path: Path) -> os.stat_result:
    return await aiofiles.os.stat(path, follow_symlinks=False)


async def remove_file(path: Path) -> None:
    await aiofiles.os.remove(path)


async def remove_dir(path: Path) -> None:
    await aiofiles.os.rmdir(path)


def is_busy(exc: OSError) -> bool:
    """True when ``exc`` means another process holds the file open or locked."""
    if getattr(exc, "winerror", None) in BUSY_WINERRORS:
        return True
    return exc.errno in BUSY_ERRNOS


def is_not_empty(exc: OSError) -> bool:
    return exc.errno in NOT_EMPTY_ERRNOS
