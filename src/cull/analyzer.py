from __future__ import annotations

import asyncio
import logging
import os
import stat
from collections.abc import Iterable
from pathlib import Path

from cull import fs
from cull.clock import days_between, from_timestamp
from cull.models import Action, Disposition, Kind, RetentionPolicy

logger = logging.getLogger(__name__)


async def analyze(path: str | os.PathLike[str], policy: RetentionPolicy) -> tuple[Action, ...]:
    """Build the action tree for the entries directly under ``path``.

    The root directory itself is never part of the tree. Subdirectories are
    only descended into when ``policy.recursive`` is set.
    """
    root = Path(os.path.abspath(path))
    root_stat = await fs.stat_entry(root)
    if not stat.S_ISDIR(root_stat.st_mode):
        raise NotADirectoryError(f"Not a directory: {root}")
    logger.info(
        "Analyzing %s (max age %d days, recursive=%s, delete empty directories=%s)",
        root,
        policy.max_age_days,
        policy.recursive,
        policy.delete_empty_directories,
    )
    return await analyze_folder(root, policy)


async def analyze_folder(path: Path, policy: RetentionPolicy) -> tuple[Action, ...]:
    entries = await fs.list_dir(path)
    actions = await asyncio.gather(*(_analyze_entry(entry, policy) for entry in entries))
    return tuple(actions)


async def _analyze_entry(path: Path, policy: RetentionPolicy) -> Action:
    action = await analyze_item(path, policy)
    if action.kind is Kind.FILE or not policy.recursive:
        return action

    children = await analyze_folder(path, policy)
    disposition = resolve_disposition(children, policy.delete_empty_directories)
    logger.debug("%s %s (%d entries)", disposition.value, path, len(children))
    return Action(Kind.DIRECTORY, disposition, path, children)


async def analyze_item(path: Path, policy: RetentionPolicy) -> Action:
    """Classify a single entry.

    Directories come back as RETAIN with no children; deciding their fate
    needs their contents, which is the folder analyzer's job. Symlinks are
    never followed: a link is aged by its own mtime and removed like a file.
    """
    st = await fs.lstat_entry(path)
    if stat.S_ISDIR(st.st_mode):
        return Action(Kind.DIRECTORY, Disposition.RETAIN, path)
    if not (stat.S_ISREG(st.st_mode) or stat.S_ISLNK(st.st_mode)):
        logger.debug("retain %s (not a regular file)", path)
        return Action(Kind.FILE, Disposition.RETAIN, path)

    age = days_between(policy.reference, from_timestamp(st.st_mtime))
    if policy.max_age_days <= age:
        disposition = Disposition.DELETE
    else:
        disposition = Disposition.RETAIN
    logger.debug("%s %s (%d days old)", disposition.value, path, age)
    return Action(Kind.FILE, disposition, path)


def resolve_disposition(
    children: Iterable[Action],
    delete_empty_directories: bool,
) -> Disposition:
    if not delete_empty_directories:
        return Disposition.RETAIN
    if all(child.disposition is Disposition.DELETE for child in children):
        return Disposition.DELETE
    return Disposition.RETAIN
