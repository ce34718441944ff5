from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from cull import fs
from cull.models import Action, Disposition, ExecutionResult, Kind, RetentionPolicy, Variant

logger = logging.getLogger(__name__)


async def execute(actions: Iterable[Action], policy: RetentionPolicy) -> ExecutionResult:
    """Carry out the DELETE actions of an analyzed tree.

    Children are always finished before their parent directory is touched.
    Files that are in use are reported back as BUSY actions instead of
    raising; a directory that still holds one is left in place. Any other
    removal failure propagates.
    """
    actions = tuple(actions)
    if policy.dry_run:
        logger.info("Dry-run: skipping removal of %d top-level entries", len(actions))
        return ExecutionResult()

    result = await _execute_level(actions)
    logger.info(
        "Execution finished: %d busy, %d not empty",
        len(result.busy),
        len(result.not_empty),
    )
    return result


async def _execute_level(actions: tuple[Action, ...]) -> ExecutionResult:
    results = await asyncio.gather(*(_execute_action(action) for action in actions))
    busy: list[Action] = []
    not_empty: list[Action] = []
    for result in results:
        busy.extend(result.busy)
        not_empty.extend(result.not_empty)
    return ExecutionResult(busy=tuple(busy), not_empty=tuple(not_empty))


async def _execute_action(action: Action) -> ExecutionResult:
    variant = action.variant
    if variant is Variant.DIR_RETAIN:
        return await _execute_level(action.children)
    if variant is Variant.DIR_DELETE:
        return await _remove_directory(action)
    if variant is Variant.FILE_RETAIN:
        return ExecutionResult()
    if variant is Variant.FILE_DELETE:
        return await _remove_file(action)
    raise ValueError(f"Cannot execute {variant.name} action: {action.path}")


async def _remove_directory(action: Action) -> ExecutionResult:
    leftovers = await _execute_level(action.children)
    if leftovers.leftovers:
        logger.warning("Keeping %s: it still holds entries that could not be removed", action.path)
        return leftovers

    try:
        await fs.remove_dir(action.path)
    except OSError as exc:
        if not fs.is_not_empty(exc):
            raise
        logger.warning("Could not remove %s: directory is not empty", action.path)
        return ExecutionResult(not_empty=(action,))
    logger.info("Removed directory %s", action.path)
    return leftovers


async def _remove_file(action: Action) -> ExecutionResult:
    try:
        await fs.remove_file(action.path)
    except OSError as exc:
        if not fs.is_busy(exc):
            raise
        logger.warning("Could not remove %s: file is in use", action.path)
        return ExecutionResult(busy=(Action(Kind.FILE, Disposition.BUSY, action.path),))
    logger.info("Removed %s", action.path)
    return ExecutionResult()
