"""Age-based retention cleanup for directory trees."""

from __future__ import annotations

import os

__version__ = "0.1.0"

from cull.analyzer import analyze
from cull.executor import execute
from cull.models import (
    Action,
    Disposition,
    ExecutionResult,
    Kind,
    Report,
    RetentionPolicy,
    Variant,
)
from cull.report import build_report


async def clean(path: str | os.PathLike[str], policy: RetentionPolicy | None = None) -> Report:
    """Analyze ``path``, execute the resulting plan and build the report."""
    policy = policy or RetentionPolicy()
    actions = await analyze(path, policy)
    result = await execute(actions, policy)
    return build_report(path, actions, result, policy)


__all__ = [
    "Action",
    "Disposition",
    "ExecutionResult",
    "Kind",
    "Report",
    "RetentionPolicy",
    "Variant",
    "analyze",
    "build_report",
    "clean",
    "execute",
]
