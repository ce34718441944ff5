from __future__ import annotations

import json
import os
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cull.models import Action, Disposition, ExecutionResult, Kind, Report, RetentionPolicy

BUCKETS = {
    Disposition.DELETE: "delete",
    Disposition.RETAIN: "retain",
    Disposition.BUSY: "busy",
}


def flatten_actions(actions: Iterable[Action]) -> list[Action]:
    """Flatten a tree so every directory follows its own contents."""
    flat: list[Action] = []
    for action in actions:
        if action.kind is Kind.DIRECTORY:
            flat.extend(flatten_actions(action.children))
            flat.append(replace(action, children=()))
        else:
            flat.append(action)
    return flat


def group_actions(actions: Iterable[Action]) -> dict[str, list[Action]]:
    """Group a flat sequence by disposition.

    Every bucket is present in the result, empty or not.
    """
    buckets: dict[str, list[Action]] = {name: [] for name in BUCKETS.values()}
    for action in actions:
        buckets[BUCKETS[action.disposition]].append(action)
    return buckets


def build_report(
    root: str | os.PathLike[str],
    actions: Iterable[Action],
    result: ExecutionResult,
    policy: RetentionPolicy,
) -> Report:
    flat = flatten_actions(actions)
    flat.extend(result.busy)
    return Report(
        root=Path(os.path.abspath(root)),
        generated_at=datetime.now(timezone.utc).isoformat(),
        policy=policy,
        buckets=group_actions(flat),
        not_empty=list(result.not_empty),
    )


def report_to_dict(report: Report) -> dict[str, Any]:
    policy = report.policy
    return {
        "root": str(report.root),
        "generated_at": report.generated_at,
        "policy": {
            "max_age_days": policy.max_age_days,
            "reference": policy.reference.isoformat(),
            "recursive": policy.recursive,
            "delete_empty_directories": policy.delete_empty_directories,
            "dry_run": policy.dry_run,
        },
        "summary": {name: len(entries) for name, entries in report.buckets.items()},
        "buckets": {
            name: [_entry(action) for action in entries]
            for name, entries in report.buckets.items()
        },
        "not_empty": [_entry(action) for action in report.not_empty],
    }


def write_report(
    report: Report,
    json_path: Path | None = None,
    markdown_path: Path | None = None,
) -> None:
    if json_path is not None:
        json_path.write_text(json.dumps(report_to_dict(report), indent=2, sort_keys=True))
    if markdown_path is not None:
        markdown_path.write_text(render_markdown(report))


def render_markdown(report: Report) -> str:
    policy = report.policy
    heading = "Cleanup Plan" if policy.dry_run else "Cleanup Report"
    lines = [
        f"# {heading}",
        "",
        f"Root: `{report.root}`",
        f"Generated: `{report.generated_at}`",
        f"Reference: `{policy.reference.isoformat()}`",
        f"Max age: `{policy.max_age_days}` days",
        f"Recursive: `{policy.recursive}`",
        f"Delete empty directories: `{policy.delete_empty_directories}`",
        "",
        "## Summary",
    ]
    for name, entries in report.buckets.items():
        lines.append(f"- {name}: {len(entries)}")
    if report.not_empty:
        lines.append(f"- not empty: {len(report.not_empty)}")
    for name, entries in report.buckets.items():
        lines.append("")
        lines.append(f"## {name.capitalize()}")
        if not entries:
            lines.append("- (none)")
        for action in entries:
            lines.append(f"- [{action.kind.value}] {_display_path(report.root, action.path)}")
    if report.not_empty:
        lines.append("")
        lines.append("## Not empty")
        lines.append("Directories that gained entries after analysis and were left in place.")
        for action in report.not_empty:
            lines.append(f"- {_display_path(report.root, action.path)}")
    lines.append("")
    return "\n".join(lines)


def _entry(action: Action) -> dict[str, str]:
    return {"kind": action.kind.value, "path": str(action.path)}


def _display_path(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)
