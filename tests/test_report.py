from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from cull.models import Action, Disposition, ExecutionResult, Kind, RetentionPolicy
from cull.report import (
    build_report,
    flatten_actions,
    group_actions,
    render_markdown,
    report_to_dict,
    write_report,
)

ROOT = Path("/data")
REFERENCE = datetime(2017, 1, 13, tzinfo=timezone.utc)


def _file(name: str, disposition: Disposition) -> Action:
    return Action(Kind.FILE, disposition, ROOT / name)


def _tree() -> tuple[Action, ...]:
    inner = Action(
        Kind.DIRECTORY,
        Disposition.DELETE,
        ROOT / "a" / "b",
        (_file("a/b/old.txt", Disposition.DELETE),),
    )
    outer = Action(
        Kind.DIRECTORY,
        Disposition.RETAIN,
        ROOT / "a",
        (inner, _file("a/new.txt", Disposition.RETAIN)),
    )
    return (_file("old.txt", Disposition.DELETE), outer, _file("new.txt", Disposition.RETAIN))


def test_flatten_lists_children_before_their_directory() -> None:
    flat = flatten_actions(_tree())

    assert [action.path for action in flat] == [
        ROOT / "old.txt",
        ROOT / "a" / "b" / "old.txt",
        ROOT / "a" / "b",
        ROOT / "a" / "new.txt",
        ROOT / "a",
        ROOT / "new.txt",
    ]
    assert all(action.children == () for action in flat)


def test_flatten_keeps_one_entry_per_filesystem_entry() -> None:
    empty = Action(Kind.DIRECTORY, Disposition.DELETE, ROOT / "empty")

    assert len(flatten_actions(_tree() + (empty,))) == 7


def test_group_actions_buckets_by_disposition() -> None:
    buckets = group_actions(flatten_actions(_tree()))

    assert [a.path for a in buckets["delete"]] == [ROOT / "old.txt", ROOT / "a/b/old.txt", ROOT / "a/b"]
    assert [a.path for a in buckets["retain"]] == [ROOT / "a/new.txt", ROOT / "a", ROOT / "new.txt"]


def test_group_actions_keeps_empty_buckets() -> None:
    assert group_actions([]) == {"delete": [], "retain": [], "busy": []}
    assert group_actions([_file("new.txt", Disposition.RETAIN)])["busy"] == []


def test_build_report_appends_busy_without_altering_tree() -> None:
    busy = Action(Kind.FILE, Disposition.BUSY, ROOT / "a" / "b" / "old.txt")
    result = ExecutionResult(busy=(busy,))

    report = build_report(ROOT, _tree(), result, RetentionPolicy(reference=REFERENCE))

    assert report.busy == [busy]
    assert ROOT / "a" / "b" / "old.txt" in [a.path for a in report.deleted]
    assert len(report.retained) == 3


def test_report_to_dict_is_json_ready(tmp_path: Path) -> None:
    not_empty = Action(Kind.DIRECTORY, Disposition.DELETE, ROOT / "a" / "b")
    report = build_report(
        ROOT,
        _tree(),
        ExecutionResult(not_empty=(not_empty,)),
        RetentionPolicy(reference=REFERENCE, recursive=True),
    )
    json_path = tmp_path / "report.json"

    write_report(report, json_path=json_path)

    data = json.loads(json_path.read_text())
    assert data == json.loads(json.dumps(report_to_dict(report)))
    assert data["summary"] == {"delete": 3, "retain": 3, "busy": 0}
    assert data["policy"]["reference"] == "2017-01-13T00:00:00+00:00"
    assert data["policy"]["recursive"] is True
    assert data["not_empty"] == [{"kind": "directory", "path": str(ROOT / "a" / "b")}]


def test_render_markdown_lists_relative_paths(tmp_path: Path) -> None:
    report = build_report(
        ROOT, _tree(), ExecutionResult(), RetentionPolicy(reference=REFERENCE, dry_run=True)
    )
    markdown_path = tmp_path / "report.md"

    write_report(report, markdown_path=markdown_path)

    content = markdown_path.read_text()
    assert content == render_markdown(report)
    assert content.startswith("# Cleanup Plan")
    assert "- [file] a/b/old.txt" in content
    assert "- [directory] a" in content
    assert "## Busy\n- (none)" in content
