from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path


class Kind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Disposition(Enum):
    DELETE = "delete"
    RETAIN = "retain"
    BUSY = "busy"


class Variant(Enum):
    FILE_DELETE = (Kind.FILE, Disposition.DELETE)
    FILE_RETAIN = (Kind.FILE, Disposition.RETAIN)
    FILE_BUSY = (Kind.FILE, Disposition.BUSY)
    DIR_DELETE = (Kind.DIRECTORY, Disposition.DELETE)
    DIR_RETAIN = (Kind.DIRECTORY, Disposition.RETAIN)


@dataclass(frozen=True)
class Action:
    kind: Kind
    disposition: Disposition
    path: Path
    children: tuple[Action, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is Kind.FILE and self.children:
            raise ValueError(f"File action cannot have children: {self.path}")
        if self.disposition is Disposition.BUSY and self.children:
            raise ValueError(f"Busy action cannot have children: {self.path}")

    @property
    def variant(self) -> Variant:
        try:
            return Variant((self.kind, self.disposition))
        except ValueError:
            raise ValueError(
                f"No variant for {self.kind.value}/{self.disposition.value}: {self.path}"
            ) from None


@dataclass(frozen=True)
class RetentionPolicy:
    """How old a file must be before it is removed, and how far to look.

    ``reference`` is the instant ages are measured from. A naive datetime is
    taken as local time.
    """

    max_age_days: int = 90
    reference: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    recursive: bool = False
    delete_empty_directories: bool = False
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.max_age_days < 0:
            raise ValueError(f"max_age_days must be >= 0, got {self.max_age_days}")
        if self.reference.tzinfo is None:
            object.__setattr__(self, "reference", self.reference.astimezone())


@dataclass(frozen=True)
class ExecutionResult:
    busy: tuple[Action, ...] = ()
    not_empty: tuple[Action, ...] = ()

    @property
    def leftovers(self) -> bool:
        return bool(self.busy or self.not_empty)


@dataclass(frozen=True)
class Report:
    root: Path
    generated_at: str
    policy: RetentionPolicy
    buckets: dict[str, list[Action]]
    not_empty: list[Action] = field(default_factory=list)

    @property
    def deleted(self) -> list[Action]:
        return self.buckets["delete"]

    @property
    def retained(self) -> list[Action]:
        return self.buckets["retain"]

    @property
    def busy(self) -> list[Action]:
        return self.buckets["busy"]
