"""Structured results returned by skillctl operations.

Batch operations never stop at the first failure.  They return every
per-item outcome in order, plus an overall status, and leave it to the
caller to decide how to present them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from skillctl.config import StateData


class LinkStatus:
    """Outcome of one (agent, skill) link operation."""

    LINKED = "linked"
    REMOVED = "removed"
    ABSENT = "absent"
    SKIPPED_NO_DIR = "skipped-no-dir"
    SKIPPED_NOT_SYMLINK = "skipped-not-symlink"
    ERROR = "error"

    OK = (LINKED, REMOVED, ABSENT)


@dataclass(frozen=True)
class LinkOutcome:
    agent: str
    skill: str
    status: str
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status in LinkStatus.OK


class UpdateStatus:
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of updating one repository.

    ``new_sha`` is empty when the update failed; ``error`` then holds the
    reason and ``diagnostic`` the version-control tool's output.
    """

    alias: str
    status: str
    old_sha: str = ""
    new_sha: str = ""
    error: str = ""
    diagnostic: str = ""

    @property
    def ok(self) -> bool:
        return self.status != UpdateStatus.FAILED

    @property
    def changed(self) -> bool:
        return self.status == UpdateStatus.UPDATED


@dataclass
class BatchReport:
    """Ordered per-item outcomes of a best-effort batch."""

    outcomes: list[Any] = field(default_factory=list)

    OK = "ok"
    PARTIAL = "partial"
    FAILED = "failed"

    def extend(self, outcomes) -> None:
        self.outcomes.extend(outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> list[Any]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def status(self) -> str:
        failures = self.failures
        if not failures:
            return self.OK
        if len(failures) == len(self.outcomes):
            return self.FAILED
        return self.PARTIAL

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)


@dataclass
class UpdateReport(BatchReport):
    """Aggregate of an update over several repositories."""

    @property
    def updated(self) -> int:
        return self.count(UpdateStatus.UPDATED)

    @property
    def unchanged(self) -> int:
        return self.count(UpdateStatus.UNCHANGED)

    @property
    def failed(self) -> int:
        return self.count(UpdateStatus.FAILED)


@dataclass
class MutationResult:
    """What a coordinator mutation did.

    Attributes:
        subject: Alias, skill name or agent path the mutation was about
        state: State record after the mutation
        links: Per-agent link outcomes produced along the way
        removed_skills: Skills removed as part of a cascade
    """

    subject: str
    state: StateData
    links: BatchReport = field(default_factory=BatchReport)
    removed_skills: list[str] = field(default_factory=list)
