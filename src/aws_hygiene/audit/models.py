"""Data models for runs, the rule catalog and violations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RunStatus(str, Enum):
    RUNNING = "Running"
    COMPLETED = "Completed"
    COMPLETED_WITH_ERRORS = "CompletedWithErrors"
    PARTIAL = "Partial"

    @property
    def is_complete(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.COMPLETED_WITH_ERRORS)


@dataclass
class RunRecord:
    run_id: int
    created_at: str
    status: str
    completed_at: str | None


@dataclass
class RuleCatalogEntry:
    rule_id: int
    name: str
    description: str


@dataclass
class ViolationRecord:
    run_id: int
    resource_id: str
    resource_type: str
    rule_id: int
    violation_id: int | None = None
