"""Violation recorder: run bookkeeping, rule catalog and violation facts."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable
from typing import TypeVar

from aws_hygiene.audit.db import SqliteStore
from aws_hygiene.audit.models import RuleCatalogEntry, RunStatus, ViolationRecord
from aws_hygiene.errors import PersistenceError
from aws_hygiene.rules.base import Rule
from aws_hygiene.utils.time import utc_now_iso

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class ViolationRecorder:
    """Persistence boundary used by the run orchestrator.

    Rule catalog entries are created once and never rewritten: a rule whose
    description changes keeps the text it was first catalogued with.
    Violations are append-only; nothing is deduplicated across runs.
    """

    def __init__(
        self,
        store: SqliteStore,
        max_retries: int = 2,
        retry_backoff_seconds: float = 0.1,
    ) -> None:
        self._store = store
        self._max_retries = max_retries
        self._retry_backoff_seconds = retry_backoff_seconds

    def open_run(self) -> int:
        run_id = self._attempt(
            "open run",
            lambda: self._store.create_run(utc_now_iso(), RunStatus.RUNNING.value),
        )
        logger.info("Opened run %d", run_id)
        return run_id

    def close_run(self, run_id: int, status: RunStatus) -> None:
        completed_at = utc_now_iso() if status.is_complete else None
        self._attempt(
            "close run",
            lambda: self._store.update_run_status(run_id, status.value, completed_at),
        )
        logger.info("Closed run %d with status %s", run_id, status.value)

    def ensure_rule_catalogued(self, rule: Rule) -> int:
        existing = self._lookup_rule(rule)
        if existing is not None:
            return existing.rule_id
        try:
            rule_id = self._attempt(
                f"catalog rule {rule.name}",
                lambda: self._store.insert_rule(rule.name, rule.description),
            )
        except PersistenceError as exc:
            if not isinstance(exc.__cause__, sqlite3.IntegrityError):
                raise
            # Another writer catalogued the same name first.
            existing = self._lookup_rule(rule)
            if existing is None:
                raise
            return existing.rule_id
        logger.info("Catalogued rule %s with id %d", rule.name, rule_id)
        return rule_id

    def _lookup_rule(self, rule: Rule) -> RuleCatalogEntry | None:
        return self._attempt(
            f"look up rule {rule.name}",
            lambda: self._store.get_rule_by_name(rule.name),
        )

    def record_violation(
        self,
        run_id: int,
        resource_id: str,
        resource_type: str,
        rule_id: int,
    ) -> int:
        record = ViolationRecord(
            run_id=run_id,
            resource_id=resource_id,
            resource_type=resource_type,
            rule_id=rule_id,
        )
        return self._attempt(
            f"record violation for {resource_id}",
            lambda: self._store.create_violation(record),
            record=record,
        )

    def _attempt(
        self,
        label: str,
        operation: Callable[[], _T],
        record: object | None = None,
    ) -> _T:
        attempt = 0
        while True:
            try:
                return operation()
            except sqlite3.IntegrityError as exc:
                # Constraint failures are not retried.
                raise PersistenceError(f"Failed to {label}: {exc}", record=record) from exc
            except sqlite3.Error as exc:
                if attempt >= self._max_retries:
                    raise PersistenceError(
                        f"Failed to {label} after {attempt + 1} attempt(s): {exc}",
                        record=record,
                    ) from exc
                attempt += 1
                logger.warning("Retrying %s (attempt %d): %s", label, attempt + 1, exc)
                if self._retry_backoff_seconds:
                    time.sleep(self._retry_backoff_seconds * attempt)
