"""SQLite access layer for runs, the rule catalog and violations."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Mapping, Sequence

from aws_hygiene.audit.models import RuleCatalogEntry, RunRecord, ViolationRecord

_SqlValue = str | bytes | int | float | None
_SqlParams = Sequence[_SqlValue] | Mapping[str, _SqlValue]


class SqliteStore:
    def __init__(self, path: str, wal: bool = True) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._closed = False
        if wal:
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS runs (
                run_id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                status TEXT NOT NULL,
                completed_at TEXT
            );

            CREATE TABLE IF NOT EXISTS rules (
                rule_id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                description TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS violations (
                violation_id INTEGER PRIMARY KEY AUTOINCREMENT,
                run_id INTEGER NOT NULL,
                resource_id TEXT NOT NULL,
                resource_type TEXT NOT NULL,
                rule_id INTEGER NOT NULL,
                FOREIGN KEY(run_id) REFERENCES runs(run_id),
                FOREIGN KEY(rule_id) REFERENCES rules(rule_id)
            );

            CREATE INDEX IF NOT EXISTS idx_violations_run_id ON violations(run_id);
            CREATE INDEX IF NOT EXISTS idx_violations_resource_id ON violations(resource_id);
            CREATE INDEX IF NOT EXISTS idx_runs_status ON runs(status);
            """
        )
        self._conn.commit()

    def execute(
        self,
        query: str,
        params: _SqlParams,
    ) -> int | None:
        """Run a write statement and return the last inserted row id."""
        with self._lock:
            cursor = self._conn.execute(query, params)
            self._conn.commit()
            return cursor.lastrowid

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True

    def fetch_one(
        self,
        query: str,
        params: _SqlParams,
    ) -> sqlite3.Row | None:
        with self._lock:
            cur = self._conn.execute(query, params)
            return cur.fetchone()

    def fetch_all(
        self,
        query: str,
        params: _SqlParams,
    ) -> list[sqlite3.Row]:
        with self._lock:
            cur = self._conn.execute(query, params)
            return cur.fetchall()

    def create_run(self, created_at: str, status: str) -> int:
        run_id = self.execute(
            "INSERT INTO runs (created_at, status, completed_at) VALUES (?, ?, NULL)",
            (created_at, status),
        )
        return _require_row_id(run_id, "runs")

    def get_run(self, run_id: int) -> RunRecord | None:
        row = self.fetch_one("SELECT * FROM runs WHERE run_id = ?", (run_id,))
        if row is None:
            return None
        return RunRecord(**dict(row))

    def update_run_status(self, run_id: int, status: str, completed_at: str | None) -> None:
        self.execute(
            "UPDATE runs SET status = ?, completed_at = ? WHERE run_id = ?",
            (status, completed_at, run_id),
        )

    def get_rule_by_name(self, name: str) -> RuleCatalogEntry | None:
        row = self.fetch_one("SELECT * FROM rules WHERE name = ?", (name,))
        if row is None:
            return None
        return RuleCatalogEntry(**dict(row))

    def insert_rule(self, name: str, description: str) -> int:
        rule_id = self.execute(
            "INSERT INTO rules (name, description) VALUES (?, ?)",
            (name, description),
        )
        return _require_row_id(rule_id, "rules")

    def list_rules(self) -> list[RuleCatalogEntry]:
        rows = self.fetch_all("SELECT * FROM rules ORDER BY rule_id", ())
        return [RuleCatalogEntry(**dict(row)) for row in rows]

    def create_violation(self, violation: ViolationRecord) -> int:
        violation_id = self.execute(
            """
            INSERT INTO violations (run_id, resource_id, resource_type, rule_id)
            VALUES (?, ?, ?, ?)
            """,
            (
                violation.run_id,
                violation.resource_id,
                violation.resource_type,
                violation.rule_id,
            ),
        )
        return _require_row_id(violation_id, "violations")

    def list_violations(self, run_id: int) -> list[ViolationRecord]:
        rows = self.fetch_all(
            "SELECT * FROM violations WHERE run_id = ? ORDER BY violation_id",
            (run_id,),
        )
        return [ViolationRecord(**dict(row)) for row in rows]


def _require_row_id(row_id: int | None, table: str) -> int:
    if row_id is None:
        raise sqlite3.DatabaseError(f"INSERT into {table} returned no row id")
    return row_id
