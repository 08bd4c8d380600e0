"""Application context assembly."""

from __future__ import annotations

from dataclasses import dataclass

from aws_hygiene.audit.db import SqliteStore
from aws_hygiene.audit.recorder import ViolationRecorder
from aws_hygiene.config import Settings, load_settings
from aws_hygiene.crawler.aws import AWSCrawler
from aws_hygiene.rules.loader import load_rules_config
from aws_hygiene.rules.models import RulesConfig
from aws_hygiene.rules.registry import validate_rule_flags


@dataclass
class AppContext:
    """Dependencies for one audit process.

    Building the context validates the rule flags, so a bad rules file fails
    before the store is opened or any AWS call is made.
    """

    settings: Settings
    rules_config: RulesConfig
    store: SqliteStore
    recorder: ViolationRecorder
    crawler: AWSCrawler

    def close(self) -> None:
        self.store.close()


def build_app_context(settings: Settings | None = None) -> AppContext:
    settings = settings or load_settings()
    rules_config = load_rules_config(settings.rules.path)
    validate_rule_flags(rules_config.rules)

    store = SqliteStore(settings.storage.sqlite_path, wal=settings.storage.sqlite_wal)
    recorder = ViolationRecorder(store, max_retries=settings.execution.max_retries)

    return AppContext(
        settings=settings,
        rules_config=rules_config,
        store=store,
        recorder=recorder,
        crawler=AWSCrawler(),
    )
