"""Entrypoint for an audit run."""

from __future__ import annotations

import asyncio
import logging
import resource
import sys
import time
from pathlib import Path

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # pragma: no cover

from aws_hygiene import __version__
from aws_hygiene.app import AppContext, build_app_context
from aws_hygiene.audit.models import RunStatus
from aws_hygiene.errors import ConfigurationError, PersistenceError, ResourceSourceError
from aws_hygiene.logging_utils import configure_logging
from aws_hygiene.orchestrator import RunOrchestrator, RunReport
from aws_hygiene.rules.registry import build_engine

EXIT_OK = 0
EXIT_DEGRADED = 1
EXIT_CONFIGURATION = 2
EXIT_SOURCE = 3
EXIT_PERSISTENCE = 4

logger = logging.getLogger(__name__)


def run_audit(ctx: AppContext) -> RunReport:
    """Crawl the account, evaluate every resource and persist violations."""
    settings = ctx.settings
    account_id = settings.aws.account_id or ctx.crawler.get_caller_account_id()
    inventory = ctx.crawler.crawl(account_id)
    engine = build_engine(ctx.rules_config.rules, inventory, ctx.crawler)
    orchestrator = RunOrchestrator(engine, ctx.recorder)

    execution = settings.execution
    if execution.concurrency > 1 or execution.run_deadline_seconds is not None:
        return asyncio.run(
            orchestrator.run_async(
                inventory.resources(),
                concurrency=execution.concurrency,
                deadline_seconds=execution.run_deadline_seconds,
            )
        )
    return orchestrator.run(inventory.resources())


def _peak_memory_mb() -> float:
    # ru_maxrss is reported in kilobytes on Linux.
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024


def _print_report(report: RunReport, elapsed: float) -> None:
    print(f"Run {report.run_id} finished with status {report.status.value}")
    print(
        f"Evaluated {report.evaluated} resource(s), "
        f"recorded {report.violations_recorded} violation(s)"
    )
    for failed in report.failed:
        print(
            f"  not recorded: {failed.rule_name} {failed.resource_type} "
            f"{failed.resource_id} ({failed.error})"
        )
    if report.close_error:
        print(f"  run status not saved: {report.close_error}")
    print(f"Time: {elapsed:4.2f} seconds, Memory: {_peak_memory_mb():4.2f} MB")


def run_entrypoint() -> int:
    try:
        configure_logging()
    except (RuntimeError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return EXIT_CONFIGURATION
    logger.info("Starting AWS hygiene audit v%s", __version__)
    started = time.monotonic()
    try:
        ctx = build_app_context()
    except (ConfigurationError, FileNotFoundError) as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    try:
        report = run_audit(ctx)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    except ResourceSourceError as exc:
        logger.error("Could not list account resources: %s", exc)
        return EXIT_SOURCE
    except PersistenceError as exc:
        logger.error("Could not record the run: %s", exc)
        return EXIT_PERSISTENCE
    finally:
        ctx.close()

    _print_report(report, time.monotonic() - started)
    if report.status is RunStatus.COMPLETED:
        return EXIT_OK
    return EXIT_DEGRADED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(run_entrypoint())
