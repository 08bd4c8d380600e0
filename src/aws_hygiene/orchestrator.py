"""Run orchestration: open a run, evaluate resources, persist violations."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from aws_hygiene.audit.models import RunStatus
from aws_hygiene.audit.recorder import ViolationRecorder
from aws_hygiene.domain.resources import Resource
from aws_hygiene.errors import PersistenceError
from aws_hygiene.rules.engine import Evaluation, RuleEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedViolation:
    """A violation that was detected but could not be persisted."""

    resource_id: str
    resource_type: str
    rule_name: str
    error: str


@dataclass
class RunReport:
    run_id: int
    status: RunStatus = RunStatus.RUNNING
    evaluated: int = 0
    violations_recorded: int = 0
    failed: list[FailedViolation] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    close_error: str | None = None

    @property
    def violations_detected(self) -> int:
        return self.violations_recorded + len(self.failed)


class RunOrchestrator:
    def __init__(self, engine: RuleEngine, recorder: ViolationRecorder) -> None:
        self._engine = engine
        self._recorder = recorder

    def run(self, resources: Iterable[Resource]) -> RunReport:
        """Evaluate every resource sequentially within a new run."""
        started = time.monotonic()
        report, rule_ids = self._start()
        for resource in resources:
            self._persist(report, rule_ids, self._engine.evaluate(resource))
        return self._finish(report, started, timed_out=False)

    async def run_async(
        self,
        resources: Iterable[Resource],
        concurrency: int = 8,
        deadline_seconds: float | None = None,
    ) -> RunReport:
        """Evaluate resources on worker threads; a single writer persists results.

        When ``deadline_seconds`` elapses, outstanding evaluations are cancelled,
        results already produced are still persisted and the run is closed as
        Partial.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        started = time.monotonic()
        report, rule_ids = self._start()

        semaphore = asyncio.Semaphore(concurrency)
        queue: asyncio.Queue[Evaluation | None] = asyncio.Queue()

        async def evaluate(resource: Resource) -> None:
            async with semaphore:
                evaluation = await asyncio.to_thread(self._engine.evaluate, resource)
            await queue.put(evaluation)

        async def write() -> None:
            while True:
                evaluation = await queue.get()
                if evaluation is None:
                    return
                await asyncio.to_thread(self._persist, report, rule_ids, evaluation)

        writer = asyncio.create_task(write())
        tasks = [asyncio.create_task(evaluate(resource)) for resource in resources]
        timed_out = False
        try:
            if tasks:
                done, pending = await asyncio.wait(
                    tasks,
                    timeout=deadline_seconds,
                    return_when=asyncio.FIRST_EXCEPTION,
                )
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)
                for task in done:
                    exc = task.exception()
                    if exc is not None:
                        raise exc
                if pending:
                    timed_out = True
                    logger.warning(
                        "Run %d exceeded its %.1fs deadline; %d evaluation(s) cancelled",
                        report.run_id,
                        deadline_seconds,
                        len(pending),
                    )
        finally:
            await queue.put(None)
            await writer
        return self._finish(report, started, timed_out=timed_out)

    def _start(self) -> tuple[RunReport, dict[str, int]]:
        run_id = self._recorder.open_run()
        # The catalog must be complete before any violation references it.
        rule_ids = {
            rule.name: self._recorder.ensure_rule_catalogued(rule)
            for rule in self._engine.get_rules()
        }
        return RunReport(run_id=run_id), rule_ids

    def _persist(
        self,
        report: RunReport,
        rule_ids: dict[str, int],
        evaluation: Evaluation,
    ) -> None:
        report.evaluated += 1
        rule = evaluation.rule
        if rule is None:
            return
        resource = evaluation.resource
        try:
            self._recorder.record_violation(
                report.run_id,
                resource.id,
                resource.type.value,
                rule_ids[rule.name],
            )
        except PersistenceError as exc:
            logger.warning(
                "Could not record %s violation for %s: %s", rule.name, resource.id, exc
            )
            report.failed.append(
                FailedViolation(
                    resource_id=resource.id,
                    resource_type=resource.type.value,
                    rule_name=rule.name,
                    error=str(exc),
                )
            )
            return
        report.violations_recorded += 1
        logger.info(
            "%s rule has identified %s resource as invalid",
            rule.name,
            resource.id,
            extra={"rule_description": rule.description},
        )

    def _finish(self, report: RunReport, started: float, timed_out: bool) -> RunReport:
        if timed_out:
            report.status = RunStatus.PARTIAL
        elif report.failed:
            report.status = RunStatus.COMPLETED_WITH_ERRORS
        else:
            report.status = RunStatus.COMPLETED
        try:
            self._recorder.close_run(report.run_id, report.status)
        except PersistenceError as exc:
            logger.error("Could not close run %d: %s", report.run_id, exc)
            report.close_error = str(exc)
            if report.status is RunStatus.COMPLETED:
                report.status = RunStatus.COMPLETED_WITH_ERRORS
        report.elapsed_seconds = time.monotonic() - started
        return report
