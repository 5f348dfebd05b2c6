"""
Concurrent execution of units of work.

Each unit moves PENDING -> RUNNING -> {PASSED, WARNING, FAILED, SKIPPED}.
Units are dealt round-robin into ``concurrency`` partitions; one pool worker
runs each partition in order. A fault inside a unit becomes a FAILED outcome
for that unit only. Result callbacks and reporter calls pass through a single
lock so two units never interleave their output; a callback that raises is
logged and the sweep carries on.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
import threading
import time
from typing import Any, Literal

from docprobe_core.config import RunSettings
from docprobe_core.errors import ConfigurationError
from docprobe_core.models.findings import Finding, errors_in, warnings_in
from docprobe_core.models.outcome import Outcome, classify
from docprobe_core.models.report import RunReport, UnitId, UnitResult
from docprobe_core.orchestration.reporting import NullReporter, ResultReporter
from docprobe_core.validation.results import CheckResults

_logger = logging.getLogger("docprobe.runner")

UnitState = Literal["PENDING", "RUNNING", "PASSED", "WARNING", "FAILED", "SKIPPED"]
TERMINAL_STATES: frozenset[str] = frozenset({"PASSED", "WARNING", "FAILED", "SKIPPED"})


@dataclass(frozen=True)
class WorkItem:
    """One unit of work. ``skip_reason`` marks a unit that is recorded SKIPPED without running."""

    unit_id: UnitId
    payload: Any = None
    skip_reason: str | None = None


UnitBody = Callable[[WorkItem], Iterable[Finding]]


def partition(items: Sequence[WorkItem], count: int) -> list[list[WorkItem]]:
    """Deal ``items`` round-robin into ``count`` slices."""
    return [list(items[i::count]) for i in range(count)]


def summarize(findings: Sequence[Finding], outcome: Outcome, success_message: str = "No errors.") -> str:
    """One-line message for a unit: the single finding, or a 'multiple' note."""
    if outcome == "FAILED":
        errors = errors_in(list(findings))
        if len(errors) == 1:
            return errors[0].message.splitlines()[0]
        return "Multiple errors occurred."
    if outcome == "WARNING":
        warnings = warnings_in(list(findings))
        if len(warnings) == 1:
            return warnings[0].message.splitlines()[0]
        return "Multiple warnings occurred."
    return success_message


class TestOrchestrator:
    """Runs units of work on a bounded worker pool and records their outcomes."""

    __test__ = False

    def __init__(
        self,
        results: CheckResults | None = None,
        settings: RunSettings | None = None,
        reporter: ResultReporter | None = None,
        on_result: Callable[[UnitResult], None] | None = None,
        pause: Callable[[], None] | None = None,
    ):
        self.settings = settings or RunSettings()
        self.results = results or CheckResults(warnings_as_failures=self.settings.warnings_as_failures)
        self.reporter = reporter or NullReporter()
        self._on_result = on_result
        self._pause = pause if self.settings.pause_between_units else None
        self._output_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._states: dict[UnitId, UnitState] = {}

    @property
    def states(self) -> dict[UnitId, UnitState]:
        with self._state_lock:
            return dict(self._states)

    def run(
        self,
        units: Iterable[WorkItem],
        concurrency: int | None,
        body: UnitBody,
    ) -> RunReport:
        """Execute every unit and return the aggregated report.

        ``concurrency`` of None uses the run settings. Once started, a sweep
        runs every scheduled unit to completion.
        """
        if concurrency is None:
            concurrency = self.settings.concurrency
        if concurrency < 1:
            raise ConfigurationError(f"concurrency must be a positive integer, got {concurrency}")
        if self._pause is not None and concurrency != 1:
            raise ConfigurationError("pausing between units requires a concurrency of 1")

        items = list(units)
        with self._state_lock:
            for item in items:
                if item.unit_id in self._states:
                    raise ConfigurationError(f"unit {item.unit_id} is scheduled more than once")
                self._states[item.unit_id] = "PENDING"

        _logger.info("Running %d unit(s) with concurrency %d", len(items), concurrency)
        slices = [s for s in partition(items, concurrency) if s]
        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="docprobe") as pool:
            futures = [pool.submit(self._run_partition, s, body) for s in slices]
            for future in as_completed(futures):
                future.result()

        return self.results.report()

    def _run_partition(self, items: list[WorkItem], body: UnitBody) -> None:
        for item in items:
            self._execute(item, body)
            if self._pause is not None:
                self._pause()

    def _execute(self, item: WorkItem, body: UnitBody) -> UnitResult:
        if item.skip_reason is not None:
            result = self.results.record_outcome(item.unit_id, "SKIPPED", message=item.skip_reason)
            self._finish(item, result)
            return result

        self._transition(item.unit_id, "RUNNING")
        self._notify("start_unit", self.reporter.start_unit, item.unit_id)

        started = time.perf_counter()
        try:
            findings = list(body(item))
            outcome = classify(findings, silence_warnings=self.settings.silence_warnings)
        except Exception as e:
            _logger.debug("Unit %s raised", item.unit_id, exc_info=True)
            findings = [
                Finding.of(
                    "UNIT_FAULT",
                    f"{type(e).__name__}: {e}",
                    exception=type(e).__name__,
                )
            ]
            outcome = "FAILED"
        duration = time.perf_counter() - started

        result = self.results.record_outcome(
            item.unit_id,
            outcome,
            findings,
            message=summarize(findings, outcome),
            duration_s=duration,
        )
        self._finish(item, result)
        return result

    def _finish(self, item: WorkItem, result: UnitResult) -> None:
        self._transition(item.unit_id, result.outcome)
        if self._on_result is not None:
            self._notify("on_result", self._on_result, result)
        self._notify("finish_unit", self.reporter.finish_unit, result)

    def _notify(self, name: str, callback: Callable[[Any], None], arg: Any) -> None:
        # Output hooks never stop a sweep; a broken console or reporter is logged.
        with self._output_lock:
            try:
                callback(arg)
            except Exception:
                _logger.warning("%s failed for %s", name, getattr(arg, "unit_id", arg), exc_info=True)

    def _transition(self, unit_id: UnitId, state: UnitState) -> None:
        with self._state_lock:
            current = self._states.get(unit_id, "PENDING")
            if current in TERMINAL_STATES:
                raise RuntimeError(f"unit {unit_id} already finished as {current}")
            self._states[unit_id] = state
