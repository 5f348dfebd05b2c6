"""Run-level result aggregation."""

from __future__ import annotations

from collections.abc import Iterable
import threading

from docprobe_core.models.findings import Finding
from docprobe_core.models.outcome import Outcome
from docprobe_core.models.report import RunReport, UnitId, UnitResult

_COUNTER_FOR: dict[str, str] = {
    "PASSED": "success_count",
    "WARNING": "warning_count",
    "FAILED": "failure_count",
    "SKIPPED": "skipped_count",
}


class CheckResults:
    """Accumulates unit outcomes into counters and a per-unit log.

    Safe for concurrent writers. Counts only grow while recording; the single
    exception is ``convert_warnings_to_success``, which the caller invokes
    explicitly once a sweep is over.
    """

    def __init__(self, warnings_as_failures: bool = False):
        self.warnings_as_failures = warnings_as_failures
        self.success_count = 0
        self.warning_count = 0
        self.failure_count = 0
        self.skipped_count = 0
        self._units: list[UnitResult] = []
        self._lock = threading.Lock()

    def record_outcome(
        self,
        unit_id: UnitId,
        outcome: Outcome,
        findings: Iterable[Finding] = (),
        message: str = "",
        duration_s: float | None = None,
    ) -> UnitResult:
        result = UnitResult(
            unit_id=unit_id,
            outcome=outcome,
            message=message,
            findings=list(findings),
            duration_s=duration_s,
        )
        return self.record(result)

    def record(self, result: UnitResult) -> UnitResult:
        if result.outcome == "WARNING" and self.warnings_as_failures:
            result = result.model_copy(update={"outcome": "FAILED"})
        with self._lock:
            self._units.append(result)
            counter = _COUNTER_FOR[result.outcome]
            setattr(self, counter, getattr(self, counter) + 1)
        return result

    def convert_warnings_to_success(self) -> None:
        """Relabel every WARNING record as PASSED. Applying it twice equals applying it once."""
        with self._lock:
            converted = []
            for unit in self._units:
                if unit.outcome == "WARNING":
                    unit = unit.model_copy(update={"outcome": "PASSED"})
                converted.append(unit)
            self._units = converted
            self.success_count += self.warning_count
            self.warning_count = 0

    @property
    def were_failures(self) -> bool:
        return self.failure_count > 0

    def overall_success(self) -> bool:
        return self.failure_count == 0

    @property
    def units(self) -> list[UnitResult]:
        with self._lock:
            return sorted(self._units, key=lambda u: u.unit_id.sort_key())

    def report(self) -> RunReport:
        units = self.units
        with self._lock:
            return RunReport(
                passed=self.success_count,
                warnings=self.warning_count,
                failures=self.failure_count,
                skipped=self.skipped_count,
                units=units,
            )

    def __add__(self, other: "CheckResults") -> "CheckResults":
        combined = CheckResults(warnings_as_failures=self.warnings_as_failures or other.warnings_as_failures)
        for result in self.units + other.units:
            combined.record(result)
        return combined
