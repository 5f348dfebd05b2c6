from collections.abc import Callable, Iterable

from docprobe_core.config import RunSettings
from docprobe_core.models.report import UnitId, UnitResult
from docprobe_core.orchestration.reporting import ResultReporter
from docprobe_core.orchestration.runner import TestOrchestrator, UnitBody, WorkItem
from docprobe_core.validation.results import CheckResults


def unique_unit_ids(ids: Iterable[UnitId]) -> list[UnitId]:
    """Number repeated ids (``#2``, ``#3``...) on their scenario so each unit is scheduled once."""
    seen: dict[UnitId, int] = {}
    unique = []
    for unit_id in ids:
        count = seen.get(unit_id, 0) + 1
        seen[unit_id] = count
        if count > 1:
            scenario = f"{unit_id.scenario} #{count}".strip()
            unit_id = unit_id.model_copy(update={"scenario": scenario})
        unique.append(unit_id)
    return unique


def run_suite(
    units: Iterable[WorkItem],
    body: UnitBody,
    settings: RunSettings,
    *,
    concurrency: int | None = None,
    results: CheckResults | None = None,
    reporter: ResultReporter | None = None,
    on_result: Callable[[UnitResult], None] | None = None,
    pause: Callable[[], None] | None = None,
) -> CheckResults:
    """Run ``units`` through an orchestrator and return the filled-in results."""
    results = results if results is not None else CheckResults(warnings_as_failures=settings.warnings_as_failures)
    orchestrator = TestOrchestrator(results, settings, reporter=reporter, on_result=on_result, pause=pause)
    orchestrator.run(units, concurrency, body)
    if settings.ignore_warnings:
        results.convert_warnings_to_success()
    return results
