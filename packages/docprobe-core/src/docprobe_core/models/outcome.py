from collections.abc import Iterable
from typing import Literal

from .findings import Finding

Outcome = Literal["PASSED", "WARNING", "FAILED", "SKIPPED"]

# Rank used by worst_of; SKIPPED only survives when nothing was executed.
_OUTCOME_RANK: dict[str, int] = {
    "SKIPPED": 0,
    "PASSED": 1,
    "WARNING": 2,
    "FAILED": 3,
}


def worst_of(outcomes: Iterable[Outcome]) -> Outcome:
    """Combine outcomes into the worst one present, independent of order.

    FAILED beats WARNING beats PASSED beats SKIPPED. An empty input is SKIPPED.
    """
    worst: Outcome = "SKIPPED"
    for outcome in outcomes:
        if _OUTCOME_RANK[outcome] > _OUTCOME_RANK[worst]:
            worst = outcome
    return worst


def classify(findings: Iterable[Finding], silence_warnings: bool = False) -> Outcome:
    """Outcome of an executed unit of work given its findings."""
    has_warning = False
    for finding in findings:
        if finding.severity == "ERROR":
            return "FAILED"
        if finding.severity == "WARN":
            has_warning = True
    if has_warning and not silence_warnings:
        return "WARNING"
    return "PASSED"
