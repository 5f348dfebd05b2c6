from pydantic import BaseModel, ConfigDict, Field

from .findings import Finding
from .outcome import Outcome


class UnitId(BaseModel):
    """Stable identity of one unit of work: (method, scenario, account)."""

    model_config = ConfigDict(extra="ignore", frozen=True)
    method: str
    scenario: str = ""
    account: str = ""

    def sort_key(self) -> tuple[str, str, str]:
        return (self.method.lower(), self.scenario.lower(), self.account.lower())

    def __str__(self) -> str:
        label = self.method
        if self.scenario:
            label = f"{label} [{self.scenario}]"
        if self.account:
            label = f"{self.account.lower()}: {label}"
        return label


class UnitResult(BaseModel):
    """Terminal record for one unit of work."""

    model_config = ConfigDict(extra="ignore", frozen=True)
    unit_id: UnitId
    outcome: Outcome
    message: str = ""
    findings: list[Finding] = Field(default_factory=list)
    duration_s: float | None = None

    @property
    def detail_text(self) -> str:
        return "\n".join(f.error_text for f in self.findings)


class RunReport(BaseModel):
    """Aggregated result of one sweep."""

    model_config = ConfigDict(extra="ignore")
    passed: int = 0
    warnings: int = 0
    failures: int = 0
    skipped: int = 0
    units: list[UnitResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failures == 0

    @property
    def summary(self) -> dict:
        return {
            "passed": self.passed,
            "warning": self.warnings,
            "failed": self.failures,
            "skipped": self.skipped,
        }

    def as_rows(self) -> list[tuple[str, str, str, str]]:
        """Flat (unit_id, outcome, message, detail_text) rows for external build-status systems."""
        return [(str(u.unit_id), u.outcome, u.message, u.detail_text) for u in self.units]
