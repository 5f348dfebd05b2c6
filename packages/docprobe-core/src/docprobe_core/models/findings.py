from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["ERROR", "WARN", "INFO"]

FindingCode = Literal[
    "MALFORMED_JSON",
    "MISSING_REQUIRED_PROPERTY",
    "UNEXPECTED_PROPERTY",
    "TYPE_MISMATCH",
    "NULL_NOT_ALLOWED",
    "UNRESOLVED_TYPE",
    "CYCLIC_TYPE",
    "EXPECTED_COLLECTION",
    "MISSING_COLLECTION_PROPERTY",
    "STATUS_CODE_MISMATCH",
    "ERROR_EXPECTED",
    "MISSING_HEADER",
    "CONTENT_TYPE_MISMATCH",
    "EXPECTED_EMPTY_BODY",
    "MISSING_RESPONSE",
    "LONG_RUNNING_OPERATION",
    "UNIT_FAULT",
    "MISSING_REQUIRED_ARGUMENTS",
]

# Severity belongs to the code; call sites only override it for an explicit relaxation.
DEFAULT_SEVERITY: dict[str, Severity] = {
    "MALFORMED_JSON": "ERROR",
    "MISSING_REQUIRED_PROPERTY": "ERROR",
    "UNEXPECTED_PROPERTY": "WARN",
    "TYPE_MISMATCH": "ERROR",
    "NULL_NOT_ALLOWED": "ERROR",
    "UNRESOLVED_TYPE": "ERROR",
    "CYCLIC_TYPE": "ERROR",
    "EXPECTED_COLLECTION": "ERROR",
    "MISSING_COLLECTION_PROPERTY": "ERROR",
    "STATUS_CODE_MISMATCH": "ERROR",
    "ERROR_EXPECTED": "ERROR",
    "MISSING_HEADER": "ERROR",
    "CONTENT_TYPE_MISMATCH": "WARN",
    "EXPECTED_EMPTY_BODY": "ERROR",
    "MISSING_RESPONSE": "ERROR",
    "LONG_RUNNING_OPERATION": "INFO",
    "UNIT_FAULT": "ERROR",
    "MISSING_REQUIRED_ARGUMENTS": "ERROR",
}


class Finding(BaseModel):
    """A single validation finding with severity, code, message, and context."""

    model_config = ConfigDict(extra="ignore", frozen=True)
    severity: Severity
    code: FindingCode
    message: str
    path: str | None = None
    context: dict = Field(default_factory=dict)

    @classmethod
    def of(
        cls,
        code: FindingCode,
        message: str,
        *,
        path: str | None = None,
        severity: Severity | None = None,
        **context,
    ) -> "Finding":
        """Build a finding whose severity defaults to the one registered for ``code``."""
        return cls(
            severity=severity or DEFAULT_SEVERITY[code],
            code=code,
            message=message,
            path=path,
            context=context,
        )

    @property
    def is_error(self) -> bool:
        return self.severity == "ERROR"

    @property
    def is_warning(self) -> bool:
        return self.severity == "WARN"

    @property
    def error_text(self) -> str:
        location = f" at {self.path}" if self.path else ""
        return f"{self.severity} {self.code}{location}: {self.message}"


def errors_in(findings: list[Finding]) -> list[Finding]:
    return [f for f in findings if f.is_error]


def warnings_in(findings: list[Finding]) -> list[Finding]:
    return [f for f in findings if f.is_warning]
