"""
Explicit configuration values for docprobe.

Nothing here is process-wide state: validators and the orchestrator receive
these values as arguments.

Environment flags read by ``RunSettings.from_env`` (all optional):

    DOCPROBE_CONCURRENCY = positive integer
        Default: "1". Worker count for sweeps.

    DOCPROBE_SILENCE_WARNINGS = "0" | "1"
        Default: "0". Warnings neither print nor downgrade a unit's outcome.

    DOCPROBE_IGNORE_WARNINGS = "0" | "1"
        Default: "0". Convert WARNING records to PASSED after the sweep.

    DOCPROBE_STRICT = "0" | "1"
        Default: "0". Record WARNING outcomes as FAILED.

    DOCPROBE_PAUSE = "0" | "1"
        Default: "0". Prompt before each unit. Requires a concurrency of 1.

Pacing and parallel execution are mutually exclusive by construction:
``RunSettings`` refuses to be built with both.
"""

from dataclasses import dataclass, field, replace
import os

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

PARALLEL_TASK_COUNT = 5


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


@dataclass(frozen=True)
class ValidationOptions:
    relaxed_string_validation: bool = False
    required_headers: tuple[str, ...] = ()
    additional_headers: tuple[tuple[str, str], ...] = ()

    def with_additional_headers(self, headers: list[tuple[str, str]]) -> "ValidationOptions":
        return replace(self, additional_headers=tuple(self.additional_headers) + tuple(headers))


@dataclass(frozen=True)
class RunSettings:
    concurrency: int = 1
    pause_between_units: bool = False
    silence_warnings: bool = False
    ignore_warnings: bool = False
    warnings_as_failures: bool = False
    verbose: bool = False
    validation: ValidationOptions = field(default_factory=ValidationOptions)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {self.concurrency}")
        if self.pause_between_units and self.concurrency != 1:
            raise ValueError("pausing between units requires a concurrency of 1")

    @classmethod
    def from_env(cls) -> "RunSettings":
        return cls(
            concurrency=_env_int("DOCPROBE_CONCURRENCY", 1),
            pause_between_units=_env_bool("DOCPROBE_PAUSE", False),
            silence_warnings=_env_bool("DOCPROBE_SILENCE_WARNINGS", False),
            ignore_warnings=_env_bool("DOCPROBE_IGNORE_WARNINGS", False),
            warnings_as_failures=_env_bool("DOCPROBE_STRICT", False),
        )


def parse_header_list(text: str | None) -> list[tuple[str, str]]:
    """Parse ``"Name: value|Other: value"`` into header pairs."""
    if not text:
        return []
    headers = []
    for item in text.split("|"):
        if not item.strip():
            continue
        name, sep, value = item.partition(":")
        if not sep:
            raise ValueError(f"header {item!r} must be written as 'Name: value'")
        headers.append((name.strip(), value.strip()))
    return headers


class AppConfig(BaseModel):
    """Repository-level configuration file (``docprobe.yaml``)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    check_service_enabled_branches: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("check_service_enabled_branches", "checkServiceEnabledBranches"),
    )
    required_headers: list[str] = Field(default_factory=list)
    source_path: str | None = None

    def service_enabled_for_branch(self, branch: str | None) -> bool:
        if not branch or self.check_service_enabled_branches is None:
            return True
        return branch in self.check_service_enabled_branches
