"""Live service check.

Every selected method runs once per (scenario, account). Accounts are prepared
up front; one that cannot be prepared is recorded as a failure and none of its
units run. Accounts are closed when the sweep ends.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import logging

from docprobe_core.checks.common import run_suite, unique_unit_ids
from docprobe_core.config import PARALLEL_TASK_COUNT, AppConfig, RunSettings
from docprobe_core.errors import ConfigurationError
from docprobe_core.models.docset import DocSet, MethodDefinition, ScenarioDefinition
from docprobe_core.models.findings import Finding
from docprobe_core.models.report import UnitId, UnitResult
from docprobe_core.orchestration.reporting import ResultReporter
from docprobe_core.orchestration.runner import WorkItem
from docprobe_core.orchestration.selection import select_methods
from docprobe_core.registry import ResourceTypeRegistry
from docprobe_core.service.accounts import Credentials, ServiceAccount
from docprobe_core.service.live import run_scenario
from docprobe_core.validation.instance import InstanceValidator
from docprobe_core.validation.response import ResponseValidator
from docprobe_core.validation.results import CheckResults

_logger = logging.getLogger("docprobe.checks")

DEFAULT_SCENARIO = "default"


@dataclass(frozen=True)
class _LiveCall:
    method: MethodDefinition
    scenario: ScenarioDefinition
    account: ServiceAccount
    credentials: Credentials


def scenarios_for(docset: DocSet, method: MethodDefinition) -> list[ScenarioDefinition]:
    """Declared scenarios for ``method``, or one implicit ``default`` scenario."""
    return docset.scenarios_for_method(method) or [ScenarioDefinition(name=DEFAULT_SCENARIO, method=method.identifier)]


def select_accounts(accounts: Sequence[ServiceAccount], account_name: str | None = None) -> list[ServiceAccount]:
    """The named account, or every enabled account.

    Raises:
        ConfigurationError: no accounts are configured, or none match.
    """
    if not accounts:
        raise ConfigurationError("No account was found. Cannot connect to the service.")
    if account_name:
        chosen = [a for a in accounts if a.name == account_name]
        if not chosen:
            raise ConfigurationError(f"Unable to locate account '{account_name}'.")
        return chosen
    chosen = [a for a in accounts if a.enabled]
    if not chosen:
        raise ConfigurationError("No enabled account was found. Cannot connect to the service.")
    return chosen


def check_service(
    docset: DocSet,
    registry: ResourceTypeRegistry,
    accounts: Sequence[ServiceAccount],
    settings: RunSettings | None = None,
    method_name: str | None = None,
    file_name: str | None = None,
    account_name: str | None = None,
    parallel: bool = False,
    branch: str | None = None,
    app_config: AppConfig | None = None,
    reporter: ResultReporter | None = None,
    on_result: Callable[[UnitResult], None] | None = None,
    pause: Callable[[], None] | None = None,
) -> CheckResults:
    """Run documented requests against a live service and validate the responses.

    Raises:
        ConfigurationError: no usable account, a selector matched nothing, or
            pausing was requested together with a parallel run.
    """
    settings = settings or RunSettings()
    results = CheckResults(warnings_as_failures=settings.warnings_as_failures)

    if app_config is not None and not app_config.service_enabled_for_branch(branch):
        _logger.warning(
            'Aborting check-service run. Branch "%s" wasn\'t in the checkServiceEnabledBranches configuration list.',
            branch,
        )
        return results

    methods = select_methods(docset, method_name=method_name, file_name=file_name)
    chosen = select_accounts(accounts, account_name)
    concurrency = PARALLEL_TASK_COUNT if parallel else settings.concurrency
    if settings.pause_between_units and concurrency != 1:
        raise ConfigurationError("pausing between units requires a concurrency of 1")

    validator = ResponseValidator(InstanceValidator(registry))
    calls: list[_LiveCall] = []
    prepared: list[ServiceAccount] = []
    try:
        for account in chosen:
            try:
                account.prepare()
            except Exception as e:
                _logger.error("Unable to prepare account %s: %s", account.name, e)
                results.record_outcome(
                    UnitId(method="prepare-account", account=account.name),
                    "FAILED",
                    [Finding.of("UNIT_FAULT", str(e), exception=type(e).__name__)],
                    message=str(e),
                )
                continue
            prepared.append(account)
            credentials = account.create_credentials()
            for method in methods:
                calls.extend(_LiveCall(method, scenario, account, credentials) for scenario in scenarios_for(docset, method))

        ids = unique_unit_ids(
            UnitId(method=c.method.identifier, scenario=c.scenario.name, account=c.account.name) for c in calls
        )
        units = [
            WorkItem(unit_id=uid, payload=call, skip_reason=None if call.scenario.enabled else "scenario is disabled")
            for uid, call in zip(ids, calls)
        ]

        def body(item: WorkItem) -> list[Finding]:
            call: _LiveCall = item.payload
            return run_scenario(
                call.method, call.scenario, call.account, call.credentials, validator, settings.validation
            )

        return run_suite(
            units,
            body,
            settings,
            concurrency=concurrency,
            results=results,
            reporter=reporter,
            on_result=on_result,
            pause=pause,
        )
    finally:
        for account in prepared:
            account.close()
