"""One live call: send a documented request through an account and validate what comes back."""

from __future__ import annotations

import logging
import re

from docprobe_core.config import ValidationOptions
from docprobe_core.data.http_text import parse_http_request, parse_http_response
from docprobe_core.models.docset import MethodDefinition, ScenarioDefinition
from docprobe_core.models.findings import Finding
from docprobe_core.service.accounts import Credentials, ServiceAccount
from docprobe_core.validation.response import ResponseValidator

_logger = logging.getLogger("docprobe.service")

_PLACEHOLDER_RE = re.compile(r"\{([^{}/]+)\}")


def run_scenario(
    method: MethodDefinition,
    scenario: ScenarioDefinition,
    account: ServiceAccount,
    credentials: Credentials,
    validator: ResponseValidator,
    options: ValidationOptions,
) -> list[Finding]:
    """Findings for one (method, scenario, account) unit.

    Transport errors propagate; the orchestrator records them as unit faults.
    """
    if not method.expected_response:
        return [Finding.of("MISSING_RESPONSE", "Null response where one was expected.")]

    expected = parse_http_response(method.expected_response)
    request = parse_http_request(method.request).with_substitutions(scenario.request_parameters)
    missing = _PLACEHOLDER_RE.findall(request.url)
    if missing:
        return [
            Finding.of(
                "MISSING_REQUIRED_ARGUMENTS",
                f"scenario {scenario.name} does not supply request parameters: {', '.join(missing)}",
                parameters=missing,
            )
        ]

    _logger.debug("%s %s via %s [%s]", request.method, request.url, account.name, scenario.name)
    actual = account.send(request, credentials, options.additional_headers)
    _logger.debug("%s %s -> %d", request.method, request.url, actual.status_code)

    return validator.validate_response(expected, actual, None, method.response_annotation, options)
