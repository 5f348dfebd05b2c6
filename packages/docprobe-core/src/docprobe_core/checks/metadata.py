"""Service metadata check.

Every resource generated from the service schema carries a JSON example. That
example must validate against the resource as the documentation describes it.
String values that represent another primitive (``"42"`` for an integer) are
tolerated as warnings, since schema-generated examples are often all strings.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
import logging

from docprobe_core.checks.common import run_suite, unique_unit_ids
from docprobe_core.config import RunSettings
from docprobe_core.models.annotations import CodeBlockAnnotation
from docprobe_core.models.docset import DocSet
from docprobe_core.models.findings import Finding
from docprobe_core.models.report import UnitId, UnitResult
from docprobe_core.models.resources import ResourceDefinition
from docprobe_core.orchestration.reporting import ResultReporter
from docprobe_core.orchestration.runner import WorkItem
from docprobe_core.registry import ResourceTypeRegistry
from docprobe_core.validation.instance import InstanceValidator
from docprobe_core.validation.results import CheckResults

_logger = logging.getLogger("docprobe.checks")

METADATA_UNIT = "validate-service-metadata"


def check_metadata(
    docset: DocSet,
    schema_resources: Sequence[ResourceDefinition],
    settings: RunSettings | None = None,
    registry: ResourceTypeRegistry | None = None,
    reporter: ResultReporter | None = None,
    on_result: Callable[[UnitResult], None] | None = None,
) -> CheckResults:
    """Validate each schema resource example against the documented types.

    ``registry`` defaults to one built from the resources the doc set declares.
    """
    settings = settings or RunSettings()
    registry = registry if registry is not None else ResourceTypeRegistry.from_definitions(docset.resources)
    options = replace(settings.validation, relaxed_string_validation=True)
    validator = InstanceValidator(registry)
    _logger.info("Checking %d schema resource(s) against %d documented type(s)", len(schema_resources), len(registry))

    ids = unique_unit_ids(UnitId(method=METADATA_UNIT, scenario=r.name) for r in schema_resources)
    units = [
        WorkItem(
            unit_id=uid,
            payload=resource,
            skip_reason=None if resource.example else "schema resource has no JSON example",
        )
        for uid, resource in zip(ids, schema_resources)
    ]

    def body(item: WorkItem) -> list[Finding]:
        resource: ResourceDefinition = item.payload
        annotation = CodeBlockAnnotation(resource_type=resource.name, block_type="resource")
        return validator.validate_json(resource.example or "", annotation, options)

    return run_suite(units, body, settings, reporter=reporter, on_result=on_result)
