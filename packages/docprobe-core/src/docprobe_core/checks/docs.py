"""Documentation consistency checks: JSON examples and documented request/response pairs."""

from __future__ import annotations

from collections.abc import Callable
import logging

from docprobe_core.checks.common import run_suite, unique_unit_ids
from docprobe_core.config import RunSettings
from docprobe_core.data.http_text import parse_http_request, parse_http_response
from docprobe_core.models.docset import DocSet, ExampleBlock, MethodDefinition
from docprobe_core.models.findings import Finding
from docprobe_core.models.report import UnitId, UnitResult
from docprobe_core.orchestration.reporting import ResultReporter
from docprobe_core.orchestration.runner import WorkItem
from docprobe_core.orchestration.selection import select_methods
from docprobe_core.registry import ResourceTypeRegistry
from docprobe_core.validation.instance import InstanceValidator
from docprobe_core.validation.response import ResponseValidator
from docprobe_core.validation.results import CheckResults

_logger = logging.getLogger("docprobe.checks")


def _checkable(example: ExampleBlock) -> bool:
    return example.language.lower() == "json" and example.annotation.block_type != "ignored"


def check_examples(
    docset: DocSet,
    registry: ResourceTypeRegistry,
    settings: RunSettings | None = None,
    reporter: ResultReporter | None = None,
    on_result: Callable[[UnitResult], None] | None = None,
) -> CheckResults:
    """One unit per annotated JSON example, validated against its declared resource type."""
    settings = settings or RunSettings()
    validator = InstanceValidator(registry)

    examples = [(doc.display_name, ex) for doc in docset.files for ex in doc.examples if _checkable(ex)]
    ids = unique_unit_ids(UnitId(method=f"check-example: {ex.name}", scenario=name) for name, ex in examples)
    units = [WorkItem(unit_id=uid, payload=ex) for uid, (_, ex) in zip(ids, examples)]
    _logger.info("Checking %d example(s) in %d file(s)", len(units), len(docset.files))

    def body(item: WorkItem) -> list[Finding]:
        example: ExampleBlock = item.payload
        return validator.validate_json(example.json_text, example.annotation, settings.validation)

    return run_suite(units, body, settings, reporter=reporter, on_result=on_result)


def check_methods(
    docset: DocSet,
    registry: ResourceTypeRegistry,
    settings: RunSettings | None = None,
    method_name: str | None = None,
    file_name: str | None = None,
    reporter: ResultReporter | None = None,
    on_result: Callable[[UnitResult], None] | None = None,
) -> CheckResults:
    """One unit per selected method: the documented request must parse and the
    documented response must be consistent with its annotation.

    Raises:
        SelectionError: ``method_name`` or ``file_name`` matched nothing.
    """
    settings = settings or RunSettings()
    methods = select_methods(docset, method_name=method_name, file_name=file_name)
    validator = ResponseValidator(InstanceValidator(registry))

    ids = unique_unit_ids(UnitId(method=f"check-method-syntax: {m.identifier}") for m in methods)
    units = [WorkItem(unit_id=uid, payload=m) for uid, m in zip(ids, methods)]

    def body(item: WorkItem) -> list[Finding]:
        method: MethodDefinition = item.payload
        if not method.expected_response:
            return [Finding.of("MISSING_RESPONSE", "Null response where one was expected.")]
        parse_http_request(method.request)
        expected = parse_http_response(method.expected_response)
        return validator.validate_response(expected, None, None, method.response_annotation, settings.validation)

    return run_suite(units, body, settings, reporter=reporter, on_result=on_result)


def check_docs(
    docset: DocSet,
    registry: ResourceTypeRegistry,
    settings: RunSettings | None = None,
    method_name: str | None = None,
    file_name: str | None = None,
    reporter: ResultReporter | None = None,
    on_result: Callable[[UnitResult], None] | None = None,
) -> CheckResults:
    """Examples and methods together. Examples are skipped when a selector narrows the run to methods."""
    settings = settings or RunSettings()
    # Resolve the selector first so a bad one fails before any unit runs.
    select_methods(docset, method_name=method_name, file_name=file_name)
    results = CheckResults(warnings_as_failures=settings.warnings_as_failures)
    if not method_name:
        results = results + check_examples(docset, registry, settings, reporter, on_result)
    return results + check_methods(docset, registry, settings, method_name, file_name, reporter, on_result)
