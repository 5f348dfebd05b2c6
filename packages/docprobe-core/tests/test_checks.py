"""
Tests for the check suites: examples, methods, service metadata and the live service sweep.
"""

import json

import pytest
from docprobe_core.checks import check_docs, check_examples, check_metadata, check_methods, check_service
from docprobe_core.config import AppConfig, RunSettings
from docprobe_core.errors import ConfigurationError, SelectionError
from docprobe_core.models.docset import DocSet
from docprobe_core.models.http import HttpResponse
from docprobe_core.models.resources import ResourceDefinition
from docprobe_core.registry import ResourceTypeRegistry
from docprobe_core.service.accounts import Credentials

WIDGET_RESPONSE = 'HTTP/1.1 200 OK\nContent-Type: application/json\n\n{"id": "w1", "count": 1}'


@pytest.fixture
def docset():
    """One file with a resource, three examples and two methods."""
    return DocSet.model_validate(
        {
            "files": [
                {
                    "path": "widgets.md",
                    "resources": [{"name": "Widget", "properties": {"id": "String", "count": "Int32"}}],
                    "examples": [
                        {"annotation": {"@odata.type": "Widget", "name": "good"}, "json": '{"id": "a", "count": 1}'},
                        {"annotation": {"@odata.type": "Widget", "name": "bad"}, "json": '{"id": "b"}'},
                        {"annotation": {"blockType": "ignored"}, "json": "not json at all"},
                        {"annotation": {"@odata.type": "Widget", "name": "xml"}, "json": "<w/>", "language": "xml"},
                    ],
                    "methods": [
                        {
                            "name": "get-widget",
                            "request": "GET /widgets/{widget-id} HTTP/1.1",
                            "response": WIDGET_RESPONSE,
                            "responseMetadata": {"@odata.type": "Widget"},
                        },
                        {"name": "delete-widget", "request": "DELETE /widgets/{widget-id} HTTP/1.1"},
                    ],
                }
            ],
            "scenarios": [
                {"name": "first", "method": "get-widget", "requestParameters": {"widget-id": "w1"}},
                {"name": "retired", "method": "get-widget", "enabled": False},
            ],
        }
    )


@pytest.fixture
def registry(docset):
    return ResourceTypeRegistry.from_definitions(docset.resources)


class FakeAccount:
    """Stands in for a configured account; answers every request with a fixed widget."""

    def __init__(self, name, enabled=True, body=None, fail_prepare=False):
        self.name = name
        self.enabled = enabled
        self.additional_headers = []
        self.body = body if body is not None else {"id": "w1", "count": 1}
        self.fail_prepare = fail_prepare
        self.requests = []
        self.closed = False

    def prepare(self):
        if self.fail_prepare:
            raise RuntimeError(f"environment variable TOKEN is not set for account {self.name}")

    def create_credentials(self):
        return Credentials(headers={"Authorization": "Bearer t"})

    def send(self, request, credentials, extra_headers=()):
        self.requests.append((request, credentials, extra_headers))
        if request.method == "DELETE":
            return HttpResponse(status_code=204)
        return HttpResponse(
            status_code=200,
            headers=[("Content-Type", "application/json")],
            body=json.dumps(self.body),
        )

    def close(self):
        self.closed = True


class TestDocumentationChecks:
    """check_examples, check_methods and check_docs."""

    def test_examples(self, docset, registry):
        report = check_examples(docset, registry).report()

        assert [(str(u.unit_id), u.outcome) for u in report.units] == [
            ("check-example: bad [widgets.md]", "FAILED"),
            ("check-example: good [widgets.md]", "PASSED"),
        ]

    def test_methods(self, docset, registry):
        report = check_methods(docset, registry).report()

        outcomes = {u.unit_id.method: u for u in report.units}
        assert outcomes["check-method-syntax: get-widget"].outcome == "PASSED"
        missing = outcomes["check-method-syntax: delete-widget"]
        assert missing.outcome == "FAILED"
        assert missing.findings[0].code == "MISSING_RESPONSE"
        assert missing.message == "Null response where one was expected."

    def test_unparseable_response_is_a_unit_fault(self, registry):
        docset = DocSet.model_validate(
            {"files": [{"path": "a.md", "methods": [{"name": "m", "request": "GET /", "response": "garbage"}]}]}
        )

        report = check_methods(docset, registry).report()

        assert report.units[0].findings[0].code == "UNIT_FAULT"

    def test_docs_combines_examples_and_methods(self, docset, registry):
        report = check_docs(docset, registry).report()

        assert report.summary == {"passed": 2, "warning": 0, "failed": 2, "skipped": 0}

    def test_docs_method_selector_skips_examples(self, docset, registry):
        report = check_docs(docset, registry, method_name="GET-WIDGET").report()

        assert [u.unit_id.method for u in report.units] == ["check-method-syntax: get-widget"]

    def test_unknown_method_selector(self, docset, registry):
        with pytest.raises(SelectionError):
            check_docs(docset, registry, method_name="patch-widget")

    def test_ignore_warnings(self, registry):
        docset = DocSet.model_validate(
            {
                "files": [
                    {
                        "path": "a.md",
                        "examples": [
                            {"annotation": {"@odata.type": "Widget"}, "json": '{"id": "a", "count": 1, "extra": 1}'}
                        ],
                    }
                ]
            }
        )

        warned = check_examples(docset, registry).report()
        ignored = check_examples(docset, registry, RunSettings(ignore_warnings=True)).report()
        strict = check_examples(docset, registry, RunSettings(warnings_as_failures=True)).report()

        assert warned.warnings == 1 and warned.success
        assert ignored.passed == 1 and ignored.warnings == 0
        assert strict.failures == 1 and not strict.success

    def test_duplicate_example_names_get_numbered(self, registry):
        example = {"annotation": {"@odata.type": "Widget", "name": "same"}, "json": '{"id": "a", "count": 1}'}
        docset = DocSet.model_validate({"files": [{"path": "a.md", "examples": [example, example]}]})

        report = check_examples(docset, registry).report()

        assert [u.unit_id.scenario for u in report.units] == ["a.md", "a.md #2"]


class TestMetadataCheck:
    """Schema resource examples against documented types."""

    def test_relaxed_strings_and_missing_examples(self, docset):
        schema = [
            ResourceDefinition(name="Widget", example='{"id": "w1", "count": "3"}'),
            ResourceDefinition(name="Gadget"),
            ResourceDefinition(name="Sprocket", example="{}"),
        ]

        report = check_metadata(docset, schema).report()

        outcomes = {u.unit_id.scenario: u for u in report.units}
        assert outcomes["Widget"].outcome == "WARNING"
        assert outcomes["Gadget"].outcome == "SKIPPED"
        assert outcomes["Sprocket"].outcome == "FAILED"
        assert outcomes["Sprocket"].findings[0].code == "UNRESOLVED_TYPE"
        assert all(u.unit_id.method == "validate-service-metadata" for u in report.units)


class TestServiceCheck:
    """Live sweeps through fake accounts."""

    def test_scenarios_accounts_and_substitution(self, docset, registry):
        alpha = FakeAccount("alpha")
        beta = FakeAccount("beta", enabled=False)

        report = check_service(docset, registry, [alpha, beta], method_name="get-widget").report()

        assert [(str(u.unit_id), u.outcome) for u in report.units] == [
            ("alpha: get-widget [first]", "PASSED"),
            ("alpha: get-widget [retired]", "SKIPPED"),
        ]
        assert [r.url for r, _, _ in alpha.requests] == ["/widgets/w1"]
        assert alpha.requests[0][1].headers == {"Authorization": "Bearer t"}
        assert beta.requests == []
        assert alpha.closed

    def test_method_without_scenarios_runs_default(self, docset, registry):
        account = FakeAccount("alpha")

        report = check_service(docset, registry, [account], method_name="delete-widget").report()

        assert report.units[0].unit_id.scenario == "default"
        assert report.units[0].findings[0].code == "MISSING_RESPONSE"

    def test_response_mismatch_fails(self, docset, registry):
        account = FakeAccount("alpha", body={"id": "w1"})

        report = check_service(docset, registry, [account], method_name="get-widget").report()

        assert report.failures == 1
        assert report.units[0].findings[0].path == "$.count"

    def test_named_account(self, docset, registry):
        beta = FakeAccount("beta", enabled=False)

        report = check_service(docset, registry, [FakeAccount("alpha"), beta], account_name="beta").report()

        assert {u.unit_id.account for u in report.units} == {"beta"}

    def test_extra_headers_passed_to_account(self, docset, registry):
        account = FakeAccount("alpha")
        settings = RunSettings()
        settings = RunSettings(validation=settings.validation.with_additional_headers([("X-Trace", "1")]))

        check_service(docset, registry, [account], settings, method_name="get-widget")

        assert account.requests[0][2] == (("X-Trace", "1"),)

    def test_prepare_failure_fails_account_only(self, docset, registry):
        broken = FakeAccount("broken", fail_prepare=True)
        healthy = FakeAccount("healthy")

        report = check_service(docset, registry, [broken, healthy], method_name="get-widget").report()

        assert broken.requests == []
        assert not broken.closed
        by_account = {}
        for unit in report.units:
            by_account.setdefault(unit.unit_id.account, []).append(unit.outcome)
        assert by_account == {"broken": ["FAILED"], "healthy": ["PASSED", "SKIPPED"]}

    def test_parallel_matches_serial(self, docset, registry):
        serial = check_service(docset, registry, [FakeAccount("a"), FakeAccount("b")]).report()
        parallel = check_service(docset, registry, [FakeAccount("a"), FakeAccount("b")], parallel=True).report()

        assert serial.summary == parallel.summary
        assert [(u.unit_id, u.outcome) for u in serial.units] == [(u.unit_id, u.outcome) for u in parallel.units]

    def test_no_accounts(self, docset, registry):
        with pytest.raises(ConfigurationError, match="No account was found"):
            check_service(docset, registry, [])

        with pytest.raises(ConfigurationError):
            check_service(docset, registry, [FakeAccount("alpha", enabled=False)])

        with pytest.raises(ConfigurationError, match="Unable to locate account"):
            check_service(docset, registry, [FakeAccount("alpha")], account_name="gamma")

    def test_pause_with_parallel_is_rejected(self, docset, registry):
        account = FakeAccount("alpha")

        with pytest.raises(ConfigurationError):
            check_service(
                docset, registry, [account], RunSettings(pause_between_units=True), parallel=True, pause=lambda: None
            )

        assert account.requests == []

    def test_branch_gate(self, docset, registry):
        account = FakeAccount("alpha")
        config = AppConfig(check_service_enabled_branches=["main"])

        results = check_service(docset, registry, [account], branch="feature/x", app_config=config)

        assert results.overall_success()
        assert results.report().units == []
        assert account.requests == []

    def test_duplicate_methods_and_scenarios_get_numbered(self, registry):
        """The same method in two files and a repeated scenario name still run once each."""
        method = {
            "name": "get-widget",
            "request": "GET /widgets/{widget-id} HTTP/1.1",
            "response": WIDGET_RESPONSE,
            "responseMetadata": {"@odata.type": "Widget"},
        }
        docset = DocSet.model_validate(
            {
                "files": [{"path": "a.md", "methods": [method]}, {"path": "b.md", "methods": [method]}],
                "scenarios": [
                    {"name": "s", "method": "get-widget", "requestParameters": {"widget-id": "w1"}},
                    {"name": "s", "method": "get-widget", "requestParameters": {"widget-id": "w2"}},
                ],
            }
        )
        account = FakeAccount("alpha")

        report = check_service(docset, registry, [account]).report()

        assert sorted(u.unit_id.scenario for u in report.units) == ["s", "s #2", "s #3", "s #4"]
        assert report.summary == {"passed": 4, "warning": 0, "failed": 0, "skipped": 0}
        assert len(account.requests) == 4
        assert account.closed
