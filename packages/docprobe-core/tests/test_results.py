"""
Tests for outcome combination and run-level result aggregation.
"""

from itertools import permutations

import pytest
from docprobe_core.models.findings import Finding
from docprobe_core.models.outcome import classify, worst_of
from docprobe_core.models.report import UnitId
from docprobe_core.validation.results import CheckResults


def uid(name, scenario="", account=""):
    return UnitId(method=name, scenario=scenario, account=account)


class TestOutcome:
    """worst_of and classify."""

    def test_worst_of_order_independent(self):
        outcomes = ["PASSED", "SKIPPED", "WARNING", "FAILED"]
        for ordering in permutations(outcomes):
            assert worst_of(ordering) == "FAILED"

    def test_worst_of_empty_is_skipped(self):
        assert worst_of([]) == "SKIPPED"
        assert worst_of(["SKIPPED", "PASSED"]) == "PASSED"

    def test_classify(self):
        error = Finding.of("MISSING_REQUIRED_PROPERTY", "missing")
        warning = Finding.of("UNEXPECTED_PROPERTY", "extra")
        info = Finding.of("LONG_RUNNING_OPERATION", "accepted")

        assert classify([]) == "PASSED"
        assert classify([info]) == "PASSED"
        assert classify([warning, info]) == "WARNING"
        assert classify([warning], silence_warnings=True) == "PASSED"
        assert classify([warning, error]) == "FAILED"

    def test_severity_comes_from_code(self):
        assert Finding.of("UNIT_FAULT", "boom").severity == "ERROR"
        assert Finding.of("TYPE_MISMATCH", "relaxed", severity="WARN").is_warning
        assert Finding.of("TYPE_MISMATCH", "m", path="$.a").error_text == "ERROR TYPE_MISMATCH at $.a: m"


class TestCheckResults:
    """Counters, conversion and merging."""

    def test_record_counts(self):
        results = CheckResults()
        results.record_outcome(uid("a"), "PASSED")
        results.record_outcome(uid("b"), "WARNING")
        results.record_outcome(uid("c"), "FAILED")
        results.record_outcome(uid("d"), "SKIPPED")

        assert (results.success_count, results.warning_count, results.failure_count, results.skipped_count) == (
            1,
            1,
            1,
            1,
        )
        assert results.were_failures
        assert not results.overall_success()

    def test_warnings_as_failures(self):
        results = CheckResults(warnings_as_failures=True)
        result = results.record_outcome(uid("a"), "WARNING")

        assert result.outcome == "FAILED"
        assert results.failure_count == 1
        assert results.warning_count == 0

    def test_convert_warnings_to_success_is_idempotent(self):
        results = CheckResults()
        results.record_outcome(uid("a"), "WARNING", [Finding.of("UNEXPECTED_PROPERTY", "extra")])
        results.record_outcome(uid("b"), "PASSED")

        results.convert_warnings_to_success()
        once = results.report()
        results.convert_warnings_to_success()
        twice = results.report()

        assert results.overall_success()
        assert once == twice
        assert once.passed == 2
        assert [u.outcome for u in once.units] == ["PASSED", "PASSED"]

    @pytest.mark.parametrize("ordering", list(permutations(["PASSED", "WARNING", "FAILED"])))
    def test_aggregation_order_independent(self, ordering):
        split = CheckResults()
        for index, outcome in enumerate(ordering[:2]):
            split.record_outcome(uid(f"u{index}"), outcome)
        rest = CheckResults()
        rest.record_outcome(uid("u2"), ordering[2])

        combined = split + rest

        assert combined.report().summary == {"passed": 1, "warning": 1, "failed": 1, "skipped": 0}

    def test_units_sorted_by_identity(self):
        results = CheckResults()
        results.record_outcome(uid("b", "s1", "acct"), "PASSED")
        results.record_outcome(uid("A", "s2", "acct"), "PASSED")
        results.record_outcome(uid("a", "s1", "acct"), "PASSED")

        assert [(u.unit_id.method, u.unit_id.scenario) for u in results.units] == [
            ("a", "s1"),
            ("A", "s2"),
            ("b", "s1"),
        ]

    def test_report_rows(self):
        results = CheckResults()
        finding = Finding.of("MISSING_REQUIRED_PROPERTY", "count is missing", path="$.count")
        results.record_outcome(uid("get-widget", "default", "Alpha"), "FAILED", [finding], message="count is missing")

        report = results.report()

        assert not report.success
        assert report.as_rows() == [
            (
                "alpha: get-widget [default]",
                "FAILED",
                "count is missing",
                "ERROR MISSING_REQUIRED_PROPERTY at $.count: count is missing",
            )
        ]
