"""
Tests for the docprobe command line.
"""

import json

import pytest
import yaml
from click.testing import CliRunner
from docprobe_cli.cli import cli

DOCSET = {
    "files": [
        {
            "path": "widgets.md",
            "resources": [{"name": "Widget", "properties": {"id": "String", "count": "Int32"}}],
            "examples": [
                {"annotation": {"@odata.type": "Widget", "name": "widget"}, "json": '{"id": "a", "count": 1}'},
            ],
            "methods": [
                {
                    "name": "get-widget",
                    "request": "GET /widgets/1 HTTP/1.1",
                    "response": 'HTTP/1.1 200 OK\nContent-Type: application/json\n\n{"id": "w1", "count": 1}',
                    "responseMetadata": {"@odata.type": "Widget"},
                }
            ],
        }
    ]
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def docset_path(tmp_path):
    path = tmp_path / "docset.yaml"
    path.write_text(yaml.safe_dump(DOCSET))
    return path


def write_docset(tmp_path, example_json):
    broken = json.loads(json.dumps(DOCSET))
    broken["files"][0]["examples"][0]["json"] = example_json
    path = tmp_path / "broken.yaml"
    path.write_text(yaml.safe_dump(broken))
    return path


class TestCheckDocs:
    """check-docs exit codes, output and export."""

    def test_clean_docset(self, runner, docset_path, tmp_path):
        result = runner.invoke(
            cli, ["check-docs", "--docset", str(docset_path), "--config", str(tmp_path / "docprobe.yaml")]
        )

        assert result.exit_code == 0, result.output
        assert "PASSED" in result.output
        assert "completed successfully" in result.output

    def test_failing_example(self, runner, tmp_path):
        path = write_docset(tmp_path, '{"id": "a"}')

        result = runner.invoke(cli, ["check-docs", "--docset", str(path), "--config", str(tmp_path / "none.yaml")])

        assert result.exit_code == 1
        assert "MISSING_REQUIRED_PROPERTY" in result.output

    def test_strict_turns_warnings_into_failures(self, runner, tmp_path):
        path = write_docset(tmp_path, '{"id": "a", "count": 1, "extra": true}')
        args = ["check-docs", "--docset", str(path), "--config", str(tmp_path / "none.yaml")]

        assert runner.invoke(cli, args).exit_code == 0
        assert runner.invoke(cli, args + ["--strict"]).exit_code == 1

    def test_export_report(self, runner, docset_path, tmp_path):
        export = tmp_path / "out" / "report.yaml"

        result = runner.invoke(
            cli,
            [
                "check-docs",
                "--docset",
                str(docset_path),
                "--config",
                str(tmp_path / "none.yaml"),
                "--export",
                str(export),
            ],
        )

        assert result.exit_code == 0, result.output
        report = yaml.safe_load(export.read_text())
        assert report["passed"] == 2
        assert report["failures"] == 0
        assert {u["outcome"] for u in report["units"]} == {"PASSED"}

    def test_report_log(self, runner, docset_path, tmp_path):
        log = tmp_path / "units.jsonl"

        result = runner.invoke(
            cli,
            ["check-docs", "--docset", str(docset_path), "--config", str(tmp_path / "n.yaml"), "--report-log", str(log)],
        )

        assert result.exit_code == 0, result.output
        assert len(log.read_text().splitlines()) == 2

    def test_unknown_method(self, runner, docset_path, tmp_path):
        result = runner.invoke(
            cli,
            ["check-docs", "--docset", str(docset_path), "--config", str(tmp_path / "n.yaml"), "--method", "nope"],
        )

        assert result.exit_code == 1
        assert "Unable to locate method" in result.output

    def test_missing_docset(self, runner, tmp_path):
        result = runner.invoke(cli, ["check-docs", "--docset", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestCheckMetadata:
    """check-metadata against a schema file."""

    def test_relaxed_warning(self, runner, docset_path, tmp_path):
        schema = tmp_path / "schema.yaml"
        schema.write_text(yaml.safe_dump([{"name": "Widget", "jsonExample": '{"id": "w", "count": "2"}'}]))

        result = runner.invoke(cli, ["check-metadata", "--docset", str(docset_path), "--schema", str(schema)])

        assert result.exit_code == 0, result.output
        assert "WARNING" in result.output


class TestCheckService:
    """check-service configuration errors."""

    def test_missing_accounts_file(self, runner, docset_path, tmp_path):
        result = runner.invoke(
            cli,
            [
                "check-service",
                "--docset",
                str(docset_path),
                "--config",
                str(tmp_path / "n.yaml"),
                "--accounts",
                str(tmp_path / "accounts.yaml"),
            ],
        )

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_branch_gate(self, runner, docset_path, tmp_path):
        config = tmp_path / "docprobe.yaml"
        config.write_text("checkServiceEnabledBranches: [main]\n")

        result = runner.invoke(
            cli,
            ["check-service", "--docset", str(docset_path), "--config", str(config), "--branch", "feature/x"],
        )

        assert result.exit_code == 0
        assert "Aborting check-service run" in result.output

    def test_bad_headers(self, runner, docset_path, tmp_path):
        result = runner.invoke(
            cli,
            ["check-service", "--docset", str(docset_path), "--config", str(tmp_path / "n.yaml"), "--headers", "oops"],
        )

        assert result.exit_code == 1
        assert "Name: value" in result.output

    def test_pause_with_parallel(self, runner, docset_path, tmp_path):
        accounts = tmp_path / "accounts.yaml"
        accounts.write_text("- name: alpha\n  baseUrl: https://alpha.example.test\n")

        result = runner.invoke(
            cli,
            [
                "check-service",
                "--docset",
                str(docset_path),
                "--config",
                str(tmp_path / "n.yaml"),
                "--accounts",
                str(accounts),
                "--parallel",
                "--pause",
            ],
        )

        assert result.exit_code == 1
        assert "concurrency of 1" in result.output


class TestPrint:
    """print files/resources/methods."""

    def test_print_files(self, runner, docset_path):
        result = runner.invoke(cli, ["print", "files", "--docset", str(docset_path)])

        assert result.exit_code == 0
        assert "widgets.md" in result.output

    def test_print_resources_verbose(self, runner, docset_path):
        result = runner.invoke(cli, ["print", "resources", "--docset", str(docset_path), "-v"])

        assert result.exit_code == 0
        assert "Widget" in result.output
        assert "count: integer" in result.output

    def test_print_methods(self, runner, docset_path):
        result = runner.invoke(cli, ["print", "methods", "--docset", str(docset_path), "--verbose"])

        assert result.exit_code == 0
        assert "get-widget" in result.output
        assert "GET /widgets/1 HTTP/1.1" in result.output
