"""Console rendering shared by the check commands."""

from pathlib import Path
import sys
from typing import Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docprobe_core.models.report import RunReport, UnitResult

OUTCOME_COLORS = {"PASSED": "green", "WARNING": "yellow", "FAILED": "red", "SKIPPED": "dim"}
SEVERITY_COLORS = {"ERROR": "red", "WARN": "yellow", "INFO": "blue"}


class UnitPrinter:
    """``on_result`` callback: one line per finished unit, findings underneath."""

    def __init__(self, console: Console, verbose: bool = False, silence_warnings: bool = False):
        self.console = console
        self.verbose = verbose
        self.silence_warnings = silence_warnings

    def __call__(self, result: UnitResult) -> None:
        color = OUTCOME_COLORS.get(result.outcome, "white")
        label = escape(str(result.unit_id))
        self.console.print(f"[{color}]{result.outcome}[/{color}] {label}: {escape(result.message)}")
        for finding in result.findings:
            if finding.severity == "WARN" and self.silence_warnings:
                continue
            if finding.severity == "INFO" and not self.verbose:
                continue
            severity_color = SEVERITY_COLORS.get(finding.severity, "white")
            location = escape(f" at {finding.path}") if finding.path else ""
            self.console.print(
                f"   [{severity_color}]{finding.severity}[/{severity_color}] "
                f"{finding.code}{location}: {escape(finding.message)}"
            )


def print_summary(console: Console, report: RunReport, title: str) -> None:
    table = Table(title=title)
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", justify="right")

    table.add_row("PASSED", str(report.summary.get("passed", 0)), style="green")
    table.add_row("WARNING", str(report.summary.get("warning", 0)), style="yellow")
    table.add_row("FAILED", str(report.summary.get("failed", 0)), style="red")
    table.add_row("SKIPPED", str(report.summary.get("skipped", 0)), style="dim")

    console.print(table)


def export_report(console: Console, report: RunReport, export: Optional[str]) -> None:
    if not export:
        return
    path = Path(export)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(report.model_dump(mode="json"), f, default_flow_style=False, sort_keys=True)
    console.print(f"[green]✓[/green] Report exported to {export}")


def finish(console: Console, report: RunReport, title: str, export: Optional[str]) -> None:
    """Print the summary, export if asked, and exit 0 only when nothing failed."""
    print_summary(console, report, title)
    export_report(console, report, export)

    if report.failures > 0:
        console.print(f"\n[red]✗[/red] {title} failed with {report.failures} failing unit(s)")
        sys.exit(1)
    if report.warnings > 0:
        console.print(f"\n[yellow]⚠[/yellow] {title} completed with {report.warnings} warning(s)")
    else:
        console.print(f"\n[green]✓[/green] {title} completed successfully")
    sys.exit(0)
