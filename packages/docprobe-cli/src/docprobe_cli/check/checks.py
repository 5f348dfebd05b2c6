from contextlib import nullcontext
from dataclasses import replace
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from docprobe_core.codebase.log import configure_logging
from docprobe_core.config import RunSettings, parse_header_list
from docprobe_core.errors import ConfigurationError
from docprobe_core.orchestration.reporting import JsonLinesSink, QueuedReporter

from .output import UnitPrinter, finish


def docset_options(func):
    """Options every check command takes."""
    options = [
        click.option(
            "--docset",
            type=click.Path(path_type=str, dir_okay=False, exists=False),
            default="docs/docset.yaml",
            show_default=True,
            help="Doc-set manifest YAML (files, resources, examples, methods, scenarios).",
        ),
        click.option("--strict", is_flag=True, help="Treat warnings as failures (exit code 1)."),
        click.option("--silence-warnings", is_flag=True, help="Do not print or count warnings."),
        click.option("--ignore-warnings", is_flag=True, help="Count warnings as passes once the run is over."),
        click.option(
            "--export",
            type=click.Path(path_type=str, dir_okay=False),
            help="Export the run report to a YAML file.",
        ),
        click.option(
            "--report-log",
            type=click.Path(path_type=str, dir_okay=False),
            help="Append one JSON line per finished unit to this file.",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Print INFO findings and debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def config_option(func):
    return click.option(
        "--config",
        "config_path",
        type=click.Path(path_type=str, dir_okay=False, exists=False),
        default="docprobe.yaml",
        show_default=True,
        help="Repository configuration YAML; a missing file means defaults.",
    )(func)


def _settings(strict: bool, silence_warnings: bool, ignore_warnings: bool, verbose: bool, **overrides) -> RunSettings:
    base = RunSettings.from_env()
    return replace(
        base,
        warnings_as_failures=strict or base.warnings_as_failures,
        silence_warnings=silence_warnings or base.silence_warnings,
        ignore_warnings=ignore_warnings or base.ignore_warnings,
        verbose=verbose,
        **overrides,
    )


def _reporter(report_log: Optional[str]):
    if not report_log:
        return nullcontext(None)
    return QueuedReporter(JsonLinesSink(report_log))


def _fail(console: Console, e: Exception) -> None:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    sys.exit(1)


@click.command("check-docs")
@docset_options
@config_option
@click.option("--method", "method_name", type=str, help="Only check the method with this identifier.")
@click.option("--file", "file_name", type=str, help="Only check methods declared in this doc file.")
def check_docs_command(
    docset: str,
    config_path: str,
    strict: bool,
    silence_warnings: bool,
    ignore_warnings: bool,
    export: Optional[str],
    report_log: Optional[str],
    verbose: bool,
    method_name: Optional[str],
    file_name: Optional[str],
) -> None:
    """Check JSON examples and documented request/response pairs."""
    from docprobe_core.checks.docs import check_docs
    from docprobe_core.data.loader import load_app_config, load_docset
    from docprobe_core.registry import ResourceTypeRegistry

    console = Console()
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        settings = _settings(strict, silence_warnings, ignore_warnings, verbose)
        app_config = load_app_config(config_path)
        settings = replace(
            settings, validation=replace(settings.validation, required_headers=tuple(app_config.required_headers))
        )
        doc_set = load_docset(docset)
        registry = ResourceTypeRegistry.from_definitions(doc_set.resources)

        console.print("\n[bold cyan]Documentation Check[/bold cyan]")
        printer = UnitPrinter(console, verbose=verbose, silence_warnings=settings.silence_warnings)
        with _reporter(report_log) as reporter:
            results = check_docs(
                doc_set,
                registry,
                settings,
                method_name=method_name,
                file_name=file_name,
                reporter=reporter,
                on_result=printer,
            )
    except (ConfigurationError, ValueError, FileNotFoundError) as e:
        _fail(console, e)

    finish(console, results.report(), "Documentation Check", export)


@click.command("check-metadata")
@docset_options
@click.option(
    "--schema",
    type=click.Path(path_type=str, dir_okay=False, exists=False),
    default="schema/resources.yaml",
    show_default=True,
    help="Resource definitions generated from the service schema, with JSON examples.",
)
def check_metadata_command(
    docset: str,
    strict: bool,
    silence_warnings: bool,
    ignore_warnings: bool,
    export: Optional[str],
    report_log: Optional[str],
    verbose: bool,
    schema: str,
) -> None:
    """Check that service schema examples match the documented resources."""
    from docprobe_core.checks.metadata import check_metadata
    from docprobe_core.data.loader import load_docset, load_resource_definitions

    console = Console()
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        settings = _settings(strict, silence_warnings, ignore_warnings, verbose)
        schema_resources = load_resource_definitions(schema)
        console.print(f"\n[bold cyan]Service Metadata Check[/bold cyan]: {len(schema_resources)} schema resource(s)")
        doc_set = load_docset(docset)

        printer = UnitPrinter(console, verbose=verbose, silence_warnings=settings.silence_warnings)
        with _reporter(report_log) as reporter:
            results = check_metadata(doc_set, schema_resources, settings, reporter=reporter, on_result=printer)
    except (ConfigurationError, ValueError, FileNotFoundError) as e:
        _fail(console, e)

    finish(console, results.report(), "Service Metadata Check", export)


@click.command("check-service")
@docset_options
@config_option
@click.option(
    "--accounts",
    "accounts_path",
    type=click.Path(path_type=str, dir_okay=False, exists=False),
    default="accounts.yaml",
    show_default=True,
    help="Service accounts YAML.",
)
@click.option("--account", "account_name", type=str, help="Run with this account only (default: all enabled).")
@click.option("--method", "method_name", type=str, help="Only run the method with this identifier.")
@click.option("--file", "file_name", type=str, help="Only run methods declared in this doc file.")
@click.option("--parallel", is_flag=True, help="Run units on a pool of parallel workers.")
@click.option("--pause", is_flag=True, help="Wait for a key press after each unit (not with --parallel).")
@click.option("--branch", type=str, help="Branch being checked; gated by checkServiceEnabledBranches.")
@click.option("--headers", type=str, help="Extra request headers, e.g. 'Prefer: odata.maxpagesize=5|X-Trace: 1'.")
def check_service_command(
    docset: str,
    config_path: str,
    strict: bool,
    silence_warnings: bool,
    ignore_warnings: bool,
    export: Optional[str],
    report_log: Optional[str],
    verbose: bool,
    accounts_path: str,
    account_name: Optional[str],
    method_name: Optional[str],
    file_name: Optional[str],
    parallel: bool,
    pause: bool,
    branch: Optional[str],
    headers: Optional[str],
) -> None:
    """Run documented requests against the live service and validate the responses."""
    from docprobe_core.checks.service import check_service
    from docprobe_core.data.loader import load_accounts, load_app_config, load_docset
    from docprobe_core.registry import ResourceTypeRegistry

    console = Console()
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        settings = _settings(strict, silence_warnings, ignore_warnings, verbose, pause_between_units=pause)
        app_config = load_app_config(config_path)
        if not app_config.service_enabled_for_branch(branch):
            console.print(
                f'[yellow]⚠[/yellow] Aborting check-service run. Branch "{escape(branch or "")}" '
                "wasn't in the checkServiceEnabledBranches configuration list."
            )
            sys.exit(0)

        validation = settings.validation.with_additional_headers(parse_header_list(headers))
        validation = replace(validation, required_headers=tuple(app_config.required_headers))
        settings = replace(settings, validation=validation)

        doc_set = load_docset(docset)
        registry = ResourceTypeRegistry.from_definitions(doc_set.resources)
        accounts = load_accounts(accounts_path)

        console.print("\n[bold cyan]Service Check[/bold cyan]")
        printer = UnitPrinter(console, verbose=verbose, silence_warnings=settings.silence_warnings)
        with _reporter(report_log) as reporter:
            results = check_service(
                doc_set,
                registry,
                accounts,
                settings,
                method_name=method_name,
                file_name=file_name,
                account_name=account_name,
                parallel=parallel,
                branch=branch,
                app_config=app_config,
                reporter=reporter,
                on_result=printer,
                pause=click.pause if pause else None,
            )
    except (ConfigurationError, ValueError, FileNotFoundError) as e:
        _fail(console, e)

    finish(console, results.report(), "Service Check", export)
