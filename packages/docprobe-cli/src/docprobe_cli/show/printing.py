import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docprobe_core.data.loader import load_docset


def _docset_option(func):
    return click.option(
        "--docset",
        type=click.Path(path_type=str, dir_okay=False, exists=False),
        default="docs/docset.yaml",
        show_default=True,
        help="Doc-set manifest YAML.",
    )(func)


def _load(console: Console, path: str):
    try:
        return load_docset(path)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


@click.group("print")
def print_group() -> None:
    """Print what a doc set declares."""
    pass


@print_group.command("files")
@_docset_option
def print_files(docset: str) -> None:
    """Files in the doc set with their resource, example and method counts."""
    console = Console()
    doc_set = _load(console, docset)

    table = Table(title="Documentation Files")
    table.add_column("File", style="cyan")
    table.add_column("Resources", justify="right")
    table.add_column("Examples", justify="right")
    table.add_column("Methods", justify="right")
    for doc in doc_set.files:
        table.add_row(doc.display_name, str(len(doc.resources)), str(len(doc.examples)), str(len(doc.methods)))
    console.print(table)


@print_group.command("resources")
@_docset_option
@click.option("--verbose", "-v", is_flag=True, help="Also print each resource's properties.")
def print_resources(docset: str, verbose: bool) -> None:
    """Resource types defined by the doc set."""
    console = Console()
    doc_set = _load(console, docset)

    for doc in doc_set.files:
        if not doc.resources:
            continue
        console.print(f"\n[bold]File {escape(doc.display_name)}:[/bold]")
        for resource in doc.resources:
            base = f" : {resource.base_type}" if resource.base_type else ""
            console.print(f"  [cyan]{escape(resource.name)}[/cyan]{escape(base)}")
            if verbose:
                for prop in resource.properties:
                    flags = [f for f, on in (("nullable", prop.nullable), ("optional", prop.optional)) if on]
                    suffix = f" ({', '.join(flags)})" if flags else ""
                    console.print(f"    {escape(prop.name)}: {escape(prop.type.describe())}{suffix}")


@print_group.command("methods")
@_docset_option
@click.option("--verbose", "-v", is_flag=True, help="Also print request and response text and annotations.")
def print_methods(docset: str, verbose: bool) -> None:
    """Documented methods, grouped by file."""
    console = Console()
    doc_set = _load(console, docset)

    for doc in doc_set.files:
        if not doc.methods:
            continue
        console.print(f"\n[bold]File {escape(doc.display_name)}:[/bold]")
        for method in doc.methods:
            console.print(f"  [cyan]{escape(method.identifier)}[/cyan]")
            if not verbose:
                continue
            request_meta = json.dumps(method.request_annotation.model_dump(exclude_defaults=True))
            console.print(f"    Request: {request_meta}", markup=False)
            console.print(method.request, markup=False, highlight=False)
            if method.expected_response:
                response_meta = json.dumps(method.response_annotation.model_dump(exclude_defaults=True))
                console.print(f"    Expected Response: {response_meta}", markup=False)
                console.print(method.expected_response, markup=False, highlight=False)
