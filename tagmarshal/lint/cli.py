"""Command-line interface for inspecting and linting tagged records."""

from __future__ import annotations

import importlib
import importlib.util
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from tagmarshal.codec.cache import default_cache
from tagmarshal.codec.fields import DEFAULT_TAG_KEY
from tagmarshal.codec.kinds import is_record_type
from tagmarshal.lint.rules import lint_record

if TYPE_CHECKING:
    from tagmarshal.codec.descriptor import TypeDescriptor
    from tagmarshal.codec.tags import TagDirective
    from tagmarshal.lint.rules import TagIssue


def load_record(target: str) -> type:
    """Load a record type from ``module:Class`` or ``path/to/file.py:Class``."""
    location, _, name = target.rpartition(":")
    if not location or not name:
        raise LookupError(f"Target must look like module:Class, got {target!r}")

    if location.endswith(".py"):
        path = Path(location)
        # private name so a file like json.py never replaces a real module
        module_name = f"_tagmarshal_target_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None or not path.is_file():
            raise LookupError(f"Cannot load {location}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as ex:
            del sys.modules[module_name]
            raise LookupError(f"Cannot load {location}: {ex}") from ex
    else:
        try:
            module = importlib.import_module(location)
        except (ImportError, SyntaxError) as ex:
            raise LookupError(f"Cannot import {location}: {ex}") from ex

    obj: object = module
    for part in name.split("."):
        if not hasattr(obj, part):
            raise LookupError(f"{location} has no attribute {name}")
        obj = getattr(obj, part)

    if not is_record_type(obj):
        raise LookupError(f"{name} is not a dataclass")
    return obj  # type: ignore[return-value]


def _load_or_exit(target: str) -> type:
    try:
        return load_record(target)
    except LookupError as ex:
        print(f"Error: {ex}")
        sys.exit(1)


@click.group()
def cli() -> None:
    """Inspect and lint tagged record types."""


@cli.command()
@click.argument("target")
@click.option("--tag-key", "-t", default=DEFAULT_TAG_KEY, help="Tag namespace to read")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def describe(target: str, tag_key: str, output_json: bool) -> None:
    """Show how a record type's fields map to keys."""
    record_type = _load_or_exit(target)
    descriptor = default_cache.get_or_build(record_type, tag_key)

    if output_json:
        _describe_json(descriptor)
    else:
        _describe_plain(descriptor)


def _describe_json(descriptor: TypeDescriptor) -> None:
    """Output a descriptor as JSON."""
    data: dict = {
        "record": descriptor.name,
        "tag_key": descriptor.tag_key,
        "fields": [],
        "shadowed": [fd.dotted_path for fd in descriptor.shadowed],
    }

    for fd in descriptor.fields:
        data["fields"].append(
            {
                "field": fd.dotted_path,
                "path": [step.index for step in fd.path],
                "kind": fd.shape.describe(),
                "tag": fd.tag,
                "directive": fd.directive.to_dict(),
            }
        )

    print(json.dumps(data, indent=2))


def _format_options(directive: TagDirective) -> str:
    if directive.skip:
        return "skip"
    options = []
    if directive.omit_if_empty:
        options.append("omitempty")
    if directive.as_string:
        options.append("string")
    return ", ".join(options)


def _describe_plain(descriptor: TypeDescriptor) -> None:
    """Output a descriptor using rich text formatting."""
    console = Console()
    console.print(f"[bold cyan]{descriptor.name}[/bold cyan] [dim]({descriptor.tag_key})[/dim]")

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Key", style="white")
    table.add_column("Field", style="white")
    table.add_column("Path", style="dim", justify="right")
    table.add_column("Kind", style="yellow")
    table.add_column("Options", style="green")

    for fd in descriptor.fields:
        key = "" if fd.directive.skip else fd.key
        path = ".".join(str(step.index) for step in fd.path)
        table.add_row(
            key, fd.dotted_path, path, fd.shape.describe(), _format_options(fd.directive)
        )

    console.print(table)

    if descriptor.shadowed:
        console.print()
        names = ", ".join(fd.dotted_path for fd in descriptor.shadowed)
        console.print(f"[bold yellow]Dropped by key conflicts:[/bold yellow] {names}")


@cli.command()
@click.argument("target")
@click.option("--tag-key", "-t", default=DEFAULT_TAG_KEY, help="Tag namespace to read")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def lint(target: str, tag_key: str, output_json: bool) -> None:
    """Report tag mistakes that encoding silently tolerates."""
    record_type = _load_or_exit(target)
    issues = lint_record(record_type, tag_key)

    if output_json:
        print(json.dumps([issue.to_dict() for issue in issues], indent=2))
    else:
        _lint_plain(issues)

    if issues:
        sys.exit(1)


def _lint_plain(issues: list[TagIssue]) -> None:
    console = Console()
    if not issues:
        console.print("[green]No issues found[/green]")
        return

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Record", style="white")
    table.add_column("Field", style="yellow")
    table.add_column("Problem", style="white")
    for issue in issues:
        table.add_row(issue.record, issue.field, issue.message)
    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
