"""CLI interface for vgen using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vgen import __description__, __version__
from vgen.config import LogLevel, VgenConfig, load_config
from vgen.errors import VgenError
from vgen.generator import generate_validator
from vgen.generator.pipeline import attach_rules
from vgen.parser.source import SourceStructProvider

app = typer.Typer(
    name="vgen",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"vgen version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """vgen - Generate validation functions from field annotations."""


def _load_config(path: Path, config: Path | None) -> VgenConfig:
    """Load config for a source file, exiting with an error message on failure."""
    try:
        return load_config(config, start_dir=path.resolve().parent)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _setup_logging(config: VgenConfig, verbose: bool) -> None:
    level = LogLevel.DEBUG if verbose else LogLevel(config.logging.level)
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level.to_logging())


@app.command()
def generate(
    path: Annotated[
        Path,
        typer.Argument(help="Python source file with annotated classes")
    ],
    out: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output directory (default: next to the source file)")
    ] = None,
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .vgen.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Generate the validator module for one source file.

    Writes nothing when any annotation fails to parse or compile.
    """
    vgen_config = _load_config(path, config)
    _setup_logging(vgen_config, verbose)

    if out:
        vgen_config.output.dir = str(out)

    try:
        result = generate_validator(path, vgen_config)
    except VgenError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    for marker in result.no_ops:
        console.print(f"[yellow]WARN[/yellow] {escape(marker.struct)}: {escape(marker.note)}")

    console.print(f"[green]OK[/green] Generated validator for {escape(str(path))} -> {escape(str(result.output))}")
    console.print(f"  - Structs: {result.struct_count}")
    console.print(f"  - Fields: {result.field_count}")
    console.print(f"  - Checks: {result.fragment_count}")
    if result.no_ops:
        console.print(f"  - [yellow]Not enforced: {len(result.no_ops)}[/yellow]")


@app.command()
def inspect(
    path: Annotated[
        Path,
        typer.Argument(help="Python source file with annotated classes")
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .vgen.json)")
    ] = None,
) -> None:
    """Show the parsed rules of every annotated field without generating code."""
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    vgen_config = _load_config(path, config)

    try:
        structs = attach_rules(SourceStructProvider(vgen_config.tag.key).load(path))
    except VgenError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if format == "json":
        data = [
            {
                "struct": struct.name,
                "fields": [
                    {
                        "name": field.name,
                        "type": field.type.spelling,
                        "kind": field.type.kind.value,
                        "rules": [{"name": r.name, "value": r.value} for r in field.rules],
                    }
                    for field in struct.fields
                ],
            }
            for struct in structs
        ]
        print(jsonlib.dumps({"structs": data, "total": len(data)}, indent=2))
        return

    if not structs:
        console.print("[dim]No annotated structs found[/dim]")
        return

    table = Table(title=f"Annotated fields in {path.name}")
    table.add_column("Struct", style="magenta", no_wrap=True)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Rules", style="green")

    for struct in structs:
        for field in struct.fields:
            table.add_row(
                struct.name,
                field.name,
                escape(field.type.spelling),
                field.type.kind.value,
                escape(", ".join(str(r) for r in field.rules)),
            )

    console.print(table)
