"""CLI interface for validgen using Typer framework."""

import importlib
import json as jsonlib
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from validgen import __description__, __version__
from validgen.codegen import CodeGenerator
from validgen.config import LogLevel, ValidgenConfig, load_config
from validgen.descriptor import build_records, load_descriptor
from validgen.errors import AnnotationSyntaxError, GenerationError
from validgen.grammar import ValidatorInvocation, parse_annotation, parse_struct_options, parse_type_expr
from validgen.resolver import resolve
from validgen.runtime import ValidatorRegistry
from validgen.types import TypeSystem

app = typer.Typer(
    name="validgen",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

VALID_FORMATS = ["table", "json"]

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"validgen version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """validgen - generate validation code from annotated record descriptors."""


def _setup_logging(config: ValidgenConfig, verbose: bool = False) -> None:
    """Route library logging through rich at the configured level."""
    configured = getattr(config.logging.level, "value", config.logging.level)
    level = logging.DEBUG if verbose else _LOG_LEVELS.get(configured, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    logging.getLogger("validgen").setLevel(level)


def _load_config_or_exit(config: Path | None) -> ValidgenConfig:
    try:
        return load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _check_format(format: str) -> None:
    if format not in VALID_FORMATS:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(VALID_FORMATS)}")
        raise typer.Exit(1)


def _report_generation_error(e: GenerationError) -> None:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if isinstance(e, AnnotationSyntaxError):
        console.print(f"[dim]{escape(e.render_caret())}[/dim]")


def output_path_for(module: str, config: ValidgenConfig, out: Path | None = None) -> Path:
    """Where the generated module for a descriptor is written."""
    directory = out or Path(config.output.dir)
    return directory / f"{module.rsplit('.', 1)[-1]}{config.output.module_suffix}.py"


@app.command()
def generate(
    descriptor: Annotated[
        Path,
        typer.Argument(help="Descriptor file (.yaml, .yml or .json)")
    ],
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output directory (default: output.dir from config)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .validgen.json)")
    ] = None,
    check: Annotated[
        bool,
        typer.Option("--check", help="Fail if the generated file on disk is missing or out of date")
    ] = False,
    stdout: Annotated[
        bool,
        typer.Option("--stdout", help="Print the generated module instead of writing it")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Generate a validation module from a descriptor file."""
    cfg = _load_config_or_exit(config)
    _setup_logging(cfg, verbose)

    try:
        spec = load_descriptor(descriptor)
        generated = CodeGenerator(cfg).generate_module(spec, source_name=descriptor.name)
    except GenerationError as e:
        _report_generation_error(e)
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if stdout:
        print(generated.source, end="")
        return

    target = output_path_for(generated.module, cfg, out)
    if check:
        current = target.read_text(encoding="utf-8") if target.exists() else None
        if current != generated.source:
            state = "missing" if current is None else "out of date"
            console.print(f"[red]Error:[/red] {target} is {state}; run 'validgen generate {descriptor}'")
            raise typer.Exit(1)
        console.print(f"[green]OK[/green] {target} is up to date")
        return

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(generated.source, encoding="utf-8")
    logger.debug("Wrote %d bytes to %s", len(generated.source), target)
    console.print(f"[green]OK[/green] Generated {target} ({len(generated.records)} record(s))")


def _invocation_row(level: str, invocation: ValidatorInvocation, declared, types: TypeSystem) -> dict[str, Any]:
    row = {
        "level": level,
        "name": invocation.name,
        "path": invocation.path,
        "typeMode": invocation.type_mode.kind.value,
        "arguments": {argument.name: argument.expression for argument in invocation.arguments},
    }
    if declared is not None:
        resolved = resolve(declared, invocation.type_mode, level == "element", types)
        row["resolvedType"] = str(resolved) if resolved is not None else None
    return row


@app.command("parse")
def parse_command(
    annotation: Annotated[
        str,
        typer.Argument(help="Annotation text, e.g. 'StringLength(min = 1), each(Email)'")
    ],
    field_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Declared field type used to show resolved type parameters")
    ] = None,
    struct: Annotated[
        bool,
        typer.Option("--struct", help="Parse as a struct-level option list")
    ] = False,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json")
    ] = "table",
) -> None:
    """Parse one annotation and show the validators it declares."""
    _check_format(format)

    try:
        if struct:
            options = parse_struct_options(annotation)
            if format == "json":
                print(jsonlib.dumps({"options": options}, indent=2))
            else:
                console.print(f"Struct options: {', '.join(options) or '(none)'}")
            return

        parsed = parse_annotation(annotation)
        declared = parse_type_expr(field_type) if field_type else None
    except GenerationError as e:
        _report_generation_error(e)
        raise typer.Exit(1)

    types = TypeSystem()
    rows = [_invocation_row("field", inv, declared, types) for inv in parsed.field_validators]
    rows += [_invocation_row("element", inv, declared, types) for inv in parsed.element_validators]

    if format == "json":
        print(jsonlib.dumps({"modifier": parsed.modifier, "validators": rows}, indent=2))
        return

    if parsed.modifier:
        console.print(f"Modifier: [cyan]{parsed.modifier}[/cyan]")
        return

    table = Table(title=f"Validators ({len(rows)} found)")
    table.add_column("Level", style="magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type mode", style="white")
    if declared is not None:
        table.add_column("Resolved type", style="green")
    table.add_column("Arguments", style="dim")
    for row in rows:
        cells = [row["level"], escape(row["path"]), row["typeMode"]]
        if declared is not None:
            cells.append(escape(row["resolvedType"] or "-"))
        cells.append(escape(", ".join(f"{k}={v}" for k, v in row["arguments"].items())))
        table.add_row(*cells)
    console.print(table)


def _field_kind(annotation) -> str:
    if annotation is None:
        return "unannotated"
    if annotation.is_skip:
        return "skip"
    if annotation.is_nested:
        return "nested"
    if annotation.is_newtype:
        return "newtype"
    return "validated"


@app.command()
def inspect(
    descriptor: Annotated[
        Path,
        typer.Argument(help="Descriptor file (.yaml, .yml or .json)")
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json")
    ] = "table",
) -> None:
    """Show records, fields and merged annotations of a descriptor."""
    _check_format(format)

    try:
        records = build_records(load_descriptor(descriptor))
    except GenerationError as e:
        _report_generation_error(e)
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    data = []
    for record in records:
        fields = []
        for field in record.fields:
            annotation = field.annotation
            fields.append({
                "name": field.name,
                "type": str(field.declared_type),
                "kind": _field_kind(annotation),
                "validators": [str(v) for v in annotation.field_validators] if annotation else [],
                "elementValidators": [str(v) for v in annotation.element_validators] if annotation else [],
            })
        data.append({
            "name": record.name,
            "kind": record.kind.value,
            "tryNew": record.struct_annotation.generates_validating_constructor,
            "newtype": record.struct_annotation.is_newtype_wrapper,
            "fields": fields,
        })

    if format == "json":
        print(jsonlib.dumps({"records": data, "total": len(data)}, indent=2))
        return

    for record in data:
        options = [name for name, enabled in (("try_new", record["tryNew"]), ("newtype", record["newtype"])) if enabled]
        title = record["name"] + (f" ({', '.join(options)})" if options else "")
        table = Table(title=title)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Type", style="white")
        table.add_column("Kind", style="magenta")
        table.add_column("Validators", style="green")
        table.add_column("Each", style="green")
        for field in record["fields"]:
            table.add_row(
                field["name"] or "-",
                escape(field["type"]),
                field["kind"],
                escape(", ".join(field["validators"])),
                escape(", ".join(field["elementValidators"])),
            )
        console.print(table)


@app.command()
def validators(
    module: Annotated[
        str,
        typer.Argument(help="Importable module defining register_validators(registry)")
    ],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json")
    ] = "table",
) -> None:
    """List the validators a module registers."""
    _check_format(format)

    # Validator modules usually live in the project being worked on
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        imported = importlib.import_module(module)
    except ImportError as e:
        console.print(f"[red]Error:[/red] Cannot import {module}: {escape(str(e))}")
        raise typer.Exit(1)

    register = getattr(imported, "register_validators", None)
    if register is None:
        console.print(f"[red]Error:[/red] {module} does not define register_validators(registry)")
        raise typer.Exit(1)

    registry = ValidatorRegistry()
    register(registry)
    entries = registry.entries()

    if format == "json":
        data = [
            {"name": e.name, "description": e.description, "inputType": e.input_type}
            for e in entries
        ]
        print(jsonlib.dumps({"validators": data, "total": len(data)}, indent=2))
        return

    if not entries:
        console.print("[dim]No validators registered[/dim]")
        return

    table = Table(title=f"Validators ({len(entries)} registered)")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Input", style="magenta")
    table.add_column("Description", style="white")
    for entry in entries:
        table.add_row(entry.name, escape(entry.input_type or "-"), escape(entry.description))
    console.print(table)


if __name__ == "__main__":
    app()
