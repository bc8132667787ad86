"""Verify command: check every module boundary of an application."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..api import modules_from_config
from ..exceptions import ModulithsError
from ..logging_config import setup_logging
from ..model import Modules, Violations
from ..model.formatting import violation_to_dict
from . import app
from ._common import EXIT_ERROR, EXIT_VIOLATIONS, console, resolve_settings


@app.command()
def verify(
    path: Path = typer.Argument(
        Path("."),
        help="Source directory containing the root package, or the root package itself",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    root: Optional[str] = typer.Option(
        None,
        "--root",
        "-r",
        help="Root package of the application (e.g. shop)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: rich (human-readable) or json",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Parallel workers",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show the module table and debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print violations",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write the full debug log to this file",
        dir_okay=False,
    ),
):
    """
    Verify that modules only depend on each other's named interfaces.

    Exits with 0 when all boundaries hold, 1 when violations were found and
    2 when the application could not be loaded.

    [bold cyan]Examples:[/bold cyan]

      moduliths verify src --root shop

      moduliths verify src/shop --format json
    """
    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None
    )

    try:
        settings = resolve_settings(
            path,
            config=config,
            root=root,
            fmt=fmt,
            workers=workers,
            verbose=verbose,
            quiet=quiet,
        )
        modules = modules_from_config(settings)
        violations = modules.detect_violations()
    except ModulithsError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if settings.output_format == "json":
        _output_json(modules, violations)
    else:
        _output_rich(modules, violations, verbose=verbose, quiet=quiet)

    if violations:
        raise typer.Exit(EXIT_VIOLATIONS)


def _output_json(modules: Modules, violations: Violations):
    """Machine-readable verification result."""
    output = {
        "root_package": modules.root_package,
        "modules": modules.names,
        "violation_count": len(violations),
        "violations": [violation_to_dict(v) for v in violations],
    }
    print(json.dumps(output, indent=2))


def _output_rich(modules: Modules, violations: Violations, verbose: bool = False, quiet: bool = False):
    """Human-readable terminal output."""
    if not quiet:
        console.print()
        console.print(
            f"[bold cyan]MODULITHS: {escape(modules.root_package)}[/bold cyan] "
            f"({len(modules)} modules)"
        )
        console.print()

    if verbose:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Module")
        table.add_column("Base package")
        table.add_column("Named interfaces")
        table.add_column("Depends on")
        for module in modules:
            table.add_row(
                escape(module.display_name),
                escape(module.base_package.name),
                escape(", ".join(module.named_interfaces.names)),
                escape(", ".join(m.name for m in module.get_dependencies(modules)) or "-"),
            )
        console.print(table)
        console.print()

    if not violations:
        if not quiet:
            console.print("[green]No module violations found.[/green]")
        return

    console.print(f"[bold red]{len(violations)} module violation(s)[/bold red]")
    for violation in violations:
        console.print(
            f"  [bold]{escape(violation.origin_module)}[/bold] -> "
            f"[bold]{escape(violation.target_module)}[/bold]: "
            f"non-exposed type {escape(violation.type_name)}"
        )
        console.print(f"    [dim]{escape(violation.description)}[/dim]")
    console.print()
