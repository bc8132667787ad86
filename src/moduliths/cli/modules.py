"""Modules command: document the modules of an application."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..api import modules_from_config
from ..exceptions import ModulithsError
from ..logging_config import setup_logging
from ..model.formatting import module_to_dict
from . import app
from ._common import EXIT_ERROR, console, resolve_settings


@app.command()
def modules(
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Print a summary of every module: names, named interfaces, components.

    [bold cyan]Examples:[/bold cyan]

      moduliths modules src --root shop
    """
    logger = setup_logging(verbose=verbose)

    try:
        settings = resolve_settings(path, config=config, root=root, fmt=fmt, verbose=verbose)
        found = modules_from_config(settings)
    except ModulithsError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if settings.output_format == "json":
        print(json.dumps([module_to_dict(m) for m in found], indent=2))
        return

    for module in found:
        console.print(escape(module.summary()))
