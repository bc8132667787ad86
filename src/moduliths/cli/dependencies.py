"""Dependencies command: the modules one module needs, to a given depth."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..api import modules_from_config
from ..exceptions import ModulithsError
from ..logging_config import setup_logging
from ..model import DependencyDepth
from . import app
from ._common import EXIT_ERROR, console, resolve_settings


@app.command()
def dependencies(
    module: str = typer.Argument(..., help="Logical name of the module"),
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
    depth: DependencyDepth = typer.Option(
        DependencyDepth.IMMEDIATE,
        "--depth",
        "-d",
        help="none, immediate or all (transitive)",
        case_sensitive=False,
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
    List the modules MODULE depends on and the packages needed to bootstrap it.

    [bold cyan]Examples:[/bold cyan]

      moduliths dependencies orders src --root shop --depth all
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

    target = found.get_module_by_name(module)
    if target is None:
        console.print(
            f"[red]Error:[/red] No module named '{escape(module)}' "
            f"(known: {escape(', '.join(found.names))})"
        )
        raise typer.Exit(EXIT_ERROR)

    required = target.get_dependencies(found, depth)
    base_packages = target.get_base_packages(found, depth)

    if settings.output_format == "json":
        output = {
            "module": target.name,
            "depth": depth.value,
            "dependencies": [m.name for m in required],
            "base_packages": base_packages,
        }
        print(json.dumps(output, indent=2))
        return

    console.print(
        f"[bold]{escape(target.display_name)}[/bold] depends on "
        f"{len(required)} module(s) ({depth.value}):"
    )
    for dependency in required:
        console.print(f"  {escape(dependency.name)}  [dim]{escape(dependency.base_package.name)}[/dim]")
    console.print()
    console.print("Base packages to bootstrap:")
    for package in base_packages:
        console.print(f"  {escape(package)}")
