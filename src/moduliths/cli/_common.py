"""Shared CLI helpers."""

import dataclasses
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import ModulithsConfig, load_config

console = Console()

# Exit codes
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2


def resolve_settings(
    path: Path,
    config: Optional[Path] = None,
    root: Optional[str] = None,
    fmt: Optional[str] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> ModulithsConfig:
    """Build settings from CLI options.

    When PATH is itself a package and no root was given on the command line,
    it is taken as the root package and its parent as the source directory.
    """
    source = path.resolve()
    if root is None and (source / "__init__.py").exists():
        root = source.name
        source = source.parent

    overrides = {}
    if root is not None:
        overrides["root_package"] = root
    if fmt is not None:
        overrides["output_format"] = fmt
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True

    settings = load_config(config_file=config, **overrides)
    return dataclasses.replace(settings, source_paths=[*settings.source_paths, str(source)])
