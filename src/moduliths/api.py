"""Public API for moduliths.

Example:
    >>> from moduliths import verify
    >>>
    >>> # Raise ModuleViolationsError when any module boundary is crossed
    >>> verify("shop", source_paths=["src"])
    >>>
    >>> # Inspect the module graph
    >>> modules = load_modules("shop", source_paths=["src"])
    >>> orders = modules.get_module_by_name("orders")
    >>> [m.name for m in orders.get_dependencies(modules, DependencyDepth.ALL)]
    ['inventory', 'customers']
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import ModulithsConfig, load_config
from .exceptions import InvalidConfigError
from .logging_config import get_logger
from .model import Modules, Violations
from .scanning import ClassModelImporter

logger = get_logger(__name__)


def load_modules(
    root_package: Optional[str] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> Modules:
    """Import an application and build its module graph.

    Args:
        root_package: Dotted name of the application root package
            (falls back to ``root_package`` from configuration)
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g., workers=4, source_paths=["src"])

    Returns:
        The resolved Modules of the application

    Raises:
        ConfigurationError: If configuration is invalid or no root package is set
        ClassModelError: If the application cannot be imported
    """
    config = load_config(config_file=config_file, root_package=root_package, **overrides)
    return modules_from_config(config)


def modules_from_config(config: ModulithsConfig) -> Modules:
    """Build the module graph described by an already loaded configuration."""
    if not config.root_package:
        raise InvalidConfigError("root_package", None, "no root package configured")

    importer = ClassModelImporter(
        exclude_patterns=config.exclude_patterns,
        source_paths=config.source_paths,
    )
    class_model = importer.import_package(config.root_package)
    logger.info(f"Loaded {len(class_model)} types below '{config.root_package}'")

    return Modules.of(
        config.root_package,
        class_model,
        declarations=config.modules,
        workers=config.workers,
    )


def detect_violations(
    root_package: Optional[str] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> Violations:
    """Every module boundary violation of an application, without raising."""
    return load_modules(root_package, config_file, **overrides).detect_violations()


def verify(
    root_package: Optional[str] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> Modules:
    """Verify an application's module boundaries.

    Returns:
        The verified Modules, for further inspection

    Raises:
        ModuleViolationsError: Listing every violation found
    """
    modules = load_modules(root_package, config_file, **overrides)
    modules.verify()
    return modules
