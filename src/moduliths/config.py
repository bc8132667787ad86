"""Configuration loading and management for moduliths.

Configuration sources are merged in priority order:
    1. Defaults (defined in ModulithsConfig)
    2. Global config (~/.moduliths.toml)
    3. Project config (./moduliths.toml)
    4. Explicit config file
    5. Environment variables (MODULITHS_* prefix)
    6. CLI overrides (passed as kwargs)

Module declarations live in ``[modules.<name>]`` tables:

    root_package = "shop"

    [modules.orders]
    base_package = "orders"          # relative to root_package
    display_name = "Order Management"
    named_interfaces = [
        { name = "API", packages = ["api"] },
        { name = "Events", packages = ["", "events"] },   # "" = top level
    ]

Example:
    >>> config = load_config(root_package="shop", workers=4)
    >>> config.workers
    4
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, ModulithsError
from .model.declarations import ModuleDeclaration, NamedInterfaceDeclaration

CONFIG_FILENAME = "moduliths.toml"
GLOBAL_CONFIG_FILENAME = ".moduliths.toml"
ENV_PREFIX = "MODULITHS_"

Verbosity = Literal["quiet", "normal", "verbose"]
OutputFormat = Literal["rich", "json"]

_VERBOSITIES = ("quiet", "normal", "verbose")
_OUTPUT_FORMATS = ("rich", "json")


@dataclass(frozen=True)
class ModulithsConfig:
    """Configuration for module discovery and verification.

    Attributes:
        root_package: Dotted name of the application root package; its
            immediate subpackages are the modules
        source_paths: Directories added to sys.path before importing
        exclude_patterns: fnmatch patterns of modules not to import
        workers: Thread pool size (None or 1 = sequential)
        verbosity: Logging verbosity level
        output_format: CLI output format
        modules: Explicit module declarations
    """

    root_package: Optional[str] = None
    source_paths: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(
        default_factory=lambda: [
            "*.tests",
            "*.tests.*",
            "*.test_*",
            "*.conftest",
        ]
    )
    workers: Optional[int] = None
    verbosity: Verbosity = "normal"
    output_format: OutputFormat = "rich"
    modules: tuple[ModuleDeclaration, ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.root_package is not None and not self.root_package.strip():
            raise InvalidConfigError("root_package", self.root_package, "must not be empty")
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"must be one of {', '.join(_VERBOSITIES)}"
            )
        if self.output_format not in _OUTPUT_FORMATS:
            raise InvalidConfigError(
                "output_format", self.output_format, f"must be one of {', '.join(_OUTPUT_FORMATS)}"
            )

    @property
    def verbose(self) -> bool:
        return self.verbosity == "verbose"

    @property
    def quiet(self) -> bool:
        return self.verbosity == "quiet"


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> ModulithsConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset CLI options keep file values

    Returns:
        Validated ModulithsConfig instance

    Raises:
        ModulithsError: If a config file is missing or cannot be parsed
        InvalidConfigError: If a value is invalid
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / GLOBAL_CONFIG_FILENAME
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ModulithsError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({key: value for key, value in overrides.items() if value is not None})

    modules = merged.pop("modules", None)
    if modules is not None:
        merged["modules"] = _parse_modules(modules)

    try:
        return ModulithsConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ModulithsError(f"Invalid configuration: {e}")


def _parse_modules(raw: Any) -> tuple[ModuleDeclaration, ...]:
    """Turn ``[modules.<name>]`` tables into module declarations."""
    if isinstance(raw, (tuple, list)) and all(isinstance(m, ModuleDeclaration) for m in raw):
        return tuple(raw)
    if not isinstance(raw, dict):
        raise InvalidConfigError("modules", raw, "expected a table of module tables")

    declarations = []
    for name, table in raw.items():
        if not isinstance(table, dict):
            raise InvalidConfigError(f"modules.{name}", table, "expected a table")
        unknown = set(table) - {"base_package", "display_name", "named_interfaces"}
        if unknown:
            raise InvalidConfigError(
                f"modules.{name}", ", ".join(sorted(unknown)), "unknown keys"
            )
        declarations.append(
            ModuleDeclaration(
                name=name,
                base_package=table.get("base_package", name),
                display_name=table.get("display_name"),
                named_interfaces=_parse_named_interfaces(name, table.get("named_interfaces", [])),
            )
        )
    return tuple(declarations)


def _parse_named_interfaces(module: str, raw: Any) -> tuple[NamedInterfaceDeclaration, ...]:
    key = f"modules.{module}.named_interfaces"
    if not isinstance(raw, list):
        raise InvalidConfigError(key, raw, "expected an array of tables")

    result = []
    for entry in raw:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise InvalidConfigError(key, entry, "each entry needs a string 'name'")
        packages = entry.get("packages", [entry["name"].lower()])
        if not isinstance(packages, list) or not all(isinstance(p, str) for p in packages):
            raise InvalidConfigError(key, packages, "'packages' must be an array of strings")
        result.append(NamedInterfaceDeclaration(name=entry["name"], packages=tuple(packages)))
    return tuple(result)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from MODULITHS_* environment variables.

    Supported environment variables:
        MODULITHS_ROOT_PACKAGE: str
        MODULITHS_WORKERS: int
        MODULITHS_VERBOSITY: quiet/normal/verbose
        MODULITHS_OUTPUT_FORMAT: rich/json

    Returns:
        Dict of field_name -> parsed_value for any MODULITHS_* vars found.
    """
    type_hints = get_type_hints(ModulithsConfig)

    result: dict[str, Any] = {}

    for field_name in ModulithsConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be set from the environment
    (lists, tuples).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin in (list, tuple) or type_hint in (list, tuple):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict.

    Raises:
        ModulithsError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ModulithsError(f"Invalid config file '{path}': {e}") from e
