"""Configuration and construction exceptions: settings, paths, module naming."""

from pathlib import Path
from typing import Any, Sequence

from .base import ModulithsError


class ConfigurationError(ModulithsError):
    """Base class for configuration-related errors."""

    pass


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class AmbiguousModuleError(ConfigurationError):
    """Raised when two modules of one application resolve to the same identity."""

    def __init__(self, name: str, packages: Sequence[str]):
        super().__init__(
            f"Ambiguous module '{name}'",
            details={"module": name, "packages": ", ".join(packages)},
        )
        self.name = name
        self.packages = list(packages)


class DuplicateNamedInterfaceError(ConfigurationError):
    """Raised when a module declares two named interfaces with the same name."""

    def __init__(self, module: str, name: str):
        super().__init__(
            f"Duplicate named interface '{name}'",
            details={"module": module, "interface": name},
        )
        self.module = module
        self.name = name
