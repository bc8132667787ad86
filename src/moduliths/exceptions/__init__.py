"""Exception hierarchy for moduliths."""

from .base import ModulithsError
from .config import (
    AmbiguousModuleError,
    ConfigurationError,
    DuplicateNamedInterfaceError,
    InvalidConfigError,
    InvalidPathError,
)
from .verification import (
    ClassModelError,
    ModuleViolationsError,
    VerificationError,
)

__all__ = [
    "ModulithsError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "AmbiguousModuleError",
    "DuplicateNamedInterfaceError",
    "VerificationError",
    "ClassModelError",
    "ModuleViolationsError",
]
