"""
Moduliths - Module Boundary Verification for Python Applications

Treats every immediate subpackage of an application's root package as a
logical module, derives the dependencies between modules from the classes
they contain, and reports every dependency into a type its module does not
expose through a named interface.
"""

__version__ = "0.3.0"
__author__ = "Naman Agarwal"

from .api import detect_violations, load_modules, verify
from .config import ModulithsConfig, load_config
from .exceptions import ModuleViolationsError, ModulithsError
from .model import DependencyDepth, Module, Modules, NamedInterface, Violations

__all__ = [
    "verify",  # Main entry point
    "detect_violations",
    "load_modules",
    "load_config",
    "ModulithsConfig",
    "Modules",
    "Module",
    "NamedInterface",
    "DependencyDepth",
    "Violations",
    "ModulithsError",
    "ModuleViolationsError",
]
