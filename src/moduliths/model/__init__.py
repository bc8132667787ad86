"""Module graph model: modules, named interfaces, dependencies, violations."""

from .declarations import ModuleDeclaration, NamedInterfaceDeclaration
from .dependencies import DependencyDepth, DependencyType, ModuleDependency
from .module import Module
from .modules import Modules
from .named_interfaces import UNNAMED, NamedInterface, NamedInterfaces
from .packages import PackageTree
from .types import (
    ClassModel,
    CodeUnit,
    DirectDependency,
    FieldReference,
    Marker,
    TypeReference,
)
from .violations import Violation, Violations

__all__ = [
    "ClassModel",
    "CodeUnit",
    "DependencyDepth",
    "DependencyType",
    "DirectDependency",
    "FieldReference",
    "Marker",
    "Module",
    "ModuleDeclaration",
    "ModuleDependency",
    "Modules",
    "NamedInterface",
    "NamedInterfaceDeclaration",
    "NamedInterfaces",
    "PackageTree",
    "TypeReference",
    "UNNAMED",
    "Violation",
    "Violations",
]
