"""Module declarations: the immutable first phase of module construction.

Declarations come either from configuration (``[modules.<name>]`` tables)
or from package markers. ``Modules.of`` turns them into resolved modules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .packages import PackageTree
from .types import Marker


@dataclass(frozen=True)
class NamedInterfaceDeclaration:
    """A named interface made of subpackages of a module.

    ``packages`` are dotted paths relative to the module's base package;
    ``""`` stands for the types declared directly in the base package.
    """

    name: str
    packages: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleDeclaration:
    """Declared shape of one module before it is resolved."""

    name: str
    base_package: str
    display_name: Optional[str] = None
    named_interfaces: tuple[NamedInterfaceDeclaration, ...] = ()  # empty = discover

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("module name must not be empty")
        if not self.base_package:
            raise ValueError("module base package must not be empty")


def declare_from_markers(base_package: PackageTree) -> ModuleDeclaration:
    """Default declaration of the module rooted at ``base_package``.

    Named interfaces are left empty so they are discovered from the
    subpackage markers when the module is built.
    """
    return ModuleDeclaration(
        name=base_package.local_name,
        base_package=base_package.name,
        display_name=base_package.marker(Marker.MODULE) or None,
    )
