"""Named interfaces: the parts of a module other modules may depend on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

from ..exceptions import DuplicateNamedInterfaceError, InvalidConfigError
from .declarations import NamedInterfaceDeclaration
from .packages import PackageTree
from .types import Marker, TypeReference

UNNAMED = "unnamed"


@dataclass(frozen=True)
class NamedInterface:
    """A named set of types a module exposes."""

    name: str
    exposed_types: frozenset[TypeReference]

    @classmethod
    def of(cls, package: PackageTree) -> NamedInterface:
        """Interface for a marked package: the package and everything below it."""
        name = package.marker(Marker.NAMED_INTERFACE) or package.local_name
        return cls(name, frozenset(package.all_types()))

    @classmethod
    def unnamed(cls, base_package: PackageTree) -> NamedInterface:
        """Default interface: only the types directly in the base package."""
        return cls(UNNAMED, frozenset(base_package.types))

    @classmethod
    def declared(
        cls, base_package: PackageTree, declaration: NamedInterfaceDeclaration, module: str = ""
    ) -> NamedInterface:
        """Interface over declared packages, relative to the module's base package.

        Raises:
            InvalidConfigError: A declared package does not exist
        """
        types: set[TypeReference] = set()
        for relative in declaration.packages:
            package = base_package.get_sub_package(relative)
            if not package.exists():
                raise InvalidConfigError(
                    f"modules.{module or base_package.local_name}.named_interfaces",
                    relative,
                    f"package {package.name} not found",
                )
            # "" only exposes the top level, a subpackage exposes its subtree
            types.update(package.types if not relative else package.all_types())
        return cls(declaration.name, frozenset(types))

    @property
    def is_unnamed(self) -> bool:
        return self.name == UNNAMED

    def contains(self, type_: TypeReference) -> bool:
        return type_ in self.exposed_types

    def __str__(self) -> str:
        return f"{self.name} ({len(self.exposed_types)} types)"


class NamedInterfaces(Sequence[NamedInterface]):
    """The named interfaces of one module. Never empty, names are unique."""

    def __init__(self, interfaces: Iterable[NamedInterface], module: str = "") -> None:
        self._interfaces: list[NamedInterface] = []
        seen: set[str] = set()
        for interface in interfaces:
            if interface.name in seen:
                raise DuplicateNamedInterfaceError(module, interface.name)
            seen.add(interface.name)
            self._interfaces.append(interface)
        if not self._interfaces:
            raise ValueError("a module needs at least one named interface")

    @classmethod
    def discover(cls, base_package: PackageTree) -> NamedInterfaces:
        """Named interfaces from the markers of the direct subpackages.

        Falls back to a single unnamed interface when no subpackage is marked.
        """
        marked = [
            NamedInterface.of(p) for p in base_package.sub_packages_marked_with(Marker.NAMED_INTERFACE)
        ]
        if not marked:
            marked = [NamedInterface.unnamed(base_package)]
        return cls(marked, module=base_package.local_name)

    @classmethod
    def declared(
        cls,
        base_package: PackageTree,
        declarations: Sequence[NamedInterfaceDeclaration],
        module: str = "",
    ) -> NamedInterfaces:
        """Named interfaces from explicit configuration, or discovered if none."""
        if not declarations:
            return cls.discover(base_package)
        return cls(
            (NamedInterface.declared(base_package, d, module) for d in declarations),
            module=module or base_package.local_name,
        )

    def __getitem__(self, index):  # type: ignore[override]
        return self._interfaces[index]

    def __len__(self) -> int:
        return len(self._interfaces)

    def __iter__(self) -> Iterator[NamedInterface]:
        return iter(self._interfaces)

    @property
    def names(self) -> list[str]:
        return [i.name for i in self._interfaces]

    def exposes(self, type_: TypeReference) -> bool:
        return any(i.contains(type_) for i in self._interfaces)

    def has_explicit_interfaces(self) -> bool:
        return len(self._interfaces) > 1 or not self._interfaces[0].is_unnamed

    def get_by_name(self, name: str) -> Optional[NamedInterface]:
        return next((i for i in self._interfaces if i.name == name), None)

    def __repr__(self) -> str:
        return f"NamedInterfaces({self.names!r})"
