"""Class model consumed by the module graph.

The core never builds these itself. A class model adapter (see
``moduliths.scanning``) materialises the whole application once:

  TypeReference     a class, identified by its fully qualified name
  FieldReference    a declared field and its type
  CodeUnit          a method or constructor with parameter/return types
  DirectDependency  any other reference (base class, static use, ...)
  ClassModel        all types plus package-level markers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping, Optional


class Marker(Enum):
    """Package-level markers standing in for package annotations."""

    MODULE = "module"  # value: display name
    NAMED_INTERFACE = "named_interface"  # value: interface name, "" = local name


@dataclass(frozen=True, eq=False)
class TypeReference:
    """Handle to a class of the analysed codebase.

    Identity is the fully qualified name only, so a bare reference created
    for a dependency target equals the fully populated one.
    """

    name: str
    package: str
    source_file: Optional[str] = None
    line: int = 0
    nested: bool = False  # declared inside another class
    fields: tuple[FieldReference, ...] = ()
    code_units: tuple[CodeUnit, ...] = ()
    direct_dependencies: tuple[DirectDependency, ...] = ()

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeReference):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"TypeReference({self.name!r})"


@dataclass(frozen=True)
class FieldReference:
    """A field declared on a type."""

    name: str
    type: TypeReference
    line: int = 0


@dataclass(frozen=True)
class CodeUnit:
    """A method or constructor declared on a type.

    ``parameters`` lists every type referenced by the parameter annotations,
    in declaration order. ``return_types`` lists the types referenced by the
    return annotation (several for generics and unions, none for ``None``).
    """

    name: str
    parameters: tuple[TypeReference, ...] = ()
    return_types: tuple[TypeReference, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class DirectDependency:
    """A reference to another type that is not a field/parameter/return type."""

    target: TypeReference
    description: str


@dataclass
class ClassModel:
    """All types of an application plus the markers of its packages."""

    types: list[TypeReference] = field(default_factory=list)
    package_markers: dict[str, dict[Marker, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._by_name: dict[str, TypeReference] = {}
        unique: list[TypeReference] = []
        for type_ in self.types:
            if type_.name not in self._by_name:
                self._by_name[type_.name] = type_
                unique.append(type_)
        self.types = unique

    def __iter__(self) -> Iterator[TypeReference]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def get(self, name: str) -> Optional[TypeReference]:
        return self._by_name.get(name)

    def markers_of(self, package: str) -> Mapping[Marker, str]:
        return self.package_markers.get(package, {})

    @property
    def packages(self) -> set[str]:
        """Every package that holds a type or carries a marker."""
        return {t.package for t in self.types} | set(self.package_markers)
