"""Module dependency edges and traversal depth."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .formatting import describe_field, describe_parameter, describe_return_type
from .types import CodeUnit, DirectDependency, FieldReference, TypeReference


class DependencyDepth(Enum):
    """How far a module's dependencies are expanded."""

    NONE = "none"  # the module on its own
    IMMEDIATE = "immediate"  # one hop
    ALL = "all"  # transitive closure


class DependencyType(Enum):
    """Structural cause of a dependency edge."""

    DIRECT = "direct reference"
    PARAMETER = "method parameter"
    RETURN_TYPE = "method return type"
    FIELD = "field type"


@dataclass(frozen=True)
class ModuleDependency:
    """One attributed use of ``target`` by ``origin``.

    Equality (and hashing) covers origin, target and description only, so
    the same use reported twice collapses while the same pair of types
    reached through different declarations stays distinct.
    """

    origin: TypeReference
    target: TypeReference
    description: str
    kind: DependencyType = field(default=DependencyType.DIRECT, compare=False)

    @classmethod
    def from_direct(cls, origin: TypeReference, dependency: DirectDependency) -> ModuleDependency:
        return cls(origin, dependency.target, dependency.description, DependencyType.DIRECT)

    @classmethod
    def from_parameter(
        cls, origin: TypeReference, code_unit: CodeUnit, parameter: TypeReference
    ) -> ModuleDependency:
        return cls(
            origin,
            parameter,
            describe_parameter(origin, code_unit, parameter),
            DependencyType.PARAMETER,
        )

    @classmethod
    def from_return_type(
        cls, origin: TypeReference, code_unit: CodeUnit, return_type: TypeReference
    ) -> ModuleDependency:
        return cls(
            origin,
            return_type,
            describe_return_type(origin, code_unit, return_type),
            DependencyType.RETURN_TYPE,
        )

    @classmethod
    def from_field(cls, origin: TypeReference, field_ref: FieldReference) -> ModuleDependency:
        return cls(origin, field_ref.type, describe_field(origin, field_ref), DependencyType.FIELD)

    @classmethod
    def all_from(cls, origin: TypeReference, code_unit: CodeUnit) -> Iterator[ModuleDependency]:
        """Parameter edges in declaration order, then the return type edges."""
        for parameter in code_unit.parameters:
            yield cls.from_parameter(origin, code_unit, parameter)
        for return_type in code_unit.return_types:
            yield cls.from_return_type(origin, code_unit, return_type)

    def __str__(self) -> str:
        return self.description
