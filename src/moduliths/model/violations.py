"""Verification results: boundary violations between modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..exceptions import ModuleViolationsError
from .dependencies import DependencyType


@dataclass(frozen=True)
class Violation:
    """A dependency into a type its module does not expose."""

    origin_module: str
    target_module: str
    type_name: str
    description: str
    kind: DependencyType = DependencyType.DIRECT

    @property
    def message(self) -> str:
        return (
            f"Module '{self.origin_module}' depends on non-exposed type {self.type_name} "
            f"within module '{self.target_module}'!\n{self.description}"
        )

    def __str__(self) -> str:
        return self.message


@dataclass
class Violations:
    """Ordered collection of violations found by one verification run."""

    violations: list[Violation] = field(default_factory=list)

    def add(self, violation: Violation) -> None:
        self.violations.append(violation)

    def merge(self, others: Iterable[Violations]) -> Violations:
        """New collection holding these violations followed by ``others``'."""
        merged = list(self.violations)
        for other in others:
            merged.extend(other.violations)
        return Violations(merged)

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    def raise_if_present(self) -> None:
        if self.violations:
            raise ModuleViolationsError(self)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def __len__(self) -> int:
        return len(self.violations)

    def __bool__(self) -> bool:
        return self.has_violations
