"""Module: one logical unit of the application.

A module is an immediate subpackage of the application root together with
the named interfaces it exposes. It is built in two phases:

1. ``Module.of(base_package, declaration)`` fixes the base package, the
   names and the named interfaces.
2. ``module.resolve(modules)`` extracts the dependency edges to other
   modules once the complete ``Modules`` graph exists.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Iterator, Optional

from ..exceptions import ClassModelError
from ..logging_config import get_logger
from .declarations import ModuleDeclaration, declare_from_markers
from .dependencies import DependencyDepth, ModuleDependency
from .formatting import module_summary
from .named_interfaces import NamedInterfaces
from .packages import PackageTree
from .types import TypeReference
from .violations import Violation, Violations

if TYPE_CHECKING:
    from .modules import Modules

logger = get_logger(__name__)


class Module:
    """A logical module rooted at ``base_package``."""

    def __init__(
        self,
        base_package: PackageTree,
        name: Optional[str] = None,
        display_name: Optional[str] = None,
        named_interfaces: Optional[NamedInterfaces] = None,
    ) -> None:
        self.base_package = base_package
        self.name = name or base_package.local_name
        self._display_name = display_name
        self.named_interfaces = named_interfaces or NamedInterfaces.discover(base_package)

        self._resolved_against: Optional[Modules] = None
        self._dependencies: tuple[ModuleDependency, ...] = ()

    @classmethod
    def of(
        cls, base_package: PackageTree, declaration: Optional[ModuleDeclaration] = None
    ) -> Module:
        """Build a module from its declaration (markers when none given)."""
        declaration = declaration or declare_from_markers(base_package)
        named_interfaces = NamedInterfaces.declared(
            base_package, declaration.named_interfaces, module=declaration.name
        )
        return cls(
            base_package,
            name=declaration.name,
            display_name=declaration.display_name,
            named_interfaces=named_interfaces,
        )

    @property
    def display_name(self) -> str:
        return self._display_name or self.name

    def contains(self, type_: TypeReference) -> bool:
        return self.base_package.contains(type_)

    def is_exposed(self, type_: TypeReference) -> bool:
        """Whether ``type_`` is part of any of this module's named interfaces."""
        return self.named_interfaces.exposes(type_)

    def get_components(self) -> list[TypeReference]:
        """Public, top-level types of the module."""
        return [
            t for t in self.base_package if not t.nested and not t.simple_name.startswith("_")
        ]

    # ── Dependency edges ──────────────────────────────────────────────

    def resolve(self, modules: Modules) -> Module:
        """Extract and cache the dependency edges against ``modules``."""
        self._dependencies = tuple(self._extract_dependencies(modules))
        self._resolved_against = modules
        logger.debug(f"Module '{self.name}' has {len(self._dependencies)} outbound edges")
        return self

    def get_module_dependencies(self, modules: Modules) -> list[ModuleDependency]:
        """All edges from this module's types into other modules' types."""
        if modules is self._resolved_against:
            return list(self._dependencies)
        return self._extract_dependencies(modules)

    def _extract_dependencies(self, modules: Modules) -> list[ModuleDependency]:
        seen: set[ModuleDependency] = set()
        result: list[ModuleDependency] = []
        for type_ in self.base_package:
            for dependency in self._dependencies_of(type_, modules):
                if dependency not in seen:
                    seen.add(dependency)
                    result.append(dependency)
        return result

    def _dependencies_of(self, type_: TypeReference, modules: Modules) -> Iterator[ModuleDependency]:
        """Direct references, then method signatures, then field types."""
        for direct in type_.direct_dependencies:
            if self._is_dependency_to_other_module(direct.target, modules):
                yield ModuleDependency.from_direct(type_, direct)

        for code_unit in type_.code_units:
            for dependency in ModuleDependency.all_from(type_, code_unit):
                if self._is_dependency_to_other_module(dependency.target, modules):
                    yield dependency

        for field_ref in type_.fields:
            if self._is_dependency_to_other_module(field_ref.type, modules):
                yield ModuleDependency.from_field(type_, field_ref)

    def _is_dependency_to_other_module(self, target: TypeReference, modules: Modules) -> bool:
        # Types outside every module (stdlib, third party) are never edges
        return modules.contain(target) and not self.contains(target)

    # ── Module graph traversal ────────────────────────────────────────

    def get_dependencies(
        self, modules: Modules, depth: DependencyDepth = DependencyDepth.IMMEDIATE
    ) -> list[Module]:
        """Modules this module depends on, expanded to ``depth``.

        Ordered by first discovery. ``ALL`` walks the module graph breadth
        first with a visited set keyed by module name, so cycles terminate
        and the module itself is never part of the result.
        """
        if depth is DependencyDepth.NONE:
            return []

        direct = self._direct_dependencies(modules)
        if depth is DependencyDepth.IMMEDIATE:
            return direct

        result: list[Module] = []
        visited = {self.name}
        queue = deque(direct)
        while queue:
            module = queue.popleft()
            if module.name in visited:
                continue
            visited.add(module.name)
            result.append(module)
            queue.extend(module._direct_dependencies(modules))
        return result

    def _direct_dependencies(self, modules: Modules) -> list[Module]:
        result: list[Module] = []
        seen: set[str] = set()
        for dependency in self.get_module_dependencies(modules):
            module = modules.get_module_by_type(dependency.target)
            if module is not None and module.name not in seen:
                seen.add(module.name)
                result.append(module)
        return result

    def get_base_packages(
        self, modules: Modules, depth: DependencyDepth = DependencyDepth.IMMEDIATE
    ) -> list[str]:
        """Base package of this module followed by those of its dependencies."""
        return [self.base_package.name] + [
            m.base_package.name for m in self.get_dependencies(modules, depth)
        ]

    # ── Verification ──────────────────────────────────────────────────

    def verify_dependencies(self, modules: Modules) -> Violations:
        """Every edge into a type its owning module does not expose."""
        violations = Violations()
        for dependency in self.get_module_dependencies(modules):
            target_module = self._existing_module_of(dependency.target, modules)
            if target_module.is_exposed(dependency.target):
                continue
            origin_module = self._existing_module_of(dependency.origin, modules)
            violations.add(
                Violation(
                    origin_module=origin_module.name,
                    target_module=target_module.name,
                    type_name=dependency.target.name,
                    description=dependency.description,
                    kind=dependency.kind,
                )
            )

        if violations:
            logger.debug(f"Module '{self.name}' has {len(violations)} violations")
        return violations

    @staticmethod
    def _existing_module_of(type_: TypeReference, modules: Modules) -> Module:
        module = modules.get_module_by_type(type_)
        if module is None:
            raise ClassModelError(
                type_.name,
                "origin and target of a module dependency must belong to a module",
            )
        return module

    def summary(self) -> str:
        return module_summary(self)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"Module({self.name!r}, base_package={self.base_package.name!r})"
