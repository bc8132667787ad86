"""Modules: every module of an application and whole-graph verification.

Construction:
1. Group the class model below the root package into a package tree
2. Build one module per immediate subpackage (declarations override markers)
3. Index modules by base package for O(1) type -> module lookup
4. Resolve each module's dependency edges against the finished graph

Steps 2 and 4, as well as verification, may run on a thread pool; step 4
only starts once the index of step 3 is complete.
"""

from __future__ import annotations

import dataclasses
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Iterator, Optional, Sequence, TypeVar, Union

from ..exceptions import AmbiguousModuleError, InvalidConfigError
from ..logging_config import get_logger
from .declarations import ModuleDeclaration
from .module import Module
from .packages import PackageTree
from .types import ClassModel, TypeReference
from .violations import Violations

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Modules:
    """All modules found directly below an application's root package."""

    def __init__(
        self,
        root_package: str,
        modules: Iterable[Module],
        workers: Optional[int] = None,
    ) -> None:
        self.root_package = root_package
        self._prefix = root_package + "."
        self._workers = workers
        self._modules: dict[str, Module] = {}
        self._by_package: dict[str, Module] = {}

        for module in modules:
            existing = self._modules.get(module.name)
            if existing is not None:
                raise AmbiguousModuleError(
                    module.name, [existing.base_package.name, module.base_package.name]
                )
            self._modules[module.name] = module
            self._by_package[module.base_package.name] = module

    @classmethod
    def of(
        cls,
        root: Union[str, TypeReference],
        class_model: ClassModel,
        declarations: Sequence[ModuleDeclaration] = (),
        workers: Optional[int] = None,
    ) -> Modules:
        """Discover the modules of the application rooted at ``root``.

        Args:
            root: Root package name, or a type whose package is the root
            class_model: All types of the application
            declarations: Explicit module declarations; modules without one
                are described by their package markers
            workers: Thread pool size for module construction, edge
                resolution and verification (None or 1 = sequential)

        Raises:
            AmbiguousModuleError: Two modules resolve to the same name or
                base package
            InvalidConfigError: A declaration does not name an immediate
                subpackage of the root
        """
        root_package = root.package if isinstance(root, TypeReference) else root
        tree = PackageTree.of(root_package, class_model)
        sub_packages = tree.sub_packages()
        declared = _index_declarations(root_package, declarations, {p.name for p in sub_packages})

        built = _run(
            lambda package: Module.of(package, declared.get(package.name)),
            sub_packages,
            workers,
        )
        modules = cls(root_package, built, workers=workers)
        modules._resolve()

        logger.debug(f"Discovered {len(modules)} modules under '{root_package}'")
        return modules

    def _resolve(self) -> None:
        _run(lambda module: module.resolve(self), list(self), self._workers)

    # ── Lookup ────────────────────────────────────────────────────────

    def get_module_by_name(self, name: str) -> Optional[Module]:
        return self._modules.get(name)

    def get_module_of_package(self, package: str) -> Optional[Module]:
        """The module whose base package is ``package`` or one of its parents."""
        if not package.startswith(self._prefix):
            return None
        local = package[len(self._prefix) :].split(".", 1)[0]
        return self._by_package.get(self._prefix + local)

    def get_module_by_type(self, type_: TypeReference) -> Optional[Module]:
        """The module containing ``type_``, None for types outside all modules."""
        return self.get_module_of_package(type_.package)

    def contain(self, type_: TypeReference) -> bool:
        return self.get_module_by_type(type_) is not None

    @property
    def names(self) -> list[str]:
        return list(self._modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    # ── Verification ──────────────────────────────────────────────────

    def detect_violations(self) -> Violations:
        """Violations of every module, aggregated in module order."""
        results = _run(lambda module: module.verify_dependencies(self), list(self), self._workers)
        violations = Violations().merge(results)
        logger.info(
            f"Verified {len(self)} modules of '{self.root_package}': {len(violations)} violations"
        )
        return violations

    def verify(self) -> None:
        """Raise ``ModuleViolationsError`` listing all violations, if any."""
        self.detect_violations().raise_if_present()

    def __repr__(self) -> str:
        return f"Modules({self.root_package!r}, {self.names!r})"


def _index_declarations(
    root_package: str,
    declarations: Sequence[ModuleDeclaration],
    sub_packages: set[str],
) -> dict[str, ModuleDeclaration]:
    """Map base package -> declaration, normalising relative base packages."""
    prefix = root_package + "."
    by_package: dict[str, ModuleDeclaration] = {}
    by_name: dict[str, str] = {}

    for declaration in declarations:
        base = declaration.base_package
        if not base.startswith(prefix):
            base = prefix + base
        key = f"modules.{declaration.name}.base_package"
        if "." in base[len(prefix) :]:
            raise InvalidConfigError(
                key, declaration.base_package, f"must be an immediate subpackage of {root_package}"
            )
        if base not in sub_packages:
            raise InvalidConfigError(key, declaration.base_package, "package not found")
        if declaration.name in by_name:
            raise AmbiguousModuleError(declaration.name, [by_name[declaration.name], base])
        if base in by_package:
            raise AmbiguousModuleError(base, [by_package[base].name, declaration.name])

        by_name[declaration.name] = base
        by_package[base] = dataclasses.replace(declaration, base_package=base)

    return by_package


def _run(fn: Callable[[T], R], items: Sequence[T], workers: Optional[int]) -> list[R]:
    """Apply ``fn`` to ``items`` in order, on a thread pool when ``workers > 1``."""
    if not workers or workers < 2 or len(items) < 2:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(fn, items))
