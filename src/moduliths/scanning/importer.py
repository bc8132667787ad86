"""ClassModelImporter: builds a ClassModel by introspecting a Python package.

The root package and every module below it are imported, then each class
defined there is described as a TypeReference:

  fields               own class annotations
  code units           signatures of methods, static/class methods and
                       property getters
  direct dependencies  base classes, metaclass, class attributes holding
                       classes, and globals referenced by method bytecode
                       (module attribute chains such as ``orders.Order``
                       included)

Package markers are read from two package attributes:

  __display_name__ = "Order Management"   display name of a module
  __named_interface__ = "API"             named interface (True = local name)

Import failures and unresolvable annotations are not masked: they raise
ClassModelError. Names imported under ``if TYPE_CHECKING:`` are imported
for annotation resolution.
"""

from __future__ import annotations

import dis
import importlib
import inspect
import pkgutil
import sys
import types
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union

from ..exceptions import ClassModelError, InvalidPathError
from ..logging_config import get_logger
from ..model.types import (
    ClassModel,
    CodeUnit,
    DirectDependency,
    FieldReference,
    Marker,
    TypeReference,
)
from .annotations import AnnotationResolver, referenced_classes, type_checking_imports

logger = get_logger(__name__)

DISPLAY_NAME_ATTRIBUTE = "__display_name__"
NAMED_INTERFACE_ATTRIBUTE = "__named_interface__"

_GLOBAL_LOADS = frozenset({"LOAD_GLOBAL", "LOAD_NAME"})
_ATTRIBUTE_LOADS = frozenset({"LOAD_ATTR", "LOAD_METHOD"})
# generated by the interpreter for deferred annotations
_IGNORED_MEMBERS = frozenset({"__annotate__", "__annotate_func__"})


def type_name(cls: type) -> str:
    """Fully qualified name of a class: ``<module>.<qualname>``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def package_of(module_name: str) -> str:
    """Package a module belongs to; a package belongs to itself."""
    module = sys.modules.get(module_name)
    if module is not None and hasattr(module, "__path__"):
        return module_name
    return module_name.rpartition(".")[0]


def reference_to(cls: type) -> TypeReference:
    """Bare reference to a class, as used for dependency targets."""
    return TypeReference(name=type_name(cls), package=package_of(cls.__module__))


class ClassModelImporter:
    """Imports a package tree and describes its classes.

    Args:
        exclude_patterns: fnmatch patterns on dotted module names to skip
            (a skipped package is not descended into)
        source_paths: Directories prepended to ``sys.path`` before importing
    """

    def __init__(
        self,
        exclude_patterns: Sequence[str] = (),
        source_paths: Sequence[Union[str, Path]] = (),
    ) -> None:
        self.exclude_patterns = list(exclude_patterns)
        self.source_paths = [Path(p) for p in source_paths]
        self._namespaces: dict[str, dict[str, Any]] = {}

    def import_package(self, root_package: str) -> ClassModel:
        """Import ``root_package`` and everything below it."""
        self._extend_sys_path()

        types_: list[TypeReference] = []
        markers: dict[str, dict[Marker, str]] = {}
        module_count = 0

        for module in self._walk_root(root_package):
            module_count += 1
            if hasattr(module, "__path__"):
                package_markers = _markers_of(module)
                if package_markers:
                    markers[module.__name__] = package_markers
            for cls in _classes_defined_in(module):
                types_.append(self.describe(cls))

        logger.debug(
            f"Imported {module_count} modules with {len(types_)} classes below '{root_package}'"
        )
        return ClassModel(types_, markers)

    def _extend_sys_path(self) -> None:
        for path in reversed(self.source_paths):
            if not path.expanduser().is_dir():
                raise InvalidPathError(path, "source path is not a directory")
            resolved = str(path.expanduser().resolve())
            if resolved not in sys.path:
                sys.path.insert(0, resolved)

    def _walk_root(self, root_package: str) -> Iterator[types.ModuleType]:
        root = _import(root_package)
        if not hasattr(root, "__path__"):
            raise ClassModelError(root_package, "root must be a package, not a single module")
        yield root
        yield from self._walk(root)

    def _walk(self, package: types.ModuleType) -> Iterator[types.ModuleType]:
        infos = sorted(
            pkgutil.iter_modules(package.__path__, prefix=package.__name__ + "."),
            key=lambda info: info.name,
        )
        for info in infos:
            if self._is_excluded(info.name):
                logger.debug(f"Skipping excluded module {info.name}")
                continue
            module = _import(info.name)
            yield module
            if info.ispkg:
                yield from self._walk(module)

    def _is_excluded(self, module_name: str) -> bool:
        return any(fnmatch(module_name, pattern) for pattern in self.exclude_patterns)

    # ── Class description ─────────────────────────────────────────────

    def describe(self, cls: type) -> TypeReference:
        """Full TypeReference for a class."""
        source_file, line = _source_location(cls)
        return TypeReference(
            name=type_name(cls),
            package=package_of(cls.__module__),
            source_file=source_file,
            line=line,
            nested="." in cls.__qualname__,
            fields=tuple(self._fields_of(cls, line)),
            code_units=tuple(self._code_units_of(cls)),
            direct_dependencies=tuple(self._direct_dependencies_of(cls, source_file, line)),
        )

    def _fields_of(self, cls: type, line: int) -> Iterator[FieldReference]:
        resolver = AnnotationResolver(
            type_name(cls), self._namespace_of(cls.__module__), dict(vars(cls))
        )
        annotations = resolver.evaluate(_own_annotations(cls, resolver.owner))
        for name, annotation in annotations.items():
            for target in referenced_classes(annotation, resolver):
                yield FieldReference(name=name, type=reference_to(target), line=line)

    def _code_units_of(self, cls: type) -> Iterator[CodeUnit]:
        for name, member in _members_of(cls):
            function = _function_of(member)
            if function is None:
                continue
            owner = f"{type_name(cls)}.{name}"
            module_name = function.__globals__.get("__name__", cls.__module__)
            resolver = AnnotationResolver(owner, self._namespace_of(module_name), dict(vars(cls)))
            annotations = resolver.evaluate(_own_annotations(function, owner))
            return_annotation = annotations.pop("return", None)

            parameters = [
                reference_to(target)
                for annotation in annotations.values()
                for target in referenced_classes(annotation, resolver)
            ]
            return_types = [
                reference_to(target) for target in referenced_classes(return_annotation, resolver)
            ]
            yield CodeUnit(
                name=name,
                parameters=tuple(parameters),
                return_types=tuple(return_types),
                line=function.__code__.co_firstlineno,
            )

    def _namespace_of(self, module_name: str) -> dict[str, Any]:
        """Globals of a module plus the names it imports for type checking only."""
        namespace = self._namespaces.get(module_name)
        if namespace is None:
            module = sys.modules.get(module_name)
            if module is None:
                namespace = {}
            else:
                namespace = {**type_checking_imports(module), **vars(module)}
            self._namespaces[module_name] = namespace
        return namespace

    def _direct_dependencies_of(
        self, cls: type, source_file: Optional[str], line: int
    ) -> Iterator[DirectDependency]:
        origin = type_name(cls)
        source = source_file or f"{cls.__name__}.py"

        for base in cls.__bases__:
            if base is object:
                continue
            yield DirectDependency(
                reference_to(base),
                f"Class <{origin}> extends class <{type_name(base)}> in ({source}:{line})",
            )

        metaclass = type(cls)
        if metaclass is not type:
            yield DirectDependency(
                reference_to(metaclass),
                f"Class <{origin}> has metaclass <{type_name(metaclass)}> in ({source}:{line})",
            )

        for name, value in vars(cls).items():
            if inspect.isclass(value) and not _is_nested_in(value, cls):
                yield DirectDependency(
                    reference_to(value),
                    f"Class <{origin}> references class <{type_name(value)}> "
                    f"in attribute {name} in ({source}:{line})",
                )

        for name, member in _members_of(cls):
            function = _function_of(member)
            if function is None:
                continue
            for target, target_line in _referenced_classes_in_code(function):
                yield DirectDependency(
                    reference_to(target),
                    f"Method <{origin}.{name}()> references class <{type_name(target)}> "
                    f"in ({source}:{target_line})",
                )


def _import(module_name: str) -> types.ModuleType:
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        raise ClassModelError(module_name, f"cannot import: {e}") from e


def _markers_of(package: types.ModuleType) -> dict[Marker, str]:
    markers: dict[Marker, str] = {}
    namespace = vars(package)

    display_name = namespace.get(DISPLAY_NAME_ATTRIBUTE)
    if display_name is not None:
        if not isinstance(display_name, str):
            raise ClassModelError(package.__name__, f"{DISPLAY_NAME_ATTRIBUTE} must be a string")
        markers[Marker.MODULE] = display_name

    named_interface = namespace.get(NAMED_INTERFACE_ATTRIBUTE)
    if named_interface is True:
        markers[Marker.NAMED_INTERFACE] = ""
    elif isinstance(named_interface, str):
        markers[Marker.NAMED_INTERFACE] = named_interface
    elif named_interface not in (None, False):
        raise ClassModelError(
            package.__name__, f"{NAMED_INTERFACE_ATTRIBUTE} must be a string or True"
        )

    return markers


def _classes_defined_in(module: types.ModuleType) -> Iterator[type]:
    """Top-level classes defined in ``module``, each followed by its nested classes."""
    for name, value in sorted(vars(module).items()):
        if (
            inspect.isclass(value)
            and value.__module__ == module.__name__
            and value.__qualname__ == name
        ):
            yield value
            yield from _nested_classes(value)


def _nested_classes(cls: type) -> Iterator[type]:
    for value in vars(cls).values():
        if inspect.isclass(value) and _is_nested_in(value, cls):
            yield value
            yield from _nested_classes(value)


def _is_nested_in(candidate: type, cls: type) -> bool:
    return (
        candidate.__module__ == cls.__module__
        and candidate.__qualname__ == f"{cls.__qualname__}.{candidate.__name__}"
    )


def _members_of(cls: type) -> Iterator[tuple[str, Any]]:
    return ((name, member) for name, member in vars(cls).items() if name not in _IGNORED_MEMBERS)


def _function_of(member: Any) -> Optional[types.FunctionType]:
    """The plain function behind a method, static/class method or property."""
    if isinstance(member, (staticmethod, classmethod)):
        member = member.__func__
    elif isinstance(member, property):
        member = member.fget
    if member is None:
        return None
    member = inspect.unwrap(member)
    return member if inspect.isfunction(member) else None


def _own_annotations(obj: Any, owner: str) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(obj))
    except NameError as e:
        if sys.version_info < (3, 14):
            raise ClassModelError(owner, f"cannot read annotations: {e}") from e
        # deferred annotations naming TYPE_CHECKING imports
        import annotationlib

        return dict(annotationlib.get_annotations(obj, format=annotationlib.Format.FORWARDREF))
    except Exception as e:
        raise ClassModelError(owner, f"cannot read annotations: {e}") from e


def _source_location(cls: type) -> tuple[Optional[str], int]:
    try:
        source_file = inspect.getsourcefile(cls)
        _, line = inspect.getsourcelines(cls)
    except (OSError, TypeError):
        return None, 0
    return (Path(source_file).name if source_file else None), line


def _code_objects(code: types.CodeType) -> Iterator[types.CodeType]:
    yield code
    for const in code.co_consts:
        if isinstance(const, types.CodeType):
            yield from _code_objects(const)


def _referenced_classes_in_code(function: types.FunctionType) -> Iterator[tuple[type, int]]:
    """Classes loaded as globals (or via module attributes) by a function body."""
    globalns = function.__globals__
    for code in _code_objects(function.__code__):
        current: Any = None
        line = code.co_firstlineno
        for instruction in dis.get_instructions(code):
            if instruction.positions is not None and instruction.positions.lineno:
                line = instruction.positions.lineno
            if instruction.opname in _GLOBAL_LOADS:
                current = globalns.get(instruction.argval)
            elif instruction.opname in _ATTRIBUTE_LOADS and isinstance(current, types.ModuleType):
                current = getattr(current, instruction.argval, None)
            else:
                current = None
                continue
            if inspect.isclass(current):
                yield current, line
