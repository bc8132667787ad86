"""Resolution of type annotations to the classes they reference."""

from __future__ import annotations

import ast
import importlib
import importlib.util
import inspect
import types
import typing
from typing import Any, Callable, Optional

from ..exceptions import ClassModelError
from ..logging_config import get_logger

logger = get_logger(__name__)

# typing constructs whose arguments are values or metadata, not types
_VALUE_ORIGINS = (typing.Literal,)


class AnnotationResolver:
    """Evaluates annotations in the namespace they were written in.

    Evaluation goes through ``typing.get_type_hints``. An annotation that
    cannot be resolved raises ClassModelError, since the dependency it names
    would otherwise be missing from the module graph.
    """

    def __init__(self, owner: str, globalns: dict[str, Any], localns: Optional[dict[str, Any]] = None):
        self.owner = owner
        self._globalns = globalns
        self._localns = localns

    def __call__(self, expression: str) -> Any:
        return self._resolve(expression, expression)

    def evaluate(self, annotations: dict[str, Any]) -> dict[str, Any]:
        """Evaluate a whole annotations mapping."""
        if not annotations:
            return {}
        try:
            return self._type_hints(annotations)
        except Exception as e:
            logger.debug(f"Resolving annotations of {self.owner} one by one: {e}")
        return {name: self._resolve(annotation, name) for name, annotation in annotations.items()}

    def _resolve(self, annotation: Any, label: str) -> Any:
        try:
            return self._type_hints({"annotation": annotation})["annotation"]
        except Exception as e:
            raise ClassModelError(
                self.owner, f"cannot resolve annotation {label}: {annotation!r} ({e})"
            ) from e

    def _type_hints(self, annotations: dict[str, Any]) -> dict[str, Any]:
        holder = type("Annotations", (), {"__annotations__": dict(annotations), "__module__": __name__})
        return typing.get_type_hints(holder, self._globalns, self._localns, include_extras=True)


def type_checking_imports(module: types.ModuleType) -> dict[str, Any]:
    """Names ``module`` imports only inside ``if TYPE_CHECKING:`` blocks.

    Such names are missing from the module namespace at runtime but are
    what its annotations refer to. Names whose import fails stay missing.
    """
    try:
        source = inspect.getsource(module)
    except (OSError, TypeError):
        return {}

    names: dict[str, Any] = {}
    for node in ast.parse(source).body:
        if not (isinstance(node, ast.If) and _is_type_checking(node.test)):
            continue
        for statement in node.body:
            for child in ast.walk(statement):
                if isinstance(child, (ast.Import, ast.ImportFrom)):
                    names.update(_imported_names(child, module))
    return names


def _is_type_checking(test: ast.expr) -> bool:
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    return isinstance(test, ast.Attribute) and test.attr == "TYPE_CHECKING"


def _imported_names(node: ast.Import | ast.ImportFrom, module: types.ModuleType) -> dict[str, Any]:
    names: dict[str, Any] = {}
    if isinstance(node, ast.Import):
        for alias in node.names:
            imported = _import_quietly(alias.name, module)
            if imported is None:
                continue
            if alias.asname:
                names[alias.asname] = imported
            else:
                top = alias.name.partition(".")[0]
                names[top] = importlib.import_module(top)
        return names

    source = "." * node.level + (node.module or "")
    try:
        base = importlib.util.resolve_name(source, module.__package__) if node.level else source
    except (ImportError, ValueError) as e:
        logger.debug(f"Ignoring TYPE_CHECKING import {source!r} in {module.__name__}: {e}")
        return names
    package = _import_quietly(base, module)
    if package is None:
        return names
    for alias in node.names:
        if alias.name == "*":
            continue
        value = getattr(package, alias.name, None)
        if value is None:
            value = _import_quietly(f"{base}.{alias.name}", module)
        if value is not None:
            names[alias.asname or alias.name] = value
    return names


def _import_quietly(name: str, module: types.ModuleType) -> Optional[types.ModuleType]:
    try:
        return importlib.import_module(name)
    except ImportError as e:
        logger.debug(f"Ignoring TYPE_CHECKING import {name!r} in {module.__name__}: {e}")
        return None


def referenced_classes(annotation: Any, resolve: Callable[[str], Any]) -> list[type]:
    """Every class named by ``annotation``, generics and unions expanded.

    ``list[Order]`` yields ``list`` and ``Order``; ``Optional[Order]`` yields
    ``Order``. Order of first appearance is kept, duplicates dropped.
    """
    found: list[type] = []

    def add(cls: type) -> None:
        if cls not in found:
            found.append(cls)

    def visit(node: Any) -> None:
        if isinstance(node, str):
            node = resolve(node)
        elif isinstance(node, typing.ForwardRef):
            node = resolve(node.__forward_arg__)
        if node is None or node is type(None) or node is typing.Any:
            return
        if isinstance(node, (list, tuple)):
            # Callable[[A, B], C] argument lists
            for item in node:
                visit(item)
            return

        origin = typing.get_origin(node)
        if origin is not None:
            if origin in _VALUE_ORIGINS:
                return
            args = typing.get_args(node)
            if origin is typing.Annotated:
                visit(args[0])
                return
            if isinstance(origin, type) and origin is not types.UnionType:
                add(origin)
            for arg in args:
                visit(arg)
            return

        if isinstance(node, type):
            add(node)

    visit(annotation)
    return found
