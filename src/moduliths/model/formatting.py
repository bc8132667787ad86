"""Human-readable rendering of types, dependency provenance and modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Sequence

from .types import CodeUnit, FieldReference, TypeReference

if TYPE_CHECKING:
    from .module import Module
    from .violations import Violation


def format_location(type_: TypeReference, line: int = 0) -> str:
    """Source location of a type, e.g. ``(service.py:12)``."""
    source = type_.source_file or f"{type_.simple_name}.py"
    return f"({source}:{line})"


def format_method(owner: str, name: str, parameters: Sequence[TypeReference]) -> str:
    params = ", ".join(p.name for p in parameters)
    return f"Method <{owner}.{name}({params})>"


def format_type(type_: TypeReference, base_package: str = "") -> str:
    """Type name relative to ``base_package`` when it lives below it."""
    if base_package and type_.name.startswith(base_package + "."):
        return type_.name[len(base_package) + 1 :]
    return type_.name


def describe_parameter(owner: TypeReference, code_unit: CodeUnit, parameter: TypeReference) -> str:
    return _describe_declaration(owner, code_unit, f"parameter {parameter.name}")


def describe_return_type(owner: TypeReference, code_unit: CodeUnit, return_type: TypeReference) -> str:
    return _describe_declaration(owner, code_unit, f"return type {return_type.name}")


def describe_field(owner: TypeReference, field: FieldReference) -> str:
    return (
        f"field {owner.name}.{field.name} is of type {field.type.name} "
        f"in {format_location(owner, field.line)}"
    )


def _describe_declaration(owner: TypeReference, code_unit: CodeUnit, declaration: str) -> str:
    method = format_method(owner.name, code_unit.name, code_unit.parameters)
    return f"{method} declares {declaration} in {format_location(owner, code_unit.line)}"


def format_types(types: Iterable[TypeReference], base_package: str = "") -> str:
    return ", ".join(format_type(t, base_package) for t in sorted(types, key=lambda t: t.name))


def module_summary(module: Module) -> str:
    """Plain-text summary of a module, suitable for documentation."""
    base = module.base_package.name
    lines = [
        f"## {module.display_name} ##",
        f"> Logical name: {module.name}",
        f"> Base package: {base}",
    ]

    if module.named_interfaces.has_explicit_interfaces():
        lines.append("> Named interfaces:")
        for interface in module.named_interfaces:
            lines.append(
                f"  + {interface.name} - Public types: "
                f"{format_types(interface.exposed_types, base)}"
            )

    components = module.get_components()
    if not components:
        lines.append("> Components: none")
    else:
        lines.append("> Components:")
        lines.extend(f"  {format_type(c, base)}" for c in components)

    return "\n".join(lines) + "\n"


def module_to_dict(module: Module) -> dict[str, Any]:
    """Machine-readable module summary."""
    return {
        "name": module.name,
        "display_name": module.display_name,
        "base_package": module.base_package.name,
        "named_interfaces": [
            {
                "name": interface.name,
                "exposed_types": sorted(t.name for t in interface.exposed_types),
            }
            for interface in module.named_interfaces
        ],
        "components": [c.name for c in module.get_components()],
    }


def violation_to_dict(violation: Violation) -> dict[str, str]:
    return {
        "origin_module": violation.origin_module,
        "target_module": violation.target_module,
        "type": violation.type_name,
        "kind": violation.kind.name.lower(),
        "description": violation.description,
    }
