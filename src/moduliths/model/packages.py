"""Package tree: a read-only view of the class model grouped by package."""

from __future__ import annotations

from typing import Iterator, Optional

from .types import ClassModel, Marker, TypeReference


def is_same_or_sub_package(package: str, base: str) -> bool:
    """Whether ``package`` is ``base`` itself or one of its descendants."""
    return package == base or package.startswith(base + ".")


class PackageTree:
    """A package of the class model and everything below it.

    Queries are computed on demand from the class model; nothing is cached
    beyond the list of types at or below this package.
    """

    def __init__(self, name: str, class_model: ClassModel) -> None:
        self.name = name
        self._class_model = class_model
        self._types = sorted(
            (t for t in class_model if is_same_or_sub_package(t.package, name)),
            key=lambda t: t.name,
        )

    @classmethod
    def of(cls, name: str, class_model: ClassModel) -> PackageTree:
        return cls(name, class_model)

    @property
    def local_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def types(self) -> list[TypeReference]:
        """Types declared directly in this package (not in subpackages)."""
        return [t for t in self._types if t.package == self.name]

    def all_types(self) -> list[TypeReference]:
        """Types declared in this package or any of its subpackages."""
        return list(self._types)

    def __iter__(self) -> Iterator[TypeReference]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def contains(self, type_: TypeReference) -> bool:
        return is_same_or_sub_package(type_.package, self.name)

    def sub_packages(self) -> list[PackageTree]:
        """Direct subpackages, including ones that only carry markers."""
        prefix = self.name + "."
        names: set[str] = set()
        for package in self._class_model.packages:
            if package.startswith(prefix):
                names.add(prefix + package[len(prefix) :].split(".", 1)[0])
        return [PackageTree(name, self._class_model) for name in sorted(names)]

    def sub_packages_marked_with(self, marker: Marker) -> list[PackageTree]:
        """Direct subpackages carrying ``marker``.

        Does not descend: a marked package's own subpackages belong to it.
        """
        return [p for p in self.sub_packages() if p.marker(marker) is not None]

    def get_sub_package(self, relative: str) -> PackageTree:
        """Subpackage by dotted path relative to this one ("" = self)."""
        if not relative:
            return self
        return PackageTree(f"{self.name}.{relative}", self._class_model)

    def exists(self) -> bool:
        """Whether the class model has this package or anything below it."""
        return any(is_same_or_sub_package(p, self.name) for p in self._class_model.packages)

    def marker(self, marker: Marker) -> Optional[str]:
        """Value of ``marker`` on this package, None when absent."""
        return self._class_model.markers_of(self.name).get(marker)

    def __repr__(self) -> str:
        return f"PackageTree({self.name!r}, types={len(self._types)})"
