"""Tests for named interface discovery and declaration."""

import pytest

from moduliths.exceptions import DuplicateNamedInterfaceError, InvalidConfigError
from moduliths.model import (
    UNNAMED,
    ClassModel,
    Marker,
    NamedInterface,
    NamedInterfaceDeclaration,
    NamedInterfaces,
    PackageTree,
)


def _names(types):
    return sorted(t.name for t in types)


class TestNamedInterface:
    def test_unnamed_exposes_only_direct_types(self, sample_model):
        base = PackageTree.of("example.module_a", sample_model)
        interface = NamedInterface.unnamed(base)
        assert interface.name == UNNAMED
        assert interface.is_unnamed
        assert _names(interface.exposed_types) == ["example.module_a.ServiceA"]

    def test_marked_package_uses_marker_value(self, sample_model):
        api = PackageTree.of("example.complex.api", sample_model)
        interface = NamedInterface.of(api)
        assert interface.name == "API"
        assert _names(interface.exposed_types) == ["example.complex.api.ComplexApiComponent"]

    def test_marker_without_value_uses_local_name(self, make_type):
        model = ClassModel(
            [make_type("example.orders.events.OrderPlaced")],
            {"example.orders.events": {Marker.NAMED_INTERFACE: ""}},
        )
        interface = NamedInterface.of(PackageTree.of("example.orders.events", model))
        assert interface.name == "events"

    def test_marked_package_exposes_its_subtree(self, make_type):
        model = ClassModel(
            [
                make_type("example.orders.api.OrderApi"),
                make_type("example.orders.api.dto.OrderDto"),
            ],
            {"example.orders.api": {Marker.NAMED_INTERFACE: "API"}},
        )
        interface = NamedInterface.of(PackageTree.of("example.orders.api", model))
        assert _names(interface.exposed_types) == [
            "example.orders.api.OrderApi",
            "example.orders.api.dto.OrderDto",
        ]

    def test_declared_top_level_and_subpackage(self, sample_model):
        base = PackageTree.of("example.complex", sample_model)
        interface = NamedInterface.declared(
            base, NamedInterfaceDeclaration("Public", packages=("", "api"))
        )
        assert _names(interface.exposed_types) == [
            "example.complex.ComplexImpl",
            "example.complex.api.ComplexApiComponent",
        ]

    def test_declared_unknown_package_rejected(self, sample_model):
        base = PackageTree.of("example.complex", sample_model)
        with pytest.raises(InvalidConfigError) as exc_info:
            NamedInterface.declared(base, NamedInterfaceDeclaration("API", ("apii",)), module="complex")
        assert exc_info.value.key == "modules.complex.named_interfaces"
        assert exc_info.value.value == "apii"
        assert "example.complex.apii" in exc_info.value.reason

    def test_declared_nested_package(self, make_type):
        model = ClassModel([make_type("shop.orders.web.api.OrderResource")])
        base = PackageTree.of("shop.orders", model)
        interface = NamedInterface.declared(base, NamedInterfaceDeclaration("Web", ("web",)))
        assert _names(interface.exposed_types) == ["shop.orders.web.api.OrderResource"]

    def test_contains(self, sample_model, make_type):
        interface = NamedInterface.unnamed(PackageTree.of("example.module_a", sample_model))
        assert interface.contains(make_type("example.module_a.ServiceA"))
        assert not interface.contains(make_type("example.module_a.internal.InternalRepositoryA"))


class TestNamedInterfaces:
    """Test the collection of named interfaces of one module."""

    def test_discover_falls_back_to_unnamed(self, sample_model):
        interfaces = NamedInterfaces.discover(PackageTree.of("example.module_a", sample_model))
        assert interfaces.names == [UNNAMED]
        assert not interfaces.has_explicit_interfaces()

    def test_discover_marked_subpackages(self, sample_model):
        interfaces = NamedInterfaces.discover(PackageTree.of("example.complex", sample_model))
        assert interfaces.names == ["API", "SPI"]
        assert interfaces.has_explicit_interfaces()

    def test_unmarked_types_are_internal_when_interfaces_are_marked(self, sample_model, make_type):
        interfaces = NamedInterfaces.discover(PackageTree.of("example.complex", sample_model))
        assert interfaces.exposes(make_type("example.complex.api.ComplexApiComponent"))
        assert interfaces.exposes(make_type("example.complex.spi.ComplexSpiComponent"))
        # Neither the top level nor unmarked subpackages are exposed
        assert not interfaces.exposes(make_type("example.complex.ComplexImpl"))
        assert not interfaces.exposes(make_type("example.complex.internal.ComplexInternal"))

    def test_declared_without_declarations_discovers(self, sample_model):
        base = PackageTree.of("example.complex", sample_model)
        assert NamedInterfaces.declared(base, ()).names == ["API", "SPI"]

    def test_declared_replaces_markers(self, sample_model):
        base = PackageTree.of("example.complex", sample_model)
        interfaces = NamedInterfaces.declared(
            base, [NamedInterfaceDeclaration("Internal", packages=("internal",))]
        )
        assert interfaces.names == ["Internal"]
        assert len(interfaces) == 1
        assert interfaces[0].name == "Internal"

    def test_duplicate_names_rejected(self, sample_model):
        base = PackageTree.of("example.complex", sample_model)
        declarations = [
            NamedInterfaceDeclaration("API", packages=("api",)),
            NamedInterfaceDeclaration("API", packages=("spi",)),
        ]
        with pytest.raises(DuplicateNamedInterfaceError) as exc_info:
            NamedInterfaces.declared(base, declarations, module="complex")
        assert exc_info.value.module == "complex"
        assert exc_info.value.name == "API"

    def test_empty_is_rejected(self):
        with pytest.raises(ValueError):
            NamedInterfaces([])

    def test_get_by_name(self, sample_model):
        interfaces = NamedInterfaces.discover(PackageTree.of("example.complex", sample_model))
        assert interfaces.get_by_name("SPI").name == "SPI"
        assert interfaces.get_by_name("missing") is None

    def test_iteration_order_is_stable(self, sample_model):
        interfaces = NamedInterfaces.discover(PackageTree.of("example.complex", sample_model))
        assert [i.name for i in interfaces] == ["API", "SPI"]
