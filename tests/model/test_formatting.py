"""Tests for module summaries and JSON-ready rendering."""

from moduliths.model import DependencyType, Violation
from moduliths.model.formatting import (
    format_location,
    format_type,
    module_to_dict,
    violation_to_dict,
)


class TestFormatHelpers:
    def test_format_type_relative_to_base(self, make_type):
        type_ = make_type("example.complex.api.ComplexApiComponent")
        assert format_type(type_, "example.complex") == "api.ComplexApiComponent"
        assert format_type(type_, "example.other") == "example.complex.api.ComplexApiComponent"
        assert format_type(type_) == "example.complex.api.ComplexApiComponent"

    def test_location_falls_back_to_simple_name(self, make_type):
        type_ = make_type("example.module_a.ServiceA")
        bare = type(type_)(name=type_.name, package=type_.package)
        assert format_location(type_, 4) == "(ServiceA.py:4)"
        assert format_location(bare) == "(ServiceA.py:0)"


class TestModuleSummary:
    def test_module_with_display_name(self, sample_modules):
        summary = sample_modules.get_module_by_name("module_c").summary()
        assert summary == (
            "## MyModule C ##\n"
            "> Logical name: module_c\n"
            "> Base package: example.module_c\n"
            "> Components:\n"
            "  ComponentC\n"
        )

    def test_module_with_named_interfaces(self, sample_modules):
        summary = sample_modules.get_module_by_name("complex").summary()
        assert summary == (
            "## complex ##\n"
            "> Logical name: complex\n"
            "> Base package: example.complex\n"
            "> Named interfaces:\n"
            "  + API - Public types: api.ComplexApiComponent\n"
            "  + SPI - Public types: spi.ComplexSpiComponent\n"
            "> Components:\n"
            "  ComplexImpl\n"
            "  api.ComplexApiComponent\n"
            "  internal.ComplexInternal\n"
            "  spi.ComplexSpiComponent\n"
        )

    def test_unnamed_interface_is_not_listed(self, sample_modules):
        summary = sample_modules.get_module_by_name("module_a").summary()
        assert "Named interfaces" not in summary
        assert "  internal.InternalRepositoryA\n" in summary


class TestDictRendering:
    def test_module_to_dict(self, sample_modules):
        data = module_to_dict(sample_modules.get_module_by_name("complex"))
        assert data["name"] == "complex"
        assert data["base_package"] == "example.complex"
        assert data["named_interfaces"] == [
            {"name": "API", "exposed_types": ["example.complex.api.ComplexApiComponent"]},
            {"name": "SPI", "exposed_types": ["example.complex.spi.ComplexSpiComponent"]},
        ]
        assert data["components"][0] == "example.complex.ComplexImpl"

    def test_violation_to_dict(self):
        violation = Violation("invalid", "module_a", "example.module_a.internal.Repo", "d", DependencyType.RETURN_TYPE)
        assert violation_to_dict(violation) == {
            "origin_module": "invalid",
            "target_module": "module_a",
            "type": "example.module_a.internal.Repo",
            "kind": "return_type",
            "description": "d",
        }
