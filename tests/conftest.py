"""Shared fixtures for moduliths tests.

Two sample applications mirror each other:

- an in-memory ClassModel rooted at ``example`` (model tests)
- the importable package ``tests/fixtures/acme`` (importer, API and CLI tests)

Both contain the modules ``module_a`` (with an internal subpackage),
``module_b`` (uses module_a's public service), ``module_c`` (display name,
uses module_b), ``complex`` (API and SPI named interfaces) and ``invalid``
(depends on internals of module_a and complex).
"""

import os
from pathlib import Path

import pytest

from moduliths.model import (
    ClassModel,
    CodeUnit,
    DirectDependency,
    FieldReference,
    Marker,
    Modules,
    TypeReference,
)
from moduliths.scanning import ClassModelImporter

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _make_type(name, fields=(), code_units=(), direct=(), nested=False):
    """TypeReference whose package is everything before the last dot."""
    package = name.rsplit(".", 1)[0]
    if nested:
        package = package.rsplit(".", 1)[0]
    return TypeReference(
        name=name,
        package=package,
        source_file=f"{name.rsplit('.', 1)[-1]}.py",
        line=1,
        nested=nested,
        fields=tuple(fields),
        code_units=tuple(code_units),
        direct_dependencies=tuple(direct),
    )


def _ref(name):
    return _make_type(name)


# Bare references, usable as dependency targets
SERVICE_A = "example.module_a.ServiceA"
INTERNAL_REPOSITORY = "example.module_a.internal.InternalRepositoryA"
SERVICE_B = "example.module_b.ServiceB"
COMPONENT_C = "example.module_c.ComponentC"
COMPLEX_API = "example.complex.api.ComplexApiComponent"
COMPLEX_SPI = "example.complex.spi.ComplexSpiComponent"
COMPLEX_INTERNAL = "example.complex.internal.ComplexInternal"
COMPLEX_IMPL = "example.complex.ComplexImpl"
INVALID_COMPONENT = "example.invalid.InvalidComponent"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files and MODULITHS_* variables out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("MODULITHS_"):
            monkeypatch.delenv(key)
    return tmp_path


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def sample_model():
    """In-memory class model of the ``example`` application."""
    types = [
        _make_type("example.Application"),
        _make_type(
            SERVICE_A,
            code_units=[CodeUnit("__init__", parameters=(_ref(INTERNAL_REPOSITORY),), line=5)],
        ),
        _make_type(INTERNAL_REPOSITORY),
        _make_type(
            SERVICE_B,
            fields=[FieldReference("service_a", _ref(SERVICE_A), line=9)],
            code_units=[
                CodeUnit("__init__", parameters=(_ref(SERVICE_A),), line=14),
                CodeUnit("lookup", return_types=(_ref(SERVICE_A),), line=17),
            ],
        ),
        _make_type("example.module_b.ServiceB.Settings", nested=True),
        _make_type(
            COMPONENT_C,
            direct=[
                DirectDependency(
                    _ref(SERVICE_B),
                    f"Method <{COMPONENT_C}.create()> references class <{SERVICE_B}> in (ComponentC.py:6)",
                )
            ],
        ),
        _make_type(COMPLEX_API),
        _make_type(COMPLEX_SPI),
        _make_type(COMPLEX_INTERNAL),
        _make_type(
            COMPLEX_IMPL,
            fields=[FieldReference("internal", _ref(COMPLEX_INTERNAL))],
            direct=[
                DirectDependency(
                    _ref(COMPLEX_API),
                    f"Class <{COMPLEX_IMPL}> extends class <{COMPLEX_API}> in (ComplexImpl.py:5)",
                )
            ],
        ),
        _make_type(
            INVALID_COMPONENT,
            fields=[
                FieldReference("repository", _ref(INTERNAL_REPOSITORY), line=9),
                FieldReference("api", _ref(COMPLEX_API), line=10),
                FieldReference("created", TypeReference("datetime.datetime", "datetime")),
            ],
            code_units=[CodeUnit("internal", return_types=(_ref(COMPLEX_INTERNAL),), line=12)],
        ),
    ]
    markers = {
        "example.module_c": {Marker.MODULE: "MyModule C"},
        "example.complex.api": {Marker.NAMED_INTERFACE: "API"},
        "example.complex.spi": {Marker.NAMED_INTERFACE: "SPI"},
    }
    return ClassModel(types, markers)


@pytest.fixture
def sample_modules(sample_model):
    return Modules.of("example", sample_model)


@pytest.fixture
def cyclic_modules():
    """Three modules depending on each other in a ring: x -> y -> z -> x."""
    names = ["example.x.X", "example.y.Y", "example.z.Z"]
    types = [
        _make_type(
            name,
            fields=[FieldReference("next", _ref(names[(i + 1) % len(names)]))],
        )
        for i, name in enumerate(names)
    ]
    return Modules.of("example", ClassModel(types))


@pytest.fixture
def mutual_modules():
    """Two modules depending on each other: a -> b -> a."""
    types = [
        _make_type("example.a.A", fields=[FieldReference("b", _ref("example.b.B"))]),
        _make_type("example.b.B", fields=[FieldReference("a", _ref("example.a.A"))]),
    ]
    return Modules.of("example", ClassModel(types))


@pytest.fixture(scope="session")
def acme_model():
    """Class model imported from the real ``acme`` fixture package."""
    importer = ClassModelImporter(
        exclude_patterns=["*.tests", "*.tests.*"],
        source_paths=[FIXTURES_DIR],
    )
    return importer.import_package("acme")


@pytest.fixture(scope="session")
def acme_modules(acme_model):
    return Modules.of("acme", acme_model)


@pytest.fixture
def make_type():
    """Factory for in-memory TypeReferences (package = name up to the last dot)."""
    return _make_type
