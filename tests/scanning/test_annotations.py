"""Tests for resolving type annotations to referenced classes."""

import collections
import decimal
import importlib
import json.decoder
import sys
import typing
from typing import Annotated, Any, Callable, Literal, Optional, Union

import pytest

from moduliths.exceptions import ClassModelError
from moduliths.scanning import AnnotationResolver, referenced_classes, type_checking_imports


class Order:
    pass


class Customer:
    pass


def _resolve(expression):
    return {"Order": Order, "Customer": Customer}.get(expression)


class TestReferencedClasses:
    def test_plain_class(self):
        assert referenced_classes(Order, _resolve) == [Order]

    def test_generic_includes_origin_and_arguments(self):
        assert referenced_classes(list[Order], _resolve) == [list, Order]
        assert referenced_classes(dict[str, Order], _resolve) == [dict, str, Order]

    def test_optional_and_union(self):
        assert referenced_classes(Optional[Order], _resolve) == [Order]
        assert referenced_classes(Union[Order, Customer], _resolve) == [Order, Customer]
        assert referenced_classes(Order | None, _resolve) == [Order]

    def test_duplicates_dropped(self):
        assert referenced_classes(tuple[Order, Order], _resolve) == [tuple, Order]

    def test_string_and_forward_ref(self):
        assert referenced_classes("Order", _resolve) == [Order]
        assert referenced_classes(list["Customer"], _resolve) == [list, Customer]
        assert referenced_classes(typing.ForwardRef("Order"), _resolve) == [Order]

    def test_callable_arguments(self):
        found = referenced_classes(Callable[[Order], Customer], _resolve)
        assert Order in found
        assert Customer in found

    def test_values_and_metadata_are_ignored(self):
        assert referenced_classes(Literal["open", "closed"], _resolve) == []
        assert referenced_classes(Annotated[Order, Customer], _resolve) == [Order]

    def test_none_and_any(self):
        assert referenced_classes(None, _resolve) == []
        assert referenced_classes(type(None), _resolve) == []
        assert referenced_classes(Any, _resolve) == []

    def test_unresolvable_string(self):
        assert referenced_classes("Missing", _resolve) == []


class TestAnnotationResolver:
    def test_evaluates_in_namespaces(self):
        resolver = AnnotationResolver("Owner", {"Order": Order}, {"Customer": Customer})
        assert resolver("Order") is Order
        assert resolver("Customer") is Customer
        assert resolver("list[Order]") == list[Order]

    def test_evaluate_mapping(self):
        resolver = AnnotationResolver("example.Owner", {"Order": Order})
        assert resolver.evaluate({"order": "Order", "orders": "list[Order]", "count": int}) == {
            "order": Order,
            "orders": list[Order],
            "count": int,
        }
        assert resolver.evaluate({}) == {}

    def test_unresolvable_raises(self):
        resolver = AnnotationResolver("example.Owner", {"Order": Order})
        with pytest.raises(ClassModelError) as exc_info:
            resolver.evaluate({"order": "Order", "ghost": "Ghost"})
        assert exc_info.value.subject == "example.Owner"
        assert "ghost" in exc_info.value.reason
        assert "'Ghost'" in exc_info.value.reason

    def test_unresolvable_nested_string_raises(self):
        resolver = AnnotationResolver("example.Owner", {})
        with pytest.raises(ClassModelError):
            referenced_classes(list["Ghost"], resolver)


class TestTypeCheckingImports:
    def test_collects_guarded_imports(self, tmp_path, monkeypatch):
        (tmp_path / "guarded_module.py").write_text(
            "from typing import TYPE_CHECKING\n"
            "import typing\n\n"
            "if TYPE_CHECKING:\n"
            "    from collections import OrderedDict\n"
            "    import json.decoder as decoding\n"
            "    import xml.dom\n"
            "    from moduliths_no_such_package import Missing\n\n"
            "if typing.TYPE_CHECKING:\n"
            "    from decimal import Decimal as Money\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        module = importlib.import_module("guarded_module")

        names = type_checking_imports(module)

        assert names["OrderedDict"] is collections.OrderedDict
        assert names["decoding"] is json.decoder
        assert names["xml"] is importlib.import_module("xml")
        assert names["Money"] is decimal.Decimal
        assert "Missing" not in names
        # nothing outside the guarded blocks
        assert "typing" not in names

    def test_module_without_source(self):
        assert type_checking_imports(sys) == {}
