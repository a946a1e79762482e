"""Tests for the element-tree arena and expression IR models."""

import pytest
from pydantic import ValidationError

from conftest import LABEL, ROOT, ROW, ROW_ROOT, ROW_TEXT, make_tree

from bindeval.model.elements import Component, Element, ElementTree
from bindeval.model.expressions import (
    BinaryExpr,
    BinaryOp,
    NumberLiteral,
    PathElementsExpr,
    PropertyReference,
)
from bindeval.model.types import BuiltinElementType, ComponentElementType


def _rect(elem_id, component=0, **kwargs):
    return Element(
        id=elem_id,
        base_type=BuiltinElementType(name="Rectangle"),
        enclosing_component=component,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

class TestElementTreeValidation:
    def test_valid_tree(self):
        tree = make_tree()
        assert len(tree.elements) == 7
        assert len(tree.components) == 2

    def test_enclosing_component_out_of_range(self):
        with pytest.raises(ValidationError, match="enclosing_component"):
            ElementTree(
                elements=[_rect("root"), _rect("stray", component=3)],
                components=[Component(id="Main", root_element=0)],
            )

    def test_child_out_of_range(self):
        with pytest.raises(ValidationError, match="child 5 out of range"):
            ElementTree(
                elements=[_rect("root", children=[5])],
                components=[Component(id="Main", root_element=0)],
            )

    def test_unknown_instantiated_component(self):
        sub = Element(
            id="sub",
            base_type=ComponentElementType(component=9),
            enclosing_component=0,
        )
        with pytest.raises(ValidationError, match="unknown component 9"):
            ElementTree(
                elements=[_rect("root"), sub],
                components=[Component(id="Main", root_element=0)],
            )

    def test_root_element_out_of_range(self):
        with pytest.raises(ValidationError, match="root_element"):
            ElementTree(
                elements=[_rect("root")],
                components=[Component(id="Main", root_element=4)],
            )

    def test_root_enclosed_by_other_component(self):
        with pytest.raises(ValidationError, match="is enclosed by component 1"):
            ElementTree(
                elements=[_rect("a"), _rect("b", component=1)],
                components=[
                    Component(id="A", root_element=1),
                    Component(id="B", root_element=1),
                ],
            )

    def test_parent_element_out_of_range(self):
        with pytest.raises(ValidationError, match="parent_element"):
            ElementTree(
                elements=[_rect("root")],
                components=[Component(id="Main", root_element=0, parent_element=3)],
            )


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

class TestElementTreeLookups:
    def test_element(self):
        assert make_tree().element(LABEL).id == "label"

    def test_element_out_of_range(self):
        with pytest.raises(IndexError):
            make_tree().element(99)

    def test_component_out_of_range(self):
        with pytest.raises(IndexError):
            make_tree().component(-1)

    def test_is_root_element(self):
        tree = make_tree()
        assert tree.is_root_element(ROOT)
        assert tree.is_root_element(ROW_ROOT)
        assert not tree.is_root_element(LABEL)

    def test_component_elements(self):
        tree = make_tree()
        assert tree.component_elements(0) == [0, 1, 2, 3, ROW]
        assert tree.component_elements(1) == [ROW_ROOT, ROW_TEXT]

    def test_repeated_component_parent(self):
        tree = make_tree()
        assert tree.component(1).parent_element == ROW
        assert tree.element(ROW).base_type == ComponentElementType(component=1)


# ---------------------------------------------------------------------------
# Expression parsing
# ---------------------------------------------------------------------------

class TestExpressionParsing:
    def test_bindings_parse_by_kind(self):
        elem = Element.model_validate({
            "id": "root",
            "base_type": {"kind": "builtin", "name": "Rectangle"},
            "enclosing_component": 0,
            "bindings": {
                "width": {
                    "kind": "binary",
                    "op": "*",
                    "lhs": {"kind": "property_reference", "element": 0, "name": "height"},
                    "rhs": {"kind": "number_literal", "value": 2},
                },
            },
        })
        width = elem.bindings["width"]
        assert isinstance(width, BinaryExpr)
        assert width.op == BinaryOp.MUL
        assert width.lhs == PropertyReference(element=0, name="height")
        assert width.rhs == NumberLiteral(value=2.0)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            Element.model_validate({
                "id": "root",
                "base_type": {"kind": "builtin", "name": "Rectangle"},
                "enclosing_component": 0,
                "bindings": {"x": {"kind": "lambda"}},
            })

    def test_path_elements_nested_bindings(self):
        expr = PathElementsExpr.model_validate({
            "elements": [
                {"element_type": "LineTo", "bindings": {"x": {"kind": "number_literal", "value": 1}}},
            ],
        })
        assert expr.elements[0].element_type == "LineTo"
        assert expr.elements[0].bindings["x"] == NumberLiteral(value=1)
