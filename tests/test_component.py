"""Tests for component descriptors, slot layout and built-in item tables."""

import pytest

from conftest import MAIN_COMPONENT, ROW_COMPONENT, build_runtime, make_tree

from bindeval.model.elements import Component, Element, ElementTree
from bindeval.model.types import BuiltinElementType, ValueType
from bindeval.runtime import (
    BUILTIN_ITEMS,
    ComponentInstance,
    NumberValue,
    Property,
    Signal,
    StringValue,
    VOID,
    build_component_description,
)
from bindeval.runtime._component import default_value
from bindeval.runtime._native import Color, NativeType


# ---------------------------------------------------------------------------
# Slot layout
# ---------------------------------------------------------------------------

class TestLayout:
    def test_custom_properties_first_in_order(self):
        main = build_runtime().main
        offsets = {name: p.offset for name, p in main.custom_properties.items()}
        assert offsets == {"count": 0, "title": 1, "flag": 2, "data": 3}

    def test_custom_signals_after_properties(self):
        assert build_runtime().main.custom_signals == {"activated": 4}

    def test_items_in_element_order(self):
        main = build_runtime().main
        assert list(main.items) == ["root", "label", "touch", "shape"]
        assert main.items["root"].offset == 5
        assert main.items["label"].offset == 10
        assert main.items["touch"].offset == 16
        assert main.items["shape"].offset == 24
        assert main.slot_count == 32

    def test_component_element_is_not_an_item(self):
        assert "row" not in build_runtime().main.items

    def test_repeated_injects_index_and_model_data(self):
        row = build_runtime().row
        assert list(row.custom_properties) == ["index", "model_data", "label"]
        assert row.custom_properties["index"].value_type == ValueType.INT32
        assert row.custom_properties["model_data"].value_type is None
        assert row.slot_count == 3 + 5 + 6

    def test_id_and_repr(self):
        rt = build_runtime()
        assert rt.main.id == "Main"
        assert rt.row.id == "Row"
        assert repr(rt.main) == "ComponentDescription('Main', slots=32)"


class TestLayoutErrors:
    def test_unknown_component(self):
        with pytest.raises(IndexError):
            build_component_description(make_tree(), 5)

    def test_duplicate_signal(self):
        with pytest.raises(ValueError, match="Duplicate custom signal 'go'"):
            build_component_description(make_tree(), MAIN_COMPONENT, custom_signals=["go", "go"])

    def test_unknown_builtin(self):
        tree = ElementTree(
            elements=[Element(
                id="root",
                base_type=BuiltinElementType(name="Spinner"),
                enclosing_component=0,
            )],
            components=[Component(id="Main", root_element=0)],
        )
        with pytest.raises(ValueError, match="unknown built-in type 'Spinner'"):
            build_component_description(tree, 0)

    def test_duplicate_element_id(self):
        tree = ElementTree(
            elements=[
                Element(id="a", base_type=BuiltinElementType(name="Text"), enclosing_component=0),
                Element(id="a", base_type=BuiltinElementType(name="Text"), enclosing_component=0),
            ],
            components=[Component(id="Main", root_element=0)],
        )
        with pytest.raises(ValueError, match="Duplicate element id 'a'"):
            build_component_description(tree, 0)


# ---------------------------------------------------------------------------
# Instances
# ---------------------------------------------------------------------------

class TestInstance:
    def test_slots_allocated(self):
        main = build_runtime().main
        instance = ComponentInstance(main)
        assert len(instance.slots) == main.slot_count
        assert isinstance(instance.slots[0], Property)
        assert isinstance(instance.slots[4], Signal)
        # TouchArea.clicked follows its seven properties
        assert isinstance(instance.slots[16 + 7], Signal)

    def test_instances_do_not_share_slots(self):
        main = build_runtime().main
        a, b = ComponentInstance(main), ComponentInstance(main)
        a.slots[1].set(StringValue(value="a"))
        assert b.slots[1].get(None) == StringValue(value="")

    def test_description_is_type_tag(self):
        rt = build_runtime()
        assert rt.ctx.component.description is rt.main
        assert repr(rt.ctx.component) == "ComponentInstance('Main')"

    def test_item_defaults(self):
        main = build_runtime().main
        instance = ComponentInstance(main)
        label = main.items["label"]
        text_offset = label.rtti.properties["text"].offset
        assert instance.slots[label.offset + text_offset].get(None) == ""


class TestDefaultValue:
    def test_numeric(self):
        assert default_value(ValueType.INT32) == NumberValue(value=0)
        assert default_value(ValueType.DURATION) == NumberValue(value=0)

    def test_untyped_is_void(self):
        assert default_value(None) == VOID


# ---------------------------------------------------------------------------
# Built-in items
# ---------------------------------------------------------------------------

class TestBuiltinItems:
    def test_registry(self):
        assert set(BUILTIN_ITEMS) >= {"Rectangle", "Text", "TouchArea", "Path", "Image"}

    def test_rectangle_table(self):
        rtti = BUILTIN_ITEMS["Rectangle"].rtti()
        assert list(rtti.properties) == ["x", "y", "width", "height", "color"]
        assert rtti.properties["color"].native_type == NativeType.COLOR
        assert rtti.signals == {}
        assert rtti.slot_count == 5

    def test_touch_area_signal_offset(self):
        rtti = BUILTIN_ITEMS["TouchArea"].rtti()
        assert rtti.signals == {"clicked": 7}
        assert rtti.slot_count == 8

    def test_checked_flag_reaches_accessors(self):
        rtti = BUILTIN_ITEMS["Path"].rtti(checked=True)
        assert all(p.checked for p in rtti.properties.values())

    def test_allocate_defaults(self):
        slots = BUILTIN_ITEMS["Rectangle"].rtti().allocate()
        assert slots[4].get(None) == Color()
        assert slots[0].get(None) == 0.0

    def test_row_component_index(self):
        rt = build_runtime()
        assert rt.row.original == ROW_COMPONENT
