"""Shared test helpers for the bindeval test suite.

The standard tree has two components::

    Main (component 0)                 Row (component 1, repeated by "row")
      root: Rectangle                    row_root: Rectangle
        label: Text                        row_text: Text
        touch: TouchArea
        shape: Path
        row: Row
"""

from typing import NamedTuple

from bindeval.model.elements import Component, Element, ElementTree
from bindeval.model.expressions import (
    BoolLiteral,
    NumberLiteral,
    PropertyReference,
    SignalReference,
    StringLiteral,
)
from bindeval.model.types import BuiltinElementType, ComponentElementType, ValueType
from bindeval.runtime import (
    ComponentDescription,
    EvaluationContext,
    ExpressionEvaluator,
    ItemRef,
    build_component_description,
    instantiate,
)

# Element indices
ROOT, LABEL, TOUCH, SHAPE, ROW, ROW_ROOT, ROW_TEXT = range(7)

# Component indices
MAIN_COMPONENT, ROW_COMPONENT = 0, 1

MAIN_PROPERTIES = {
    "count": ValueType.INT32,
    "title": ValueType.STRING,
    "flag": ValueType.BOOL,
    "data": ValueType.OBJECT,
}


def make_tree(bindings=None) -> ElementTree:
    """The standard two-component tree, with optional bindings per element index."""
    bindings = bindings or {}
    specs = [
        ("root", BuiltinElementType(name="Rectangle"), MAIN_COMPONENT, [LABEL, TOUCH, SHAPE, ROW]),
        ("label", BuiltinElementType(name="Text"), MAIN_COMPONENT, []),
        ("touch", BuiltinElementType(name="TouchArea"), MAIN_COMPONENT, []),
        ("shape", BuiltinElementType(name="Path"), MAIN_COMPONENT, []),
        ("row", ComponentElementType(component=ROW_COMPONENT), MAIN_COMPONENT, []),
        ("row_root", BuiltinElementType(name="Rectangle"), ROW_COMPONENT, [ROW_TEXT]),
        ("row_text", BuiltinElementType(name="Text"), ROW_COMPONENT, []),
    ]
    elements = [
        Element(
            id=elem_id,
            base_type=base_type,
            enclosing_component=component,
            children=children,
            bindings=bindings.get(i, {}),
        )
        for i, (elem_id, base_type, component, children) in enumerate(specs)
    ]
    components = [
        Component(id="Main", root_element=ROOT),
        Component(id="Row", root_element=ROW_ROOT, parent_element=ROW),
    ]
    return ElementTree(elements=elements, components=components)


class Runtime(NamedTuple):
    tree: ElementTree
    main: ComponentDescription
    row: ComponentDescription
    ctx: EvaluationContext


def build_runtime(bindings=None, **desc_kwargs) -> Runtime:
    """Descriptions for both components plus an instantiated Main."""
    tree = make_tree(bindings)
    main = build_component_description(
        tree,
        MAIN_COMPONENT,
        custom_properties=MAIN_PROPERTIES,
        custom_signals=["activated"],
        **desc_kwargs,
    )
    row = build_component_description(
        tree,
        ROW_COMPONENT,
        custom_properties={"label": ValueType.STRING},
        repeated=True,
        **desc_kwargs,
    )
    return Runtime(tree, main, row, instantiate(main))


def ev(expr, ctx: EvaluationContext):
    """Evaluate *expr* in the component of *ctx*."""
    return ExpressionEvaluator().evaluate(expr, ctx.component.description, ctx)


def set_custom(ctx: EvaluationContext, name: str, value) -> None:
    """Write a custom property of the instance of *ctx* directly."""
    custom = ctx.component.description.custom_properties[name]
    custom.prop.set(ItemRef(ctx.component, custom.offset), value)


def get_custom(ctx: EvaluationContext, name: str):
    custom = ctx.component.description.custom_properties[name]
    return custom.prop.get(ItemRef(ctx.component, custom.offset), ctx)


def item_ref(ctx: EvaluationContext, element_id: str) -> ItemRef:
    info = ctx.component.description.items[element_id]
    return info.item_from_component(ctx.component)


def prop(element: int, name: str) -> PropertyReference:
    return PropertyReference(element=element, name=name)


def sig(element: int, name: str) -> SignalReference:
    return SignalReference(element=element, name=name)


def num(value: float) -> NumberLiteral:
    return NumberLiteral(value=value)


def string(value: str) -> StringLiteral:
    return StringLiteral(value=value)


def boolean(value: bool) -> BoolLiteral:
    return BoolLiteral(value=value)
