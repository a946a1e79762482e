"""bindeval runtime — evaluation of binding expressions over live components.

Entry point::

    from bindeval.runtime import build_component_description, instantiate, evaluate

    desc = build_component_description(tree, 0, custom_properties={"count": ValueType.INT32})
    ctx = instantiate(desc)
    evaluate(expr, desc, ctx)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bindeval.model.types import ComponentElementType

from ._accessors import NativeProperty, PropertyAccessor, ValueProperty
from ._component import (
    REPEATER_INDEX,
    REPEATER_MODEL_DATA,
    ComponentDescription,
    ComponentInstance,
    CustomProperty,
    ItemInfo,
    ItemRef,
    build_component_description,
)
from ._context import EvaluationContext, Resolution, resolve_element
from ._errors import (
    ContextChainError,
    EvaluationError,
    InvalidAssignmentTargetError,
    InvalidExpressionError,
    NotASignalError,
    PropertyTypeError,
    UnimplementedError,
    UnresolvedReferenceError,
    UnsupportedOperationError,
)
from ._evaluator import ExpressionEvaluator, bind_property, evaluate
from ._items import BUILTIN_ITEMS, ItemRtti
from ._native import (
    AbsoluteFilePath,
    Color,
    EmbeddedData,
    NativeType,
    NoResource,
    PathArcTo,
    PathLineTo,
)
from ._properties import Property, PropertyAnimation, Signal
from ._settings import EvaluatorSettings
from ._structs import PATH_ELEMENT_SHAPES, convert_path_element, new_struct_with_bindings
from ._values import (
    VOID,
    ArrayValue,
    BoolValue,
    ColorValue,
    ConversionError,
    NumberValue,
    ObjectValue,
    PathElementsValue,
    ResourceValue,
    StringValue,
    Value,
    VoidValue,
    to_value,
    value_from,
    value_into,
)


def instantiate(
    description: ComponentDescription,
    parent_context: EvaluationContext | None = None,
    *,
    settings: EvaluatorSettings | None = None,
) -> EvaluationContext:
    """Create a component instance and install its element bindings.

    Parameters
    ----------
    description
        Layout of the component to instantiate.
    parent_context
        Context of the enclosing instance, for sub-components and
        repeater instantiations.
    settings
        Settings of the evaluator used by the installed bindings.

    Returns
    -------
    EvaluationContext
        Context wrapping the new instance.

    Raises
    ------
    UnimplementedError
        If an element that instantiates a sub-component carries bindings.
        Sub-component properties are set through the sub-component's own
        root element.
    """
    instance = ComponentInstance(description)
    context = EvaluationContext(instance, parent_context)
    evaluator = ExpressionEvaluator(settings)

    tree = description.tree
    for index in tree.component_elements(description.original):
        elem = tree.elements[index]
        if isinstance(elem.base_type, ComponentElementType) and elem.bindings:
            raise UnimplementedError(
                "Bindings on a sub-component element are not supported",
                element=elem.id,
                name=next(iter(elem.bindings)),
            )
        for name, expr in elem.bindings.items():
            evaluator.bind(index, name, expr, context)
    return context


def instantiate_repeater(
    description: ComponentDescription,
    parent_context: EvaluationContext,
    model: Iterable[Any],
    *,
    settings: EvaluatorSettings | None = None,
) -> list[EvaluationContext]:
    """One instantiation of a repeated component per model entry.

    Each instance gets its position as ``index`` and the entry, converted
    with :func:`to_value`, as ``model_data``.
    """
    missing = {REPEATER_INDEX, REPEATER_MODEL_DATA} - description.custom_properties.keys()
    if missing:
        raise TypeError(
            f"Component {description.id!r} is not repeated "
            f"(missing {', '.join(sorted(missing))})"
        )

    index_prop = description.custom_properties[REPEATER_INDEX]
    model_prop = description.custom_properties[REPEATER_MODEL_DATA]
    contexts = []
    for i, entry in enumerate(model):
        context = instantiate(description, parent_context, settings=settings)
        instance = context.component
        index_prop.prop.set(ItemRef(instance, index_prop.offset), NumberValue(value=i))
        model_prop.prop.set(ItemRef(instance, model_prop.offset), to_value(entry))
        contexts.append(context)
    return contexts


__all__ = [
    "AbsoluteFilePath",
    "ArrayValue",
    "BUILTIN_ITEMS",
    "BoolValue",
    "Color",
    "ColorValue",
    "ComponentDescription",
    "ComponentInstance",
    "ContextChainError",
    "ConversionError",
    "CustomProperty",
    "EmbeddedData",
    "EvaluationContext",
    "EvaluationError",
    "EvaluatorSettings",
    "ExpressionEvaluator",
    "InvalidAssignmentTargetError",
    "InvalidExpressionError",
    "ItemInfo",
    "ItemRef",
    "ItemRtti",
    "NativeProperty",
    "NativeType",
    "NoResource",
    "NotASignalError",
    "NumberValue",
    "ObjectValue",
    "PATH_ELEMENT_SHAPES",
    "PathArcTo",
    "PathElementsValue",
    "PathLineTo",
    "Property",
    "PropertyAccessor",
    "PropertyAnimation",
    "PropertyTypeError",
    "Resolution",
    "ResourceValue",
    "Signal",
    "StringValue",
    "UnimplementedError",
    "UnresolvedReferenceError",
    "UnsupportedOperationError",
    "VOID",
    "Value",
    "ValueProperty",
    "VoidValue",
    "bind_property",
    "build_component_description",
    "convert_path_element",
    "evaluate",
    "instantiate",
    "instantiate_repeater",
    "new_struct_with_bindings",
    "resolve_element",
    "to_value",
    "value_from",
    "value_into",
]
