"""Building built-in structs (path segments) from binding maps."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, TypeVar

from bindeval.model.expressions import Expression, PathElementDescription

from ._errors import PropertyTypeError, UnsupportedOperationError
from ._native import BuiltinStruct, PathArcTo, PathLineTo
from ._values import ConversionError

if TYPE_CHECKING:
    from ._component import ComponentDescription
    from ._context import EvaluationContext
    from ._evaluator import ExpressionEvaluator

S = TypeVar("S", bound=BuiltinStruct)

#: Path element class names, as written in path literals.
PATH_ELEMENT_SHAPES: dict[str, type[BuiltinStruct]] = {
    "LineTo": PathLineTo,
    "ArcTo": PathArcTo,
}


def new_struct_with_bindings(
    shape: type[S],
    bindings: Mapping[str, Expression],
    component_type: ComponentDescription,
    context: EvaluationContext,
    evaluator: ExpressionEvaluator,
) -> S:
    """Instantiate *shape*, setting each field that has a binding.

    Fields without a binding keep their default.  Bindings naming no field
    of the shape are ignored.
    """
    struct = shape()
    for name, info in shape.fields().items():
        binding = bindings.get(name)
        if binding is None:
            continue
        value = evaluator.evaluate(binding, component_type, context)
        try:
            info.set_field(struct, value)
        except ConversionError as exc:
            raise PropertyTypeError(
                f"Cannot set field of {shape.__name__}: {exc}",
                name=name,
                expression=binding,
            ) from exc
    return struct


def convert_path_element(
    expr_element: PathElementDescription,
    component_type: ComponentDescription,
    context: EvaluationContext,
    evaluator: ExpressionEvaluator,
) -> BuiltinStruct:
    shape = PATH_ELEMENT_SHAPES.get(expr_element.element_type)
    if shape is None:
        raise UnsupportedOperationError(
            f"Cannot create unsupported path element {expr_element.element_type}",
            name=expr_element.element_type,
        )
    return new_struct_with_bindings(
        shape, expr_element.bindings, component_type, context, evaluator,
    )
