"""Expression evaluator: tree-walking interpreter for binding expressions.

The ``ExpressionEvaluator`` evaluates an expression against a component
description and an evaluation context.  Property and signal references are
first resolved to the instance that owns the element, then read, written
or emitted through the type-erased accessor tables.
"""

from __future__ import annotations

import logging
import math
import operator
from collections.abc import Callable

from bindeval.model.expressions import (
    ArrayExpr,
    BinaryExpr,
    BinaryOp,
    BoolLiteral,
    CastExpr,
    CodeBlock,
    ConditionExpr,
    Expression,
    FunctionCallExpr,
    InvalidExpr,
    NumberLiteral,
    ObjectAccessExpr,
    ObjectExpr,
    PathElementsExpr,
    PropertyReference,
    RepeaterIndexReference,
    RepeaterModelReference,
    ResourceReference,
    SelfAssignmentExpr,
    SelfAssignOp,
    SignalReference,
    StringLiteral,
    UnaryExpr,
    UnaryOp,
    UncompiledExpr,
)
from bindeval.export import format_number
from bindeval.model.types import INTEGER_TYPES, ComponentElementType, ValueType

from ._accessors import PropertyAccessor
from ._component import (
    REPEATER_INDEX,
    REPEATER_MODEL_DATA,
    ComponentDescription,
    ItemRef,
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
from ._native import AbsoluteFilePath, Color, NativeType
from ._properties import Signal
from ._settings import EvaluatorSettings
from ._structs import convert_path_element
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
    to_bool,
    value_into,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Number helpers
# ---------------------------------------------------------------------------

def _divide(a: float, b: float) -> float:
    """IEEE division: x/0 is +-inf, 0/0 is NaN."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _round_half_away(n: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    if not math.isfinite(n):
        return n
    return math.copysign(math.floor(abs(n) + 0.5), n)


_ARITHMETIC: dict[BinaryOp, Callable[[float, float], float]] = {
    BinaryOp.ADD: operator.add,
    BinaryOp.SUB: operator.sub,
    BinaryOp.MUL: operator.mul,
    BinaryOp.DIV: _divide,
}

_SELF_ASSIGN: dict[SelfAssignOp, Callable[[float, float], float]] = {
    SelfAssignOp.ADD: operator.add,
    SelfAssignOp.SUB: operator.sub,
    SelfAssignOp.MUL: operator.mul,
    SelfAssignOp.DIV: _divide,
}

_ORDERING: dict[BinaryOp, Callable[[float, float], bool]] = {
    BinaryOp.LT: operator.lt,
    BinaryOp.GT: operator.gt,
    BinaryOp.LE: operator.le,
    BinaryOp.GE: operator.ge,
}


# ---------------------------------------------------------------------------
# ExpressionEvaluator
# ---------------------------------------------------------------------------

class ExpressionEvaluator:
    """Tree-walking evaluator for binding expressions.

    Parameters
    ----------
    settings : EvaluatorSettings, optional
        Resolution depth bound and error logging.
    """

    def __init__(self, settings: EvaluatorSettings | None = None) -> None:
        self.settings = settings or EvaluatorSettings()

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def evaluate(
        self,
        expr: Expression,
        component_type: ComponentDescription,
        context: EvaluationContext,
    ) -> Value:
        handler = self._EXPR_DISPATCH.get(expr.kind)
        if handler is None:
            raise UnsupportedOperationError(
                f"Unsupported expression kind: {expr.kind}", expression=expr,
            )
        return handler(self, expr, component_type, context)

    def bind(
        self,
        element: int,
        name: str,
        expr: Expression,
        context: EvaluationContext,
    ) -> None:
        """Install *expr* as the binding of property or signal *name*.

        For a property, reads evaluate *expr* lazily in the owning
        component.  For a signal, *expr* becomes a handler evaluated on
        each emission.
        """
        resolution = self._resolve(element, context, expr)
        description = resolution.description
        owner_context = resolution.context
        signal = self._find_signal(resolution, element, name)
        if signal is not None:
            signal.connect(
                lambda _ctx, _args: self.evaluate(expr, description, owner_context)
            )
            return

        accessor, item = self._locate_property(resolution, element, name, expr)
        accessor.set_binding(
            item, lambda ctx: self.evaluate(expr, description, ctx), None,
        )

    # -----------------------------------------------------------------------
    # Resolution helpers
    # -----------------------------------------------------------------------

    def _resolve(
        self, element: int, context: EvaluationContext, expr: Expression,
    ) -> Resolution:
        return resolve_element(
            element,
            context,
            max_depth=self.settings.max_context_depth,
            expression=expr,
        )

    @staticmethod
    def _locate_property(
        resolution: Resolution, element: int, name: str, expr: Expression,
    ) -> tuple[PropertyAccessor, ItemRef]:
        """Accessor and item reference for property *name* of *element*.

        Custom properties are only looked up on the component's root
        element; everything else goes through the element's item table.
        """
        description = resolution.description
        tree = description.tree
        elem = tree.element(element)

        if tree.is_root_element(element):
            custom = description.custom_properties.get(name)
            if custom is not None:
                return custom.prop, ItemRef(resolution.instance, custom.offset)

        item_info = description.items.get(elem.id)
        if item_info is None:
            raise UnresolvedReferenceError(
                f"Element is not an item of component {description.id!r}",
                element=elem.id, name=name, expression=expr,
            )
        accessor = item_info.rtti.properties.get(name)
        if accessor is None:
            raise UnresolvedReferenceError(
                f"Unknown property of {item_info.rtti.name}",
                element=elem.id, name=name, expression=expr,
            )
        return accessor, item_info.item_from_component(resolution.instance)

    @staticmethod
    def _find_signal(resolution: Resolution, element: int, name: str) -> Signal | None:
        """Item signals first, then the component's custom signals."""
        description = resolution.description
        elem = description.tree.element(element)
        slots = resolution.instance.slots

        slot = None
        item_info = description.items.get(elem.id)
        if item_info is not None and name in item_info.rtti.signals:
            slot = slots[item_info.offset + item_info.rtti.signals[name]]
        elif name in description.custom_signals:
            slot = slots[description.custom_signals[name]]
        if slot is None:
            return None
        if not isinstance(slot, Signal):
            raise PropertyTypeError(
                f"Slot of signal is a {type(slot).__name__}", element=elem.id, name=name,
            )
        return slot

    def _repeater_property(
        self,
        expr: RepeaterIndexReference | RepeaterModelReference,
        property_name: str,
        component_type: ComponentDescription,
        context: EvaluationContext,
    ) -> Value:
        """Read a synthetic per-instantiation property of the current context."""
        elem = component_type.tree.element(expr.element)
        if elem.base_type != ComponentElementType(component=component_type.original):
            raise UnimplementedError(
                f"Repeater reference to an element that does not repeat "
                f"component {component_type.id!r}",
                element=elem.id, name=property_name, expression=expr,
            )
        if context.component.description is not component_type:
            raise ContextChainError(
                f"Context instance is a {context.component.description.id!r}, "
                f"not a {component_type.id!r}",
                element=elem.id, name=property_name, expression=expr,
            )
        custom = component_type.custom_properties.get(property_name)
        if custom is None:
            raise UnresolvedReferenceError(
                f"Component {component_type.id!r} is not repeated",
                element=elem.id, name=property_name, expression=expr,
            )
        return custom.prop.get(ItemRef(context.component, custom.offset), context)

    # -----------------------------------------------------------------------
    # Expression handlers
    # -----------------------------------------------------------------------

    def _eval_invalid(self, expr: InvalidExpr, _ct, _ctx) -> Value:
        raise InvalidExpressionError("Invalid expression while evaluating", expression=expr)

    def _eval_uncompiled(self, expr: UncompiledExpr, _ct, _ctx) -> Value:
        raise InvalidExpressionError("Uncompiled expression while evaluating", expression=expr)

    def _eval_string_literal(self, expr: StringLiteral, _ct, _ctx) -> Value:
        return StringValue(value=expr.value)

    def _eval_number_literal(self, expr: NumberLiteral, _ct, _ctx) -> Value:
        return NumberValue(value=expr.value)

    def _eval_bool_literal(self, expr: BoolLiteral, _ct, _ctx) -> Value:
        return BoolValue(value=expr.value)

    def _eval_resource_reference(self, expr: ResourceReference, _ct, _ctx) -> Value:
        return ResourceValue(resource=AbsoluteFilePath(path=expr.absolute_source_path))

    def _eval_signal_reference(self, expr: SignalReference, _ct, _ctx) -> Value:
        raise UnsupportedOperationError(
            "Signal used as a value", name=expr.name, expression=expr,
        )

    def _eval_property_reference(
        self,
        expr: PropertyReference,
        _ct: ComponentDescription,
        context: EvaluationContext,
    ) -> Value:
        resolution = self._resolve(expr.element, context, expr)
        accessor, item = self._locate_property(resolution, expr.element, expr.name, expr)
        return accessor.get(item, resolution.context)

    def _eval_repeater_index(self, expr, component_type, context) -> Value:
        return self._repeater_property(expr, REPEATER_INDEX, component_type, context)

    def _eval_repeater_model(self, expr, component_type, context) -> Value:
        return self._repeater_property(expr, REPEATER_MODEL_DATA, component_type, context)

    def _eval_object_access(self, expr: ObjectAccessExpr, component_type, context) -> Value:
        base = self.evaluate(expr.base, component_type, context)
        if not isinstance(base, ObjectValue):
            raise UnsupportedOperationError(
                f"Field access on a {base.kind} value", name=expr.name, expression=expr,
            )
        return base.fields.get(expr.name, VOID)

    def _eval_cast(self, expr: CastExpr, component_type, context) -> Value:
        value = self.evaluate(expr.source, component_type, context)
        if not isinstance(value, NumberValue):
            return value
        n = value.value
        if expr.to in INTEGER_TYPES:
            return NumberValue(value=_round_half_away(n))
        if expr.to == ValueType.STRING:
            return StringValue(value=format_number(n))
        if expr.to == ValueType.COLOR:
            return ColorValue(color=Color.from_argb_encoded(value_into(value, NativeType.U32)))
        return value

    def _eval_code_block(self, expr: CodeBlock, component_type, context) -> Value:
        result = VOID
        for sub in expr.expressions:
            result = self.evaluate(sub, component_type, context)
        return result

    def _eval_function_call(
        self,
        expr: FunctionCallExpr,
        _ct: ComponentDescription,
        context: EvaluationContext,
    ) -> Value:
        function = expr.function
        if not isinstance(function, SignalReference):
            raise NotASignalError("Call of something not a signal", expression=expr)

        resolution = self._resolve(function.element, context, expr)
        signal = self._find_signal(resolution, function.element, function.name)
        if signal is None:
            raise UnresolvedReferenceError(
                "Unknown signal",
                element=resolution.description.tree.element(function.element).id,
                name=function.name,
                expression=expr,
            )
        logger.debug("Emitting signal %r of %r", function.name, resolution.description.id)
        signal.emit(resolution.context, ())
        return VOID

    def _eval_self_assignment(
        self,
        expr: SelfAssignmentExpr,
        component_type: ComponentDescription,
        context: EvaluationContext,
    ) -> Value:
        lhs = expr.lhs
        if not isinstance(lhs, PropertyReference):
            raise InvalidAssignmentTargetError(
                f"Cannot assign to a {lhs.kind} expression", op=expr.op.value, expression=expr,
            )

        resolution = self._resolve(lhs.element, context, expr)
        accessor, item = self._locate_property(resolution, lhs.element, lhs.name, expr)
        current = accessor.get(item, resolution.context)
        rhs = self.evaluate(expr.rhs, component_type, context)

        if not (isinstance(current, NumberValue) and isinstance(rhs, NumberValue)):
            raise UnsupportedOperationError(
                f"Unsupported {current.kind} {expr.op.value}= {rhs.kind}",
                name=lhs.name, op=expr.op.value, expression=expr,
            )
        result = NumberValue(value=_SELF_ASSIGN[expr.op](current.value, rhs.value))
        logger.debug("Writing %r.%r = %r", resolution.description.id, lhs.name, result.value)
        accessor.set(item, result, None)
        return VOID

    def _eval_binary(self, expr: BinaryExpr, component_type, context) -> Value:
        lhs = self.evaluate(expr.lhs, component_type, context)
        rhs = self.evaluate(expr.rhs, component_type, context)
        op = expr.op

        if op in (BinaryOp.EQ, BinaryOp.NE):
            equal = lhs == rhs
            return BoolValue(value=equal if op == BinaryOp.EQ else not equal)

        if isinstance(lhs, NumberValue) and isinstance(rhs, NumberValue):
            if op in _ARITHMETIC:
                return NumberValue(value=_ARITHMETIC[op](lhs.value, rhs.value))
            if op in _ORDERING:
                return BoolValue(value=_ORDERING[op](lhs.value, rhs.value))

        if isinstance(lhs, BoolValue) and isinstance(rhs, BoolValue):
            if op == BinaryOp.AND:
                return BoolValue(value=lhs.value and rhs.value)
            if op == BinaryOp.OR:
                return BoolValue(value=lhs.value or rhs.value)

        raise UnsupportedOperationError(
            f"Unsupported {lhs.kind} {op.value} {rhs.kind}", op=op.value, expression=expr,
        )

    def _eval_unary(self, expr: UnaryExpr, component_type, context) -> Value:
        sub = self.evaluate(expr.sub, component_type, context)
        if isinstance(sub, NumberValue):
            if expr.op == UnaryOp.PLUS:
                return sub
            if expr.op == UnaryOp.MINUS:
                return NumberValue(value=-sub.value)
        if isinstance(sub, BoolValue) and expr.op == UnaryOp.NOT:
            return BoolValue(value=not sub.value)
        raise UnsupportedOperationError(
            f"Unsupported {expr.op.value} {sub.kind}", op=expr.op.value, expression=expr,
        )

    def _eval_condition(self, expr: ConditionExpr, component_type, context) -> Value:
        condition = self.evaluate(expr.condition, component_type, context)
        try:
            flag = to_bool(condition)
        except ConversionError as exc:
            raise UnsupportedOperationError(
                "Conditional expression did not evaluate to a boolean", expression=expr,
            ) from exc
        branch = expr.true_expr if flag else expr.false_expr
        return self.evaluate(branch, component_type, context)

    def _eval_array(self, expr: ArrayExpr, component_type, context) -> Value:
        return ArrayValue(values=[
            self.evaluate(e, component_type, context) for e in expr.values
        ])

    def _eval_object(self, expr: ObjectExpr, component_type, context) -> Value:
        return ObjectValue(fields={
            name: self.evaluate(e, component_type, context)
            for name, e in expr.values.items()
        })

    def _eval_path_elements(self, expr: PathElementsExpr, component_type, context) -> Value:
        return PathElementsValue(elements=tuple(
            convert_path_element(e, component_type, context, self) for e in expr.elements
        ))

    # Expression dispatch table
    _EXPR_DISPATCH: dict[
        str,
        Callable[[ExpressionEvaluator, Expression, ComponentDescription, EvaluationContext], Value],
    ] = {
        "invalid": _eval_invalid,
        "uncompiled": _eval_uncompiled,
        "string_literal": _eval_string_literal,
        "number_literal": _eval_number_literal,
        "bool_literal": _eval_bool_literal,
        "resource_reference": _eval_resource_reference,
        "property_reference": _eval_property_reference,
        "signal_reference": _eval_signal_reference,
        "repeater_index": _eval_repeater_index,
        "repeater_model": _eval_repeater_model,
        "object_access": _eval_object_access,
        "cast": _eval_cast,
        "code_block": _eval_code_block,
        "function_call": _eval_function_call,
        "self_assignment": _eval_self_assignment,
        "binary": _eval_binary,
        "unary": _eval_unary,
        "condition": _eval_condition,
        "array": _eval_array,
        "object": _eval_object,
        "path_elements": _eval_path_elements,
    }


# ---------------------------------------------------------------------------
# Module-level entry points
# ---------------------------------------------------------------------------

def evaluate(
    expr: Expression,
    component_type: ComponentDescription,
    context: EvaluationContext,
    *,
    settings: EvaluatorSettings | None = None,
) -> Value:
    """Evaluate *expr* and return its Value.

    Fatal errors are logged once with their diagnostic context and
    re-raised; the caller decides whether to abort or recover.
    """
    evaluator = ExpressionEvaluator(settings)
    try:
        return evaluator.evaluate(expr, component_type, context)
    except EvaluationError as exc:
        if evaluator.settings.log_errors:
            logger.error(
                "Fatal evaluation error in component %r: %s",
                component_type.id, exc,
                extra={"diagnostic": exc.diagnostic()},
            )
        raise


def bind_property(
    element: int,
    name: str,
    expr: Expression,
    context: EvaluationContext,
    *,
    settings: EvaluatorSettings | None = None,
) -> None:
    """Install *expr* as the lazy binding of *name* on *element*."""
    ExpressionEvaluator(settings).bind(element, name, expr, context)
