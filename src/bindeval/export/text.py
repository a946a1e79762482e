"""Binding-language pretty-printer for expression IR.

Walks Pydantic expression models and emits source-like text, mostly for
diagnostics.  Element references print as ``id.name`` when an element tree
is supplied and as ``#index.name`` otherwise.
"""

from __future__ import annotations

import json
import math
from decimal import Decimal

from bindeval.model.elements import ElementTree
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
    NumberLiteral,
    ObjectAccessExpr,
    ObjectExpr,
    PathElementDescription,
    PathElementsExpr,
    PropertyReference,
    RepeaterIndexReference,
    RepeaterModelReference,
    ResourceReference,
    SelfAssignmentExpr,
    SignalReference,
    StringLiteral,
    UnaryExpr,
    UncompiledExpr,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def format_expression(expr: Expression, tree: ElementTree | None = None) -> str:
    """Render *expr* as binding-language text."""
    return ExpressionWriter(tree).expr(expr)


def format_number(n: float) -> str:
    """Shortest decimal representation, never in exponent notation."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    # repr is the shortest round-tripping form; Decimal expands its exponent
    text = format(Decimal(repr(n)), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


# ---------------------------------------------------------------------------
# Operator maps
# ---------------------------------------------------------------------------

_BINOP_SYMBOL: dict[BinaryOp, str] = {
    BinaryOp.ADD: "+",
    BinaryOp.SUB: "-",
    BinaryOp.MUL: "*",
    BinaryOp.DIV: "/",
    BinaryOp.LT: "<",
    BinaryOp.GT: ">",
    BinaryOp.LE: "<=",
    BinaryOp.GE: ">=",
    BinaryOp.EQ: "==",
    BinaryOp.NE: "!=",
    BinaryOp.AND: "&&",
    BinaryOp.OR: "||",
}

# Higher binds tighter
_BINOP_PRECEDENCE: dict[BinaryOp, int] = {
    BinaryOp.OR: 1,
    BinaryOp.AND: 2,
    BinaryOp.EQ: 3,
    BinaryOp.NE: 3,
    BinaryOp.LT: 4,
    BinaryOp.GT: 4,
    BinaryOp.LE: 4,
    BinaryOp.GE: 4,
    BinaryOp.ADD: 5,
    BinaryOp.SUB: 5,
    BinaryOp.MUL: 6,
    BinaryOp.DIV: 6,
}

_UNARY_PRECEDENCE = 10


# ---------------------------------------------------------------------------
# ExpressionWriter
# ---------------------------------------------------------------------------

class ExpressionWriter:
    """Renders expression models to text."""

    def __init__(self, tree: ElementTree | None = None) -> None:
        self.tree = tree

    def expr(self, expr: Expression, parent_prec: int = 0) -> str:
        handler = _EXPR_WRITERS.get(expr.kind)
        if handler is not None:
            return handler(self, expr, parent_prec)
        return f"/* {expr.kind} */"

    def _element(self, index: int) -> str:
        if self.tree is not None and 0 <= index < len(self.tree.elements):
            return self.tree.elements[index].id
        return f"#{index}"

    # -- Leaves ---------------------------------------------------------------

    def _expr_invalid(self, _expr, _prec: int) -> str:
        return "/* invalid */"

    def _expr_uncompiled(self, expr: UncompiledExpr, _prec: int) -> str:
        return f"/* uncompiled: {expr.source} */"

    def _expr_string_literal(self, expr: StringLiteral, _prec: int) -> str:
        return json.dumps(expr.value, ensure_ascii=False)

    def _expr_number_literal(self, expr: NumberLiteral, _prec: int) -> str:
        return format_number(expr.value)

    def _expr_bool_literal(self, expr: BoolLiteral, _prec: int) -> str:
        return "true" if expr.value else "false"

    def _expr_resource_reference(self, expr: ResourceReference, _prec: int) -> str:
        return f"img!{json.dumps(expr.absolute_source_path)}"

    def _expr_property_reference(self, expr: PropertyReference, _prec: int) -> str:
        return f"{self._element(expr.element)}.{expr.name}"

    def _expr_signal_reference(self, expr: SignalReference, _prec: int) -> str:
        return f"{self._element(expr.element)}.{expr.name}"

    def _expr_repeater_index(self, expr: RepeaterIndexReference, _prec: int) -> str:
        return "index"

    def _expr_repeater_model(self, expr: RepeaterModelReference, _prec: int) -> str:
        return "model_data"

    # -- Composites -----------------------------------------------------------

    def _expr_object_access(self, expr: ObjectAccessExpr, _prec: int) -> str:
        return f"{self.expr(expr.base, _UNARY_PRECEDENCE)}.{expr.name}"

    def _expr_cast(self, expr: CastExpr, _prec: int) -> str:
        return f"{expr.to.value}({self.expr(expr.source)})"

    def _expr_code_block(self, expr: CodeBlock, _prec: int) -> str:
        if not expr.expressions:
            return "{ }"
        return "{ " + " ".join(f"{self.expr(e)};" for e in expr.expressions) + " }"

    def _expr_function_call(self, expr: FunctionCallExpr, _prec: int) -> str:
        args = ", ".join(self.expr(a) for a in expr.args)
        return f"{self.expr(expr.function, _UNARY_PRECEDENCE)}({args})"

    def _expr_self_assignment(self, expr: SelfAssignmentExpr, _prec: int) -> str:
        return f"{self.expr(expr.lhs)} {expr.op.value}= {self.expr(expr.rhs)}"

    def _expr_binary(self, expr: BinaryExpr, parent_prec: int) -> str:
        my_prec = _BINOP_PRECEDENCE[expr.op]
        left = self.expr(expr.lhs, my_prec)
        right = self.expr(expr.rhs, my_prec + 1)
        result = f"{left} {_BINOP_SYMBOL[expr.op]} {right}"
        if my_prec < parent_prec:
            return f"({result})"
        return result

    def _expr_unary(self, expr: UnaryExpr, _prec: int) -> str:
        return f"{expr.op.value}{self.expr(expr.sub, _UNARY_PRECEDENCE)}"

    def _expr_condition(self, expr: ConditionExpr, parent_prec: int) -> str:
        result = (
            f"{self.expr(expr.condition, 1)} ? {self.expr(expr.true_expr)} "
            f": {self.expr(expr.false_expr)}"
        )
        if parent_prec > 0:
            return f"({result})"
        return result

    def _expr_array(self, expr: ArrayExpr, _prec: int) -> str:
        return "[" + ", ".join(self.expr(e) for e in expr.values) + "]"

    def _expr_object(self, expr: ObjectExpr, _prec: int) -> str:
        if not expr.values:
            return "{}"
        fields = ", ".join(f"{k}: {self.expr(v)}" for k, v in expr.values.items())
        return "{ " + fields + " }"

    def _path_element(self, element: PathElementDescription) -> str:
        bindings = " ".join(
            f"{k}: {self.expr(v)};" for k, v in element.bindings.items()
        )
        if not bindings:
            return f"{element.element_type} {{ }}"
        return f"{element.element_type} {{ {bindings} }}"

    def _expr_path_elements(self, expr: PathElementsExpr, _prec: int) -> str:
        return "[" + ", ".join(self._path_element(e) for e in expr.elements) + "]"


_EXPR_WRITERS = {
    "invalid": ExpressionWriter._expr_invalid,
    "uncompiled": ExpressionWriter._expr_uncompiled,
    "string_literal": ExpressionWriter._expr_string_literal,
    "number_literal": ExpressionWriter._expr_number_literal,
    "bool_literal": ExpressionWriter._expr_bool_literal,
    "resource_reference": ExpressionWriter._expr_resource_reference,
    "property_reference": ExpressionWriter._expr_property_reference,
    "signal_reference": ExpressionWriter._expr_signal_reference,
    "repeater_index": ExpressionWriter._expr_repeater_index,
    "repeater_model": ExpressionWriter._expr_repeater_model,
    "object_access": ExpressionWriter._expr_object_access,
    "cast": ExpressionWriter._expr_cast,
    "code_block": ExpressionWriter._expr_code_block,
    "function_call": ExpressionWriter._expr_function_call,
    "self_assignment": ExpressionWriter._expr_self_assignment,
    "binary": ExpressionWriter._expr_binary,
    "unary": ExpressionWriter._expr_unary,
    "condition": ExpressionWriter._expr_condition,
    "array": ExpressionWriter._expr_array,
    "object": ExpressionWriter._expr_object,
    "path_elements": ExpressionWriter._expr_path_elements,
}
