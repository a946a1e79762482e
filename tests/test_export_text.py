"""Tests for the expression pretty-printer."""

import math

import pytest

from conftest import LABEL, ROOT, ROW, make_tree, num, prop, sig, string

from bindeval.export import format_expression, format_number
from bindeval.model.expressions import (
    ArrayExpr,
    BinaryExpr,
    BinaryOp,
    BoolLiteral,
    CastExpr,
    CodeBlock,
    ConditionExpr,
    FunctionCallExpr,
    InvalidExpr,
    ObjectAccessExpr,
    ObjectExpr,
    PathElementDescription,
    PathElementsExpr,
    RepeaterIndexReference,
    RepeaterModelReference,
    ResourceReference,
    SelfAssignmentExpr,
    SelfAssignOp,
    UnaryExpr,
    UnaryOp,
    UncompiledExpr,
)
from bindeval.model.types import ValueType


# ---------------------------------------------------------------------------
# format_number
# ---------------------------------------------------------------------------

class TestFormatNumber:
    @pytest.mark.parametrize("n, expected", [
        (0.0, "0"),
        (-0.0, "-0"),
        (42.0, "42"),
        (-1.5, "-1.5"),
        (0.1, "0.1"),
        (1e16, "10000000000000000"),
        (1e23, "100000000000000000000000"),
        (2.0**53 + 2, "9007199254740994"),
        (-3e22, "-30000000000000000000000"),
        (1.5e-10, "0.00000000015"),
        (math.inf, "inf"),
        (-math.inf, "-inf"),
        (math.nan, "NaN"),
    ])
    def test_values(self, n, expected):
        assert format_number(n) == expected


# ---------------------------------------------------------------------------
# format_expression
# ---------------------------------------------------------------------------

class TestLeaves:
    def test_string_is_quoted(self):
        assert format_expression(string('say "hi"')) == '"say \\"hi\\""'

    def test_bool(self):
        assert format_expression(BoolLiteral(value=False)) == "false"

    def test_resource(self):
        assert format_expression(ResourceReference(absolute_source_path="/a.png")) == 'img!"/a.png"'

    def test_reference_without_tree(self):
        assert format_expression(prop(LABEL, "text")) == "#1.text"

    def test_reference_with_tree(self):
        tree = make_tree()
        assert format_expression(prop(LABEL, "text"), tree) == "label.text"
        assert format_expression(sig(ROOT, "activated"), tree) == "root.activated"

    def test_repeater(self):
        assert format_expression(RepeaterIndexReference(element=ROW)) == "index"
        assert format_expression(RepeaterModelReference(element=ROW)) == "model_data"

    def test_placeholders(self):
        assert format_expression(InvalidExpr()) == "/* invalid */"
        assert format_expression(UncompiledExpr(source="a+")) == "/* uncompiled: a+ */"


class TestComposites:
    def test_precedence_parenthesized(self):
        expr = BinaryExpr(
            op=BinaryOp.MUL,
            lhs=BinaryExpr(op=BinaryOp.ADD, lhs=num(1), rhs=num(2)),
            rhs=num(3),
        )
        assert format_expression(expr) == "(1 + 2) * 3"

    def test_precedence_not_parenthesized(self):
        expr = BinaryExpr(
            op=BinaryOp.ADD,
            lhs=num(1),
            rhs=BinaryExpr(op=BinaryOp.MUL, lhs=num(2), rhs=num(3)),
        )
        assert format_expression(expr) == "1 + 2 * 3"

    def test_right_associativity_kept(self):
        expr = BinaryExpr(
            op=BinaryOp.SUB,
            lhs=num(1),
            rhs=BinaryExpr(op=BinaryOp.SUB, lhs=num(2), rhs=num(3)),
        )
        assert format_expression(expr) == "1 - (2 - 3)"

    def test_comparison_symbols(self):
        expr = BinaryExpr(op=BinaryOp.LE, lhs=num(1), rhs=num(2))
        assert format_expression(expr) == "1 <= 2"

    def test_unary(self):
        assert format_expression(UnaryExpr(op=UnaryOp.NOT, sub=BoolLiteral(value=True))) == "!true"

    def test_condition(self):
        expr = ConditionExpr(condition=BoolLiteral(value=True), true_expr=num(1), false_expr=num(2))
        assert format_expression(expr) == "true ? 1 : 2"

    def test_cast(self):
        assert format_expression(CastExpr(source=num(1), to=ValueType.STRING)) == "string(1)"

    def test_self_assignment(self):
        expr = SelfAssignmentExpr(lhs=prop(ROOT, "count"), rhs=num(3), op=SelfAssignOp.SUB)
        assert format_expression(expr, make_tree()) == "root.count -= 3"

    def test_call(self):
        expr = FunctionCallExpr(function=sig(ROOT, "activated"))
        assert format_expression(expr, make_tree()) == "root.activated()"

    def test_code_block(self):
        assert format_expression(CodeBlock()) == "{ }"
        assert format_expression(CodeBlock(expressions=[num(1), num(2)])) == "{ 1; 2; }"

    def test_array_and_object(self):
        assert format_expression(ArrayExpr(values=[num(1), num(2)])) == "[1, 2]"
        assert format_expression(ObjectExpr()) == "{}"
        assert format_expression(ObjectExpr(values={"a": num(1)})) == "{ a: 1 }"

    def test_object_access(self):
        expr = ObjectAccessExpr(base=ObjectExpr(values={"a": num(1)}), name="a")
        assert format_expression(expr) == "{ a: 1 }.a"

    def test_path_elements(self):
        expr = PathElementsExpr(elements=[
            PathElementDescription(element_type="LineTo", bindings={"x": num(1), "y": num(2)}),
            PathElementDescription(element_type="ArcTo"),
        ])
        assert format_expression(expr) == "[LineTo { x: 1; y: 2; }, ArcTo { }]"
