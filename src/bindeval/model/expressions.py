"""Expression AST nodes for the binding IR.

Expressions arrive here already type-checked.  References into the element
tree are plain integer indices (see :mod:`bindeval.model.elements`), so an
expression never owns the element it points at.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .types import ValueType


class BinaryOp(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LT = "<"
    GT = ">"
    LE = "≤"
    GE = "≥"
    EQ = "="
    NE = "!"
    AND = "&"
    OR = "|"


class SelfAssignOp(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class UnaryOp(str, Enum):
    PLUS = "+"
    MINUS = "-"
    NOT = "!"


class NamedReference(BaseModel):
    """A (element, property-or-signal name) pair.

    *element* is an index into ``ElementTree.elements``.
    """

    element: int
    name: str


# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------

class InvalidExpr(BaseModel):
    """Left behind by the front end after a reported error."""

    kind: Literal["invalid"] = "invalid"


class UncompiledExpr(BaseModel):
    """A binding whose source text was never compiled."""

    kind: Literal["uncompiled"] = "uncompiled"
    source: str = ""


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

class StringLiteral(BaseModel):
    kind: Literal["string_literal"] = "string_literal"
    value: str


class NumberLiteral(BaseModel):
    kind: Literal["number_literal"] = "number_literal"
    value: float


class BoolLiteral(BaseModel):
    kind: Literal["bool_literal"] = "bool_literal"
    value: bool


class ResourceReference(BaseModel):
    """An image or other external resource, by absolute path."""

    kind: Literal["resource_reference"] = "resource_reference"
    absolute_source_path: str


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------

class PropertyReference(NamedReference):
    kind: Literal["property_reference"] = "property_reference"


class SignalReference(NamedReference):
    """Only meaningful as the callee of a FunctionCallExpr."""

    kind: Literal["signal_reference"] = "signal_reference"


class RepeaterIndexReference(BaseModel):
    """The ``index`` of the current instantiation of a repeated element."""

    kind: Literal["repeater_index"] = "repeater_index"
    element: int


class RepeaterModelReference(BaseModel):
    """The ``model_data`` of the current instantiation of a repeated element."""

    kind: Literal["repeater_model"] = "repeater_model"
    element: int


# ---------------------------------------------------------------------------
# Composite expressions
# ---------------------------------------------------------------------------

class ObjectAccessExpr(BaseModel):
    """Field access on an object value: base.name."""

    kind: Literal["object_access"] = "object_access"
    base: Expression
    name: str


class CastExpr(BaseModel):
    kind: Literal["cast"] = "cast"
    source: Expression
    to: ValueType


class CodeBlock(BaseModel):
    """A sequence of expressions; its value is that of the last one."""

    kind: Literal["code_block"] = "code_block"
    expressions: list[Expression] = []


class FunctionCallExpr(BaseModel):
    kind: Literal["function_call"] = "function_call"
    function: Expression
    args: list[Expression] = []


class SelfAssignmentExpr(BaseModel):
    """Compound assignment: lhs op= rhs."""

    kind: Literal["self_assignment"] = "self_assignment"
    lhs: Expression
    rhs: Expression
    op: SelfAssignOp


class BinaryExpr(BaseModel):
    kind: Literal["binary"] = "binary"
    op: BinaryOp
    lhs: Expression
    rhs: Expression


class UnaryExpr(BaseModel):
    kind: Literal["unary"] = "unary"
    op: UnaryOp
    sub: Expression


class ConditionExpr(BaseModel):
    kind: Literal["condition"] = "condition"
    condition: Expression
    true_expr: Expression
    false_expr: Expression


class ArrayExpr(BaseModel):
    kind: Literal["array"] = "array"
    element_type: ValueType | None = None
    values: list[Expression] = []


class ObjectExpr(BaseModel):
    kind: Literal["object"] = "object"
    values: dict[str, Expression] = {}


class PathElementDescription(BaseModel):
    """One segment of a path literal, e.g. ``LineTo { x: 10; y: 20; }``.

    *element_type* names the built-in segment shape, *bindings* maps its
    field names to expressions.
    """

    element_type: str
    bindings: dict[str, Expression] = {}


class PathElementsExpr(BaseModel):
    kind: Literal["path_elements"] = "path_elements"
    elements: list[PathElementDescription] = []


Expression = Annotated[
    Union[
        InvalidExpr,
        UncompiledExpr,
        StringLiteral,
        NumberLiteral,
        BoolLiteral,
        ResourceReference,
        PropertyReference,
        SignalReference,
        RepeaterIndexReference,
        RepeaterModelReference,
        ObjectAccessExpr,
        CastExpr,
        CodeBlock,
        FunctionCallExpr,
        SelfAssignmentExpr,
        BinaryExpr,
        UnaryExpr,
        ConditionExpr,
        ArrayExpr,
        ObjectExpr,
        PathElementsExpr,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression references.
ObjectAccessExpr.model_rebuild()
CastExpr.model_rebuild()
CodeBlock.model_rebuild()
FunctionCallExpr.model_rebuild()
SelfAssignmentExpr.model_rebuild()
BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()
ConditionExpr.model_rebuild()
ArrayExpr.model_rebuild()
ObjectExpr.model_rebuild()
PathElementDescription.model_rebuild()
PathElementsExpr.model_rebuild()
