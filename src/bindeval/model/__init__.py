"""Binding IR: value types, the element tree arena and expression nodes."""

from .elements import Component, Element, ElementTree
from .expressions import (
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
    NamedReference,
    NumberLiteral,
    ObjectAccessExpr,
    ObjectExpr,
    PathElementDescription,
    PathElementsExpr,
    PropertyReference,
    RepeaterIndexReference,
    RepeaterModelReference,
    ResourceReference,
    SelfAssignOp,
    SelfAssignmentExpr,
    SignalReference,
    StringLiteral,
    UnaryExpr,
    UnaryOp,
    UncompiledExpr,
)
from .types import (
    INTEGER_TYPES,
    NUMERIC_TYPES,
    BuiltinElementType,
    ComponentElementType,
    ElementTypeRef,
    ValueType,
)

__all__ = [
    "ArrayExpr",
    "BinaryExpr",
    "BinaryOp",
    "BoolLiteral",
    "BuiltinElementType",
    "CastExpr",
    "CodeBlock",
    "Component",
    "ComponentElementType",
    "ConditionExpr",
    "Element",
    "ElementTree",
    "ElementTypeRef",
    "Expression",
    "FunctionCallExpr",
    "INTEGER_TYPES",
    "InvalidExpr",
    "NUMERIC_TYPES",
    "NamedReference",
    "NumberLiteral",
    "ObjectAccessExpr",
    "ObjectExpr",
    "PathElementDescription",
    "PathElementsExpr",
    "PropertyReference",
    "RepeaterIndexReference",
    "RepeaterModelReference",
    "ResourceReference",
    "SelfAssignOp",
    "SelfAssignmentExpr",
    "SignalReference",
    "StringLiteral",
    "UnaryExpr",
    "UnaryOp",
    "UncompiledExpr",
    "ValueType",
]
