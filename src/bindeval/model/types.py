"""Type system for the binding IR.

Two distinct concepts:
- ValueType: the declared type of a binding, used as the target of a Cast
  and as the declared type of custom properties.
- ElementTypeRef: what an element in the element tree is an instance of,
  either a built-in item (Rectangle, Text, ...) or another component.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

class ValueType(str, Enum):
    """Declared types of the binding language."""

    VOID = "void"

    # Numeric
    INT32 = "int32"
    FLOAT32 = "float32"
    LENGTH = "length"
    DURATION = "duration"

    STRING = "string"
    BOOL = "bool"
    COLOR = "color"
    RESOURCE = "resource"

    # Aggregates
    ARRAY = "array"
    OBJECT = "object"
    PATH_ELEMENTS = "path_elements"

    # Not usable as a value, only as a reference target
    SIGNAL = "signal"


#: Targets for which a Cast from a Number rounds to the nearest integer.
INTEGER_TYPES = frozenset({ValueType.INT32})

NUMERIC_TYPES = frozenset({
    ValueType.INT32, ValueType.FLOAT32, ValueType.LENGTH, ValueType.DURATION,
})


# ---------------------------------------------------------------------------
# Element type references
# ---------------------------------------------------------------------------

class BuiltinElementType(BaseModel):
    """An element that is an instance of a built-in item (e.g. Rectangle)."""

    kind: Literal["builtin"] = "builtin"
    name: str


class ComponentElementType(BaseModel):
    """An element that instantiates another component of the same tree.

    *component* is an index into ``ElementTree.components``.
    """

    kind: Literal["component"] = "component"
    component: int


ElementTypeRef = Annotated[
    Union[BuiltinElementType, ComponentElementType],
    Field(discriminator="kind"),
]
