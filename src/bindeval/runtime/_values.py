"""Value system for the evaluator.

``Value`` is the closed set of dynamically typed values the evaluator
produces, plus the fallible conversion layer between Values and the
native shapes stored in properties and struct fields.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ._native import (
    PATH_ELEMENT_TYPES,
    RESOURCE_TYPES,
    Color,
    NativeType,
    NoResource,
    PathElement,
    Resource,
)


class ConversionError(Exception):
    """A Value's tag does not match the requested native shape.

    Recoverable: callers may branch on it (e.g. condition coercion).
    """

    def __init__(self, value: object, target: NativeType | str, reason: str = "") -> None:
        self.value = value
        self.target = target
        kind = getattr(value, "kind", type(value).__name__)
        target_name = target.value if isinstance(target, NativeType) else target
        message = f"Cannot convert {kind} to {target_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Value variants
# ---------------------------------------------------------------------------

class VoidValue(BaseModel):
    """Absence of a result."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["void"] = "void"


class NumberValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: float


class StringValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str


class BoolValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bool"] = "bool"
    value: bool


class ResourceValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["resource"] = "resource"
    resource: Resource


class ArrayValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    values: list[Value] = []


class ObjectValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    fields: dict[str, Value] = {}


class ColorValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["color"] = "color"
    color: Color


class PathElementsValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["path_elements"] = "path_elements"
    elements: tuple[PathElement, ...] = ()


Value = Annotated[
    Union[
        VoidValue,
        NumberValue,
        StringValue,
        BoolValue,
        ResourceValue,
        ArrayValue,
        ObjectValue,
        ColorValue,
        PathElementsValue,
    ],
    Field(discriminator="kind"),
]

VALUE_TYPES = (
    VoidValue,
    NumberValue,
    StringValue,
    BoolValue,
    ResourceValue,
    ArrayValue,
    ObjectValue,
    ColorValue,
    PathElementsValue,
)

ArrayValue.model_rebuild()
ObjectValue.model_rebuild()

VOID = VoidValue()


# ---------------------------------------------------------------------------
# Numeric narrowing
# ---------------------------------------------------------------------------

_INTEGER_BOUNDS: dict[NativeType, tuple[int, int]] = {
    NativeType.I32: (-(2**31), 2**31 - 1),
    NativeType.I64: (-(2**63), 2**63 - 1),
    NativeType.ISIZE: (-(2**63), 2**63 - 1),
    NativeType.U32: (0, 2**32 - 1),
    NativeType.U64: (0, 2**64 - 1),
    NativeType.USIZE: (0, 2**64 - 1),
}

_FLOAT_TYPES = frozenset({NativeType.F32, NativeType.F64})

NUMERIC_NATIVE_TYPES = frozenset(_INTEGER_BOUNDS) | _FLOAT_TYPES

_F32_MAX = 3.4028234663852886e38


def _narrow_integer(x: float, target: NativeType, checked: bool) -> int:
    """Truncate toward zero and saturate to the target width.

    NaN maps to 0.  With *checked*, anything that would lose information
    raises ConversionError instead.
    """
    lo, hi = _INTEGER_BOUNDS[target]
    if math.isnan(x):
        if checked:
            raise ConversionError(NumberValue(value=x), target, "NaN")
        return 0
    if checked and (not x.is_integer() or not lo <= x <= hi):
        raise ConversionError(NumberValue(value=x), target, f"{x!r} is not representable")
    if x <= lo:
        return lo
    if x >= hi:
        return hi
    return math.trunc(x)


def _narrow_f32(x: float, checked: bool) -> float:
    if math.isfinite(x) and abs(x) > _F32_MAX:
        if checked:
            raise ConversionError(NumberValue(value=x), NativeType.F32, "out of range")
        return math.copysign(math.inf, x)
    return struct.unpack("f", struct.pack("f", x))[0]


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

def value_from(native: Any, native_type: NativeType) -> Value:
    """Wrap a native value of the given shape into a Value."""
    if native_type in NUMERIC_NATIVE_TYPES:
        return NumberValue(value=float(native))
    if native_type == NativeType.BOOL:
        return BoolValue(value=bool(native))
    if native_type == NativeType.STRING:
        return StringValue(value=str(native))
    if native_type == NativeType.RESOURCE:
        return ResourceValue(resource=native)
    if native_type == NativeType.OBJECT:
        return ObjectValue(fields={k: to_value(v) for k, v in native.items()})
    if native_type == NativeType.COLOR:
        return ColorValue(color=native)
    if native_type == NativeType.PATH_ELEMENTS:
        return PathElementsValue(elements=tuple(native))
    if native_type == NativeType.VALUE:
        return to_value(native)
    raise ConversionError(native, native_type, "unknown native type")


def value_into(value: Value, native_type: NativeType, *, checked: bool = False) -> Any:
    """Extract the native value of the given shape from *value*.

    Raises ConversionError when the tag does not match.  Numbers always
    pass through a 64-bit float; narrowing to integer or f32 targets is
    lossy unless *checked* is set.
    """
    if native_type == NativeType.VALUE:
        return value

    if native_type in NUMERIC_NATIVE_TYPES:
        if not isinstance(value, NumberValue):
            raise ConversionError(value, native_type)
        if native_type == NativeType.F64:
            return value.value
        if native_type == NativeType.F32:
            return _narrow_f32(value.value, checked)
        return _narrow_integer(value.value, native_type, checked)

    if native_type == NativeType.BOOL and isinstance(value, BoolValue):
        return value.value
    if native_type == NativeType.STRING and isinstance(value, StringValue):
        return value.value
    if native_type == NativeType.RESOURCE and isinstance(value, ResourceValue):
        return value.resource
    if native_type == NativeType.OBJECT and isinstance(value, ObjectValue):
        return dict(value.fields)
    if native_type == NativeType.COLOR and isinstance(value, ColorValue):
        return value.color
    if native_type == NativeType.PATH_ELEMENTS and isinstance(value, PathElementsValue):
        return value.elements

    raise ConversionError(value, native_type)


def to_value(obj: Any) -> Value:
    """Infer the Value tag from a plain Python object."""
    if isinstance(obj, VALUE_TYPES):
        return obj
    if obj is None:
        return VOID
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return BoolValue(value=obj)
    if isinstance(obj, (int, float)):
        return NumberValue(value=float(obj))
    if isinstance(obj, str):
        return StringValue(value=obj)
    if isinstance(obj, Color):
        return ColorValue(color=obj)
    if isinstance(obj, RESOURCE_TYPES):
        return ResourceValue(resource=obj)
    if isinstance(obj, dict):
        return ObjectValue(fields={str(k): to_value(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        if obj and all(isinstance(e, PATH_ELEMENT_TYPES) for e in obj):
            return PathElementsValue(elements=tuple(obj))
        return ArrayValue(values=[to_value(v) for v in obj])
    raise ConversionError(obj, "value", "unsupported Python type")


def to_bool(value: Value) -> bool:
    """Boolean-condition coercion.  Raises ConversionError on non-Bool."""
    return value_into(value, NativeType.BOOL)


def default_native(native_type: NativeType) -> Any:
    """Zero value of a native shape, used to initialise property slots."""
    if native_type in _INTEGER_BOUNDS:
        return 0
    if native_type in _FLOAT_TYPES:
        return 0.0
    if native_type == NativeType.BOOL:
        return False
    if native_type == NativeType.STRING:
        return ""
    if native_type == NativeType.RESOURCE:
        return NoResource()
    if native_type == NativeType.OBJECT:
        return {}
    if native_type == NativeType.COLOR:
        return Color()
    if native_type == NativeType.PATH_ELEMENTS:
        return ()
    return VOID


# ---------------------------------------------------------------------------
# Struct field accessors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldAccessor:
    """Typed access to one field of a built-in struct."""

    name: str
    native_type: NativeType

    def get_field(self, obj: BaseModel) -> Value:
        return value_from(getattr(obj, self.name), self.native_type)

    def set_field(self, obj: BaseModel, value: Value) -> None:
        """Convert *value* and store it.  Raises ConversionError on mismatch."""
        setattr(obj, self.name, value_into(value, self.native_type))
