"""Native shapes stored in properties and carried by Values.

Provides the colour, resource and path-segment types, plus the
``NativeType`` tags used by accessors to convert to and from Values.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ._values import FieldAccessor


class NativeType(str, Enum):
    """Storage types a property or struct field can have."""

    I32 = "i32"
    I64 = "i64"
    U32 = "u32"
    U64 = "u64"
    ISIZE = "isize"
    USIZE = "usize"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    STRING = "string"
    RESOURCE = "resource"
    OBJECT = "object"
    COLOR = "color"
    PATH_ELEMENTS = "path_elements"
    # The Value itself, untouched
    VALUE = "value"


# ---------------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------------

class Color(BaseModel):
    """An RGBA colour, packed as ``0xAARRGGBB`` when encoded."""

    model_config = ConfigDict(frozen=True)

    red: int = Field(default=0, ge=0, le=255)
    green: int = Field(default=0, ge=0, le=255)
    blue: int = Field(default=0, ge=0, le=255)
    alpha: int = Field(default=0, ge=0, le=255)

    @classmethod
    def from_argb_encoded(cls, encoded: int) -> Color:
        encoded &= 0xFFFFFFFF
        return cls(
            alpha=(encoded >> 24) & 0xFF,
            red=(encoded >> 16) & 0xFF,
            green=(encoded >> 8) & 0xFF,
            blue=encoded & 0xFF,
        )

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> Color:
        return cls(red=red, green=green, blue=blue, alpha=255)

    def as_argb_encoded(self) -> int:
        return (self.alpha << 24) | (self.red << 16) | (self.green << 8) | self.blue


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

class NoResource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class AbsoluteFilePath(BaseModel):
    """A file on disk.  The path is never opened here."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["absolute_file_path"] = "absolute_file_path"
    path: str


class EmbeddedData(BaseModel):
    """Resource bytes compiled into the component description."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["embedded_data"] = "embedded_data"
    data: bytes


Resource = Annotated[
    Union[NoResource, AbsoluteFilePath, EmbeddedData],
    Field(discriminator="kind"),
]

RESOURCE_TYPES = (NoResource, AbsoluteFilePath, EmbeddedData)


# ---------------------------------------------------------------------------
# Path segments
# ---------------------------------------------------------------------------

class BuiltinStruct(BaseModel):
    """Base for built-in aggregate shapes that can be built from bindings.

    Subclasses list their bindable fields in ``field_types``.
    """

    field_types: ClassVar[dict[str, NativeType]] = {}

    @classmethod
    def fields(cls) -> dict[str, FieldAccessor]:
        """Field table: field name -> typed field accessor."""
        from ._values import FieldAccessor

        return {
            name: FieldAccessor(name=name, native_type=native)
            for name, native in cls.field_types.items()
        }


class PathLineTo(BuiltinStruct):
    kind: Literal["line_to"] = "line_to"
    x: float = 0.0
    y: float = 0.0

    field_types: ClassVar[dict[str, NativeType]] = {
        "x": NativeType.F32,
        "y": NativeType.F32,
    }


class PathArcTo(BuiltinStruct):
    kind: Literal["arc_to"] = "arc_to"
    x: float = 0.0
    y: float = 0.0
    radius_x: float = 0.0
    radius_y: float = 0.0
    x_rotation: float = 0.0
    large_arc: bool = False
    sweep: bool = False

    field_types: ClassVar[dict[str, NativeType]] = {
        "x": NativeType.F32,
        "y": NativeType.F32,
        "radius_x": NativeType.F32,
        "radius_y": NativeType.F32,
        "x_rotation": NativeType.F32,
        "large_arc": NativeType.BOOL,
        "sweep": NativeType.BOOL,
    }


PathElement = Annotated[
    Union[PathLineTo, PathArcTo],
    Field(discriminator="kind"),
]

PATH_ELEMENT_TYPES = (PathLineTo, PathArcTo)
