"""Built-in item types and their property/signal tables.

Each built-in item is a class with:
- ``PROPERTIES``: property name -> native storage type, in slot order
- ``SIGNALS``: signal names, laid out after the properties
- ``rtti()``: the accessor tables used by the evaluator
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ._accessors import NativeProperty
from ._native import NativeType
from ._properties import Property, Signal
from ._values import default_native


@dataclass(frozen=True)
class ItemRtti:
    """Static accessor tables of one built-in item type.

    Offsets are slot indices relative to the item's first slot.
    """

    name: str
    properties: dict[str, NativeProperty]
    signals: dict[str, int]
    slot_count: int

    def allocate(self) -> list[Property | Signal]:
        """Fresh slots for one item of this type."""
        slots: list[Property | Signal] = [None] * self.slot_count
        for prop in self.properties.values():
            slots[prop.offset] = Property(default_native(prop.native_type))
        for offset in self.signals.values():
            slots[offset] = Signal()
        return slots


class BuiltinItem:
    PROPERTIES: ClassVar[dict[str, NativeType]] = {}
    SIGNALS: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def rtti(cls, *, checked: bool = False) -> ItemRtti:
        properties = {
            name: NativeProperty(cls.__name__, name, native, offset, checked=checked)
            for offset, (name, native) in enumerate(cls.PROPERTIES.items())
        }
        base = len(properties)
        signals = {name: base + i for i, name in enumerate(cls.SIGNALS)}
        return ItemRtti(
            name=cls.__name__,
            properties=properties,
            signals=signals,
            slot_count=base + len(signals),
        )


_GEOMETRY = {
    "x": NativeType.F32,
    "y": NativeType.F32,
    "width": NativeType.F32,
    "height": NativeType.F32,
}


class Rectangle(BuiltinItem):
    """A filled rectangle."""

    PROPERTIES = {**_GEOMETRY, "color": NativeType.COLOR}


class BorderRectangle(BuiltinItem):
    """A rectangle with a border and rounded corners."""

    PROPERTIES = {
        **_GEOMETRY,
        "color": NativeType.COLOR,
        "border_width": NativeType.F32,
        "border_radius": NativeType.F32,
        "border_color": NativeType.COLOR,
    }


class Image(BuiltinItem):
    PROPERTIES = {**_GEOMETRY, "source": NativeType.RESOURCE}


class Text(BuiltinItem):
    PROPERTIES = {
        "x": NativeType.F32,
        "y": NativeType.F32,
        "text": NativeType.STRING,
        "font_family": NativeType.STRING,
        "font_pixel_size": NativeType.F32,
        "color": NativeType.COLOR,
    }


class TouchArea(BuiltinItem):
    """Invisible item reporting pointer input."""

    PROPERTIES = {
        **_GEOMETRY,
        "pressed": NativeType.BOOL,
        "mouse_x": NativeType.F32,
        "mouse_y": NativeType.F32,
    }
    SIGNALS = ("clicked",)


class Path(BuiltinItem):
    """A vector path built from path elements."""

    PROPERTIES = {
        **_GEOMETRY,
        "elements": NativeType.PATH_ELEMENTS,
        "fill_color": NativeType.COLOR,
        "stroke_color": NativeType.COLOR,
        "stroke_width": NativeType.F32,
    }


class Flickable(BuiltinItem):
    PROPERTIES = {
        **_GEOMETRY,
        "viewport_x": NativeType.F32,
        "viewport_y": NativeType.F32,
        "interactive": NativeType.BOOL,
    }


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

BUILTIN_ITEMS: dict[str, type[BuiltinItem]] = {
    "Rectangle": Rectangle,
    "BorderRectangle": BorderRectangle,
    "Image": Image,
    "Text": Text,
    "TouchArea": TouchArea,
    "Path": Path,
    "Flickable": Flickable,
}
