"""Type-erased property accessors.

A ``PropertyAccessor`` hides the storage type of a property behind
get / set / set_binding on an item reference.  The evaluator uses the
same interface for built-in item properties (native storage) and custom
component properties (Value storage).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ._errors import PropertyTypeError
from ._native import NativeType
from ._properties import Property, PropertyAnimation
from ._values import VALUE_TYPES, ConversionError, Value, value_from, value_into

if TYPE_CHECKING:
    from ._component import ItemRef
    from ._context import EvaluationContext


ValueBinding = Callable[["EvaluationContext"], Value]


@runtime_checkable
class PropertyAccessor(Protocol):
    """get / set / set_binding for one property, relative to an item."""

    @property
    def offset(self) -> int: ...

    def get(self, item: ItemRef, context: EvaluationContext) -> Value: ...

    def set(
        self, item: ItemRef, value: Value, animation: PropertyAnimation | None = None,
    ) -> None: ...

    def set_binding(
        self,
        item: ItemRef,
        binding: ValueBinding,
        animation: PropertyAnimation | None = None,
    ) -> None: ...


def _property_slot(item: ItemRef, offset: int, name: str) -> Property:
    slot = item.slot(offset)
    if not isinstance(slot, Property):
        raise PropertyTypeError(
            f"Slot {item.base + offset} is a {type(slot).__name__}, not a property",
            element=item.item_type,
            name=name,
        )
    return slot


class ValueProperty:
    """A custom property storing Values as-is."""

    def __init__(self, name: str, offset: int = 0) -> None:
        self.name = name
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    def get(self, item: ItemRef, context: EvaluationContext) -> Value:
        return _property_slot(item, self._offset, self.name).get(context)

    def set(
        self, item: ItemRef, value: Value, animation: PropertyAnimation | None = None,
    ) -> None:
        if not isinstance(value, VALUE_TYPES):
            raise PropertyTypeError(
                f"Cannot store {type(value).__name__} in custom property",
                name=self.name,
            )
        _property_slot(item, self._offset, self.name).set(value, animation)

    def set_binding(
        self,
        item: ItemRef,
        binding: ValueBinding,
        animation: PropertyAnimation | None = None,
    ) -> None:
        _property_slot(item, self._offset, self.name).set_binding(binding, animation)

    def __repr__(self) -> str:
        return f"ValueProperty({self.name!r}, offset={self._offset})"


class NativeProperty:
    """A built-in item property stored as a native value.

    Values are converted on the way in and out; a mismatched item type or
    an incompatible value is a fatal PropertyTypeError.
    """

    def __init__(
        self,
        owner: str,
        name: str,
        native_type: NativeType,
        offset: int,
        *,
        checked: bool = False,
    ) -> None:
        self.owner = owner
        self.name = name
        self.native_type = native_type
        self._offset = offset
        self.checked = checked

    @property
    def offset(self) -> int:
        return self._offset

    def _slot(self, item: ItemRef) -> Property:
        if item.item_type != self.owner:
            raise PropertyTypeError(
                f"Property '{self.name}' of {self.owner} used on a {item.item_type} item",
                element=item.item_type,
                name=self.name,
            )
        return _property_slot(item, self._offset, self.name)

    def _to_native(self, value: Value) -> object:
        try:
            return value_into(value, self.native_type, checked=self.checked)
        except ConversionError as exc:
            raise PropertyTypeError(
                f"{self.owner}.{self.name} expects {self.native_type.value}: {exc}",
                element=self.owner,
                name=self.name,
            ) from exc

    def get(self, item: ItemRef, context: EvaluationContext) -> Value:
        return value_from(self._slot(item).get(context), self.native_type)

    def set(
        self, item: ItemRef, value: Value, animation: PropertyAnimation | None = None,
    ) -> None:
        slot = self._slot(item)
        slot.set(self._to_native(value), animation)

    def set_binding(
        self,
        item: ItemRef,
        binding: ValueBinding,
        animation: PropertyAnimation | None = None,
    ) -> None:
        self._slot(item).set_binding(
            lambda context: self._to_native(binding(context)), animation,
        )

    def __repr__(self) -> str:
        return (
            f"NativeProperty({self.owner}.{self.name}: {self.native_type.value}, "
            f"offset={self._offset})"
        )
