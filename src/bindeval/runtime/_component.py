"""Component-type descriptors and component instances.

A ``ComponentDescription`` maps symbolic names to slot indices in a
``ComponentInstance``'s slot arena: custom properties first, then custom
signals, then one block per built-in item element.  Every property and
signal of an instance lives in exactly one slot.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bindeval.model.elements import ElementTree
from bindeval.model.types import BuiltinElementType, ValueType

from ._accessors import PropertyAccessor, ValueProperty
from ._items import BUILTIN_ITEMS, ItemRtti
from ._native import Color, NoResource
from ._properties import Property, Signal
from ._values import (
    VOID,
    ArrayValue,
    BoolValue,
    ColorValue,
    NumberValue,
    ObjectValue,
    PathElementsValue,
    ResourceValue,
    StringValue,
    Value,
)

#: Custom properties injected into every repeated component.
REPEATER_INDEX = "index"
REPEATER_MODEL_DATA = "model_data"


def default_value(value_type: ValueType | None) -> Value:
    """Initial value of a custom property of the given declared type."""
    if value_type in (ValueType.INT32, ValueType.FLOAT32, ValueType.LENGTH, ValueType.DURATION):
        return NumberValue(value=0.0)
    if value_type == ValueType.STRING:
        return StringValue(value="")
    if value_type == ValueType.BOOL:
        return BoolValue(value=False)
    if value_type == ValueType.COLOR:
        return ColorValue(color=Color())
    if value_type == ValueType.RESOURCE:
        return ResourceValue(resource=NoResource())
    if value_type == ValueType.ARRAY:
        return ArrayValue()
    if value_type == ValueType.OBJECT:
        return ObjectValue()
    if value_type == ValueType.PATH_ELEMENTS:
        return PathElementsValue()
    return VOID


@dataclass(frozen=True)
class CustomProperty:
    prop: PropertyAccessor
    offset: int
    value_type: ValueType | None = None


@dataclass(frozen=True)
class ItemInfo:
    """A built-in item embedded in a component, starting at slot *offset*."""

    rtti: ItemRtti
    offset: int

    def item_from_component(self, instance: ComponentInstance) -> ItemRef:
        return ItemRef(instance, self.offset, self.rtti.name)


@dataclass
class ComponentDescription:
    """Runtime layout of one component of an element tree.

    *original* is the index of the component in *tree* that this
    description was built from.
    """

    tree: ElementTree
    original: int
    custom_properties: dict[str, CustomProperty] = field(default_factory=dict)
    items: dict[str, ItemInfo] = field(default_factory=dict)
    custom_signals: dict[str, int] = field(default_factory=dict)
    slot_count: int = 0

    @property
    def id(self) -> str:
        return self.tree.component(self.original).id

    def allocate_slots(self) -> list[Property | Signal]:
        slots: list[Property | Signal] = [None] * self.slot_count
        for prop in self.custom_properties.values():
            slots[prop.offset] = Property(default_value(prop.value_type))
        for offset in self.custom_signals.values():
            slots[offset] = Signal()
        for info in self.items.values():
            item_slots = info.rtti.allocate()
            slots[info.offset:info.offset + len(item_slots)] = item_slots
        return slots

    def __repr__(self) -> str:
        return f"ComponentDescription({self.id!r}, slots={self.slot_count})"


class ComponentInstance:
    """A live occurrence of a component: its description plus its slots.

    The description doubles as the instance's runtime type tag.
    """

    __slots__ = ("description", "slots")

    def __init__(self, description: ComponentDescription) -> None:
        self.description = description
        self.slots = description.allocate_slots()

    def __repr__(self) -> str:
        return f"ComponentInstance({self.description.id!r})"


@dataclass(frozen=True)
class ItemRef:
    """View of an item (or the component itself) inside an instance.

    Accessor offsets are relative to *base*.  *item_type* is the built-in
    item name, or None for the component's own custom slots.
    """

    instance: ComponentInstance
    base: int
    item_type: str | None = None

    def slot(self, offset: int) -> Property | Signal:
        return self.instance.slots[self.base + offset]


def build_component_description(
    tree: ElementTree,
    component: int,
    *,
    custom_properties: dict[str, ValueType | None] | None = None,
    custom_signals: list[str] | None = None,
    repeated: bool = False,
    checked_conversions: bool = False,
) -> ComponentDescription:
    """Lay out the slots of *component* of *tree*.

    Parameters
    ----------
    custom_properties
        Property name -> declared type, in declaration order.
    custom_signals
        Names of signals declared on the component.
    repeated
        Inject the ``index`` and ``model_data`` properties of a repeated
        component.
    checked_conversions
        Make built-in item accessors reject lossy numeric narrowing.
    """
    tree.component(component)  # IndexError for an unknown component
    description = ComponentDescription(tree=tree, original=component)
    offset = 0

    declared: dict[str, ValueType | None] = {}
    if repeated:
        declared[REPEATER_INDEX] = ValueType.INT32
        declared[REPEATER_MODEL_DATA] = None
    declared.update(custom_properties or {})

    for name, value_type in declared.items():
        description.custom_properties[name] = CustomProperty(
            prop=ValueProperty(name), offset=offset, value_type=value_type,
        )
        offset += 1

    for name in custom_signals or []:
        if name in description.custom_signals:
            raise ValueError(f"Duplicate custom signal {name!r}")
        description.custom_signals[name] = offset
        offset += 1

    for index in tree.component_elements(component):
        elem = tree.elements[index]
        if not isinstance(elem.base_type, BuiltinElementType):
            continue
        item_cls = BUILTIN_ITEMS.get(elem.base_type.name)
        if item_cls is None:
            raise ValueError(
                f"Element {elem.id!r} has unknown built-in type {elem.base_type.name!r}"
            )
        if elem.id in description.items:
            raise ValueError(f"Duplicate element id {elem.id!r} in component {description.id!r}")
        rtti = item_cls.rtti(checked=checked_conversions)
        description.items[elem.id] = ItemInfo(rtti=rtti, offset=offset)
        offset += rtti.slot_count

    description.slot_count = offset
    return description
