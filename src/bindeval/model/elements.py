"""Element tree for the binding IR.

The tree is an arena: elements and components live in two flat lists and
refer to each other by index.  An element's ``enclosing_component`` points
back up at the component that declares it, which makes the logical
structure cyclic.  Because no entry owns another, the cycle is harmless.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, model_validator

from .expressions import Expression
from .types import ComponentElementType, ElementTypeRef


class Element(BaseModel):
    """A node of a component's element tree.

    *enclosing_component* is an index into ``ElementTree.components``;
    *children* are indices into ``ElementTree.elements``.
    """

    id: str
    base_type: ElementTypeRef
    enclosing_component: int
    children: list[int] = []
    bindings: dict[str, Expression] = {}


class Component(BaseModel):
    """A component declared in the tree.

    A repeated sub-component has *parent_element* set to the element of the
    enclosing component that repeats it.
    """

    id: str
    root_element: int
    parent_element: int | None = None


class ElementTree(BaseModel):
    elements: list[Element] = []
    components: list[Component] = []

    @model_validator(mode="after")
    def _index_check(self) -> Self:
        n_elements = len(self.elements)
        n_components = len(self.components)

        for i, elem in enumerate(self.elements):
            if not 0 <= elem.enclosing_component < n_components:
                raise ValueError(
                    f"element {i} ({elem.id!r}) has enclosing_component "
                    f"{elem.enclosing_component} out of range (0..{n_components - 1})"
                )
            for child in elem.children:
                if not 0 <= child < n_elements:
                    raise ValueError(
                        f"element {i} ({elem.id!r}) has child {child} out of range"
                    )
            if isinstance(elem.base_type, ComponentElementType):
                if not 0 <= elem.base_type.component < n_components:
                    raise ValueError(
                        f"element {i} ({elem.id!r}) instantiates unknown "
                        f"component {elem.base_type.component}"
                    )

        for c, comp in enumerate(self.components):
            if not 0 <= comp.root_element < n_elements:
                raise ValueError(
                    f"component {c} ({comp.id!r}) has root_element "
                    f"{comp.root_element} out of range"
                )
            root = self.elements[comp.root_element]
            if root.enclosing_component != c:
                raise ValueError(
                    f"root element {root.id!r} of component {comp.id!r} "
                    f"is enclosed by component {root.enclosing_component}"
                )
            if comp.parent_element is not None and not 0 <= comp.parent_element < n_elements:
                raise ValueError(
                    f"component {c} ({comp.id!r}) has parent_element "
                    f"{comp.parent_element} out of range"
                )
        return self

    # -- Lookups ------------------------------------------------------------

    def element(self, index: int) -> Element:
        if not 0 <= index < len(self.elements):
            raise IndexError(f"element index {index} out of range")
        return self.elements[index]

    def component(self, index: int) -> Component:
        if not 0 <= index < len(self.components):
            raise IndexError(f"component index {index} out of range")
        return self.components[index]

    def is_root_element(self, index: int) -> bool:
        """True if *index* is the root element of its enclosing component."""
        elem = self.element(index)
        return self.components[elem.enclosing_component].root_element == index

    def component_elements(self, component: int) -> list[int]:
        """Indices of all elements enclosed by *component*, in tree order."""
        return [
            i for i, elem in enumerate(self.elements)
            if elem.enclosing_component == component
        ]
