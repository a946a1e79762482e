"""Evaluation contexts and context resolution.

An ``EvaluationContext`` pairs a live component instance with the context
of the instance that encloses it (for sub-components and repeater
instantiations).  ``resolve_element`` walks that chain outward to find the
instance that actually owns a given element.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, NamedTuple

from ._component import ComponentDescription, ComponentInstance
from ._errors import ContextChainError, UnresolvedReferenceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EvaluationContext:
    component: ComponentInstance
    parent_context: EvaluationContext | None = None

    @property
    def depth(self) -> int:
        """Number of enclosing contexts above this one."""
        return sum(1 for _ in self.chain()) - 1

    def chain(self) -> Iterator[EvaluationContext]:
        """This context, then each enclosing one, outward."""
        context: EvaluationContext | None = self
        while context is not None:
            yield context
            context = context.parent_context


class Resolution(NamedTuple):
    """The instance, descriptor and context that own an element."""

    instance: ComponentInstance
    description: ComponentDescription
    context: EvaluationContext


def resolve_element(
    element: int,
    context: EvaluationContext,
    *,
    max_depth: int = 64,
    expression: Any = None,
) -> Resolution:
    """Find the instance owning *element*, starting from *context*.

    The element's enclosing component is compared against the runtime type
    of each instance in the chain; the first match owns the element.
    """
    tree = context.component.description.tree
    try:
        elem = tree.element(element)
    except IndexError:
        raise UnresolvedReferenceError(
            f"Unknown element index {element}", expression=expression,
        ) from None
    owner = elem.enclosing_component

    visited: list[str] = []
    current = context
    for hops in range(max_depth + 1):
        description = current.component.description
        if description.original == owner:
            if hops:
                logger.debug(
                    "Resolved %r to component %r after %d hop(s)",
                    elem.id, description.id, hops,
                )
            return Resolution(current.component, description, current)

        visited.append(description.id)
        if current.parent_context is None:
            raise ContextChainError(
                f"No enclosing context owns element {elem.id!r} "
                f"(component {tree.component(owner).id!r}); "
                f"searched {' -> '.join(visited)}",
                element=elem.id,
                expression=expression,
            )
        logger.debug(
            "Element %r not owned by %r, moving to parent context",
            elem.id, description.id,
        )
        current = current.parent_context

    raise ContextChainError(
        f"Context chain deeper than {max_depth} while resolving element {elem.id!r}",
        element=elem.id,
        expression=expression,
    )
