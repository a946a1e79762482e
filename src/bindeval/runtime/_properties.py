"""Property and signal runtime.

A minimal stand-in for the reactive property engine: a ``Property`` holds
either a value or a binding, and a ``Signal`` fans an emission out to its
connected handlers.  Each lives in one slot of a component instance.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from ._context import EvaluationContext


class PropertyAnimation(BaseModel):
    """How a property transitions to a newly set value."""

    duration_ms: int = Field(default=0, ge=0)
    loop_count: int = Field(default=0, ge=0)
    easing: str = "linear"


Binding = Callable[["EvaluationContext"], Any]
SignalHandler = Callable[["EvaluationContext", tuple], None]


class Property:
    """A slot holding a native value or a lazy binding producing one.

    A binding is re-evaluated on every ``get`` against the reading context.
    """

    __slots__ = ("_value", "_binding", "animation")

    def __init__(self, value: Any = None) -> None:
        self._value = value
        self._binding: Binding | None = None
        self.animation: PropertyAnimation | None = None

    @property
    def has_binding(self) -> bool:
        return self._binding is not None

    def get(self, context: EvaluationContext) -> Any:
        if self._binding is not None:
            return self._binding(context)
        return self._value

    def set(self, value: Any, animation: PropertyAnimation | None = None) -> None:
        """Store *value*, dropping any binding."""
        self._binding = None
        self._value = value
        self.animation = animation

    def set_binding(self, binding: Binding, animation: PropertyAnimation | None = None) -> None:
        self._binding = binding
        self.animation = animation

    def __repr__(self) -> str:
        if self._binding is not None:
            return "Property(<binding>)"
        return f"Property({self._value!r})"


class Signal:
    """Fire-and-forget event channel."""

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: list[SignalHandler] = []

    def connect(self, handler: SignalHandler) -> None:
        self._handlers.append(handler)

    def emit(self, context: EvaluationContext, args: tuple = ()) -> None:
        for handler in list(self._handlers):
            handler(context, args)

    def __repr__(self) -> str:
        return f"Signal({len(self._handlers)} handler(s))"
