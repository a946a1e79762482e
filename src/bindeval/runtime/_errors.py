"""Fatal evaluation errors.

These signal a defect in an earlier compilation or type-checking phase:
a well-formed component description never produces one.  Each carries
enough context (element id, property name, operator, offending
expression) to track the defect down.
"""

from __future__ import annotations

from typing import Any

from bindeval.export import format_expression


class EvaluationError(Exception):
    """Base class for structural errors raised during evaluation."""

    def __init__(
        self,
        message: str,
        *,
        expression: Any = None,
        element: str | None = None,
        name: str | None = None,
        op: str | None = None,
    ) -> None:
        self.message = message
        self.expression = expression
        self.element = element
        self.name = name
        self.op = op
        super().__init__(self._format())

    def _format(self) -> str:
        details = []
        if self.element is not None:
            details.append(f"element={self.element!r}")
        if self.name is not None:
            details.append(f"name={self.name!r}")
        if self.op is not None:
            details.append(f"op={self.op!r}")
        if self.expression is not None:
            details.append(f"expression={format_expression(self.expression)!r}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"

    def diagnostic(self) -> dict[str, Any]:
        """The error's context as a flat dict, for structured logging."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "element": self.element,
            "name": self.name,
            "op": self.op,
            "expression": (
                format_expression(self.expression)
                if self.expression is not None else None
            ),
        }


class InvalidExpressionError(EvaluationError):
    """An Invalid or Uncompiled placeholder reached the evaluator."""


class UnresolvedReferenceError(EvaluationError):
    """An element, item, property or signal name did not resolve."""


class ContextChainError(EvaluationError):
    """The context chain ran out (or got too deep) before finding the owner."""


class UnsupportedOperationError(EvaluationError):
    """An operator or node was applied to operands it does not support."""


class NotASignalError(EvaluationError):
    """A function call whose callee is not a signal reference."""


class InvalidAssignmentTargetError(EvaluationError):
    """A self-assignment whose left-hand side is not a property reference."""


class UnimplementedError(EvaluationError):
    """A construct the evaluator does not handle in this position."""


class PropertyTypeError(EvaluationError):
    """An accessor or struct field rejected a value of the wrong shape."""
