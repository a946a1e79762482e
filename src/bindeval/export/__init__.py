"""bindeval export — text rendering of expression IR.

Public API::

    from bindeval.export import format_expression
    text = format_expression(expr, tree)
"""

from .text import format_expression, format_number

__all__ = ["format_expression", "format_number"]
