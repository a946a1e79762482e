"""Evaluator configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EvaluatorSettings(BaseModel):
    """Knobs of an ExpressionEvaluator.

    max_context_depth
        Upper bound on enclosing-context hops while resolving an element.
        Component nesting is shallow in practice; a deeper chain is
        reported as a ContextChainError rather than walked.
    log_errors
        Log fatal errors at the public ``evaluate`` entry point before
        re-raising them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_context_depth: int = Field(default=64, gt=0)
    log_errors: bool = True
