# app/observability/__init__.py
"""Post-hoc quality scoring of accepted specs."""

from .outcome_evaluator import (
    WEIGHTS,
    SpecQualityScores,
    evaluate_and_persist,
    evaluate_spec,
    persist_scores,
)

__all__ = ["WEIGHTS", "SpecQualityScores", "evaluate_and_persist", "evaluate_spec", "persist_scores"]
