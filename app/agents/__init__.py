# app/agents/__init__.py
"""Review agents that run against a complete spec."""

from .adversary_review import (
    AdversaryIssue,
    AdversaryReport,
    AdversaryReviewResult,
    run_adversary_review,
)

__all__ = ["AdversaryIssue", "AdversaryReport", "AdversaryReviewResult", "run_adversary_review"]
