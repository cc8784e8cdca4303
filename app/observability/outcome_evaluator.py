# FILE: app/observability/outcome_evaluator.py
"""
Outcome evaluator - quality scores for an accepted spec.

Scores (all 0-100):
    completeness_score  - weighted structural credit
    grounding_score     - % of context pointers with both source and snippet
    testability_score   - % of scenarios with a name and given/when/then
    adversarial_score   - 100 minus adversary review deductions
    overall_score       - weighted blend of the four

Separate from the pre-code simulator on purpose: the simulator estimates
risk before code exists, this scores the artifact that was accepted. Their
formulas and weight tables are not shared.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict

from sqlalchemy.orm import Session

from app.agents.adversary_review import AdversaryReviewResult
from app.helpers.scoring import round_half_up
from app.specs.schema import ExecutableSpec
from app.specs.service import update_spec_scores

logger = logging.getLogger(__name__)


WEIGHTS: Dict[str, float] = {
    "completeness": 0.30,
    "grounding": 0.25,
    "testability": 0.25,
    "adversarial": 0.20,
}

# Completeness credit
NARRATIVE_POINTS = {"title": 14, "objective": 13, "rationale": 13}
LAYER_POINTS = 20
FULL_CREDIT_POINTERS = 3
FULL_CREDIT_CONSTRAINTS = 2
FULL_CREDIT_SCENARIOS = 3

# Adversarial deductions
BLOCKER_PENALTY = 20
WARNING_PENALTY = 5


@dataclass
class SpecQualityScores:
    completeness_score: int
    grounding_score: int
    testability_score: int
    adversarial_score: int
    overall_score: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def score_completeness(spec: ExecutableSpec) -> int:
    earned = 0.0
    narrative = spec.narrative
    if (narrative.title or "").strip():
        earned += NARRATIVE_POINTS["title"]
    if (narrative.objective or "").strip():
        earned += NARRATIVE_POINTS["objective"]
    if (narrative.rationale or "").strip():
        earned += NARRATIVE_POINTS["rationale"]

    earned += min(len(spec.context_pointers) / FULL_CREDIT_POINTERS, 1) * LAYER_POINTS
    earned += min(len(spec.constraints) / FULL_CREDIT_CONSTRAINTS, 1) * LAYER_POINTS
    earned += min(len(spec.verification) / FULL_CREDIT_SCENARIOS, 1) * LAYER_POINTS

    return round_half_up(min(earned, 100))


def score_grounding(spec: ExecutableSpec) -> int:
    pointers = spec.context_pointers
    if not pointers:
        return 0
    cited = sum(1 for p in pointers if (p.source or "").strip() and (p.snippet or "").strip())
    return round_half_up(cited / len(pointers) * 100)


def score_testability(spec: ExecutableSpec) -> int:
    scenarios = spec.verification
    if not scenarios:
        return 0
    complete = sum(
        1 for s in scenarios
        if s.given and s.when and s.then and (s.scenario or "").strip()
    )
    return round_half_up(complete / len(scenarios) * 100)


def score_adversarial(review: AdversaryReviewResult) -> int:
    if review.approved and not review.issues:
        return 100
    deduction = review.count("blocker") * BLOCKER_PENALTY + review.count("warning") * WARNING_PENALTY
    return max(0, 100 - deduction)


def evaluate_spec(spec: ExecutableSpec, review: AdversaryReviewResult) -> SpecQualityScores:
    completeness = score_completeness(spec)
    grounding = score_grounding(spec)
    testability = score_testability(spec)
    adversarial = score_adversarial(review)

    overall = round_half_up(
        completeness * WEIGHTS["completeness"]
        + grounding * WEIGHTS["grounding"]
        + testability * WEIGHTS["testability"]
        + adversarial * WEIGHTS["adversarial"]
    )

    return SpecQualityScores(
        completeness_score=completeness,
        grounding_score=grounding,
        testability_score=testability,
        adversarial_score=adversarial,
        overall_score=overall,
    )


def persist_scores(db: Session, spec_id: str, scores: SpecQualityScores) -> bool:
    """Write all five scores together. Returns False (and logs) on failure; never raises."""
    try:
        updated = update_spec_scores(db, spec_id, scores.to_dict())
    except Exception:
        logger.exception("[outcome_evaluator] Failed to persist scores for spec %s", spec_id)
        return False
    if updated == 0:
        logger.warning("[outcome_evaluator] No spec row %s to attach scores to", spec_id)
        return False
    return True


def evaluate_and_persist(
    db: Session,
    spec_id: str,
    spec: ExecutableSpec,
    review: AdversaryReviewResult,
) -> SpecQualityScores:
    scores = evaluate_spec(spec, review)
    persist_scores(db, spec_id, scores)
    logger.info("[outcome_evaluator] spec=%s overall=%s", spec_id, scores.overall_score)
    return scores


__all__ = [
    "WEIGHTS",
    "SpecQualityScores",
    "score_completeness",
    "score_grounding",
    "score_testability",
    "score_adversarial",
    "evaluate_spec",
    "persist_scores",
    "evaluate_and_persist",
]
