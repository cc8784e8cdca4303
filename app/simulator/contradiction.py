# FILE: app/simulator/contradiction.py
"""
Contradiction check - do any requirements fight the constraints?

Rule tier compares every requirement against every constraint (keyword
matching on lower-cased text). Pairs are neither ordered nor de-duplicated;
identical pairs report twice. Specs are small so O(R x C) is fine.

Backend tier asks for whole-spec contradictions. With no backend, or when
it fails, the check degrades to passed=True, score=75; rule findings are
still reported. RULE_PENALTIES score the compiled-document path.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from app.specs.errors import BackendUnavailableError
from app.specs.schema import ExecutableSpec

from .backend import ContradictionReport, ReasoningBackend, reason_structured
from .prompts import CONTRADICTION_SYSTEM_PROMPT, build_contradiction_prompt
from .types import CheckResult

logger = logging.getLogger(__name__)


# =============================================================================
# Rule tier
# =============================================================================

REALTIME_KEYWORDS = ("real-time", "realtime", "instant")
THROTTLE_KEYWORDS = ("bandwidth", "throttl", "rate limit", "rate-limit")
OFFLINE_KEYWORDS = ("offline",)
NETWORK_KEYWORDS = ("api", "network", "internet")
ENCRYPTION_KEYWORDS = ("encrypt",)

LATENCY_BUDGET_RE = re.compile(r"(\d+)\s?ms\b")
MIN_ENCRYPTED_LATENCY_MS = 50


@dataclass
class Contradiction:
    requirement_id: str
    constraint_id: str
    description: str
    severity: str  # critical | warning

    def to_dict(self) -> Dict[str, str]:
        return {
            "requirement_id": self.requirement_id,
            "constraint_id": self.constraint_id,
            "description": self.description,
            "severity": self.severity,
        }


def _has_any(text: str, keywords: Sequence[str]) -> bool:
    return any(k in text for k in keywords)


def detect_contradictions(
    requirements: Sequence[Dict[str, str]],
    constraints: Sequence[Dict[str, str]],
) -> List[Contradiction]:
    """Pairwise rule scan over {id, text} items."""
    found: List[Contradiction] = []

    for req in requirements:
        req_id = req.get("id", "")
        req_text = (req.get("text") or "").lower()
        for con in constraints:
            con_id = con.get("id", "")
            con_text = (con.get("text") or "").lower()

            if _has_any(req_text, REALTIME_KEYWORDS) and _has_any(con_text, THROTTLE_KEYWORDS):
                found.append(Contradiction(
                    requirement_id=req_id,
                    constraint_id=con_id,
                    description=f'REQ "{req_id}" demands real-time behavior but CON "{con_id}" may impose rate limits',
                    severity="warning",
                ))

            if _has_any(req_text, OFFLINE_KEYWORDS) and _has_any(con_text, NETWORK_KEYWORDS):
                found.append(Contradiction(
                    requirement_id=req_id,
                    constraint_id=con_id,
                    description=f'REQ "{req_id}" requires offline capability but CON "{con_id}" requires network',
                    severity="critical",
                ))

            if _has_any(req_text, ENCRYPTION_KEYWORDS):
                match = LATENCY_BUDGET_RE.search(con_text)
                if match and int(match.group(1)) < MIN_ENCRYPTED_LATENCY_MS:
                    found.append(Contradiction(
                        requirement_id=req_id,
                        constraint_id=con_id,
                        description=(
                            f'REQ "{req_id}" requires encryption but CON "{con_id}" '
                            f"demands <{match.group(1)}ms, which may be contradictory"
                        ),
                        severity="warning",
                    ))

    return found


def spec_rule_items(spec: ExecutableSpec) -> Tuple[List[Dict[str, str]], List[Dict[str, str]]]:
    """Requirements are the objective plus every `then` step; constraints are the rules."""
    requirements: List[Dict[str, str]] = []
    if spec.narrative.objective:
        requirements.append({"id": "narrative.objective", "text": spec.narrative.objective})
    for i, scenario in enumerate(spec.verification):
        for j, step in enumerate(scenario.then):
            requirements.append({"id": f"verification[{i}].then[{j}]", "text": step})

    constraints = [
        {"id": f"constraints[{i}].rule", "text": c.rule}
        for i, c in enumerate(spec.constraints)
    ]
    return requirements, constraints


# =============================================================================
# Scoring
# =============================================================================

RULE_PENALTIES = {"critical": 25, "warning": 10}
BACKEND_PENALTY = 25
NO_CONTRADICTION_SCORE = 95
DEGRADED_SCORE = 75

DEGRADED_ISSUE = "Contradiction check could not be completed (reasoning backend unavailable)"
DEGRADED_SUGGESTION = "Re-run the simulation once the reasoning backend is reachable"


def _rule_pairs(found: List[Contradiction]) -> Tuple[List[str], List[str]]:
    issues = [f"[{c.severity}] {c.requirement_id} vs {c.constraint_id}: {c.description}" for c in found]
    suggestions = [
        f"Reconcile {c.requirement_id} with {c.constraint_id} or relax one of them"
        for c in found
    ]
    return issues, suggestions


def _degraded(rule_issues: List[str], rule_suggestions: List[str]) -> CheckResult:
    return CheckResult(
        passed=True,
        score=DEGRADED_SCORE,
        issues=[DEGRADED_ISSUE] + rule_issues,
        suggestions=[DEGRADED_SUGGESTION] + rule_suggestions,
    )


async def check_contradiction(
    spec: ExecutableSpec,
    backend: Optional[ReasoningBackend] = None,
    timeout_seconds: Optional[float] = None,
) -> CheckResult:
    requirements, constraints = spec_rule_items(spec)
    rule_findings = detect_contradictions(requirements, constraints)
    rule_issues, rule_suggestions = _rule_pairs(rule_findings)

    if backend is None:
        logger.warning("[simulator] Contradiction check has no reasoning backend; degrading")
        return _degraded(rule_issues, rule_suggestions)

    try:
        report = await reason_structured(
            backend,
            ContradictionReport,
            CONTRADICTION_SYSTEM_PROMPT,
            build_contradiction_prompt(spec.to_dict()),
            timeout_seconds=timeout_seconds,
        )
    except BackendUnavailableError as e:
        logger.warning("[simulator] Contradiction backend degraded: %s", e)
        return _degraded(rule_issues, rule_suggestions)

    issues = [f"{c.itemA} vs {c.itemB}: {c.description}" for c in report.contradictions] + rule_issues
    suggestions = [c.resolution for c in report.contradictions] + rule_suggestions

    count = len(report.contradictions) + len(rule_findings)
    score = NO_CONTRADICTION_SCORE if count == 0 else max(0, 100 - BACKEND_PENALTY * count)
    return CheckResult(passed=count == 0, score=score, issues=issues, suggestions=suggestions)


__all__ = [
    "Contradiction",
    "RULE_PENALTIES",
    "DEGRADED_SCORE",
    "detect_contradictions",
    "spec_rule_items",
    "check_contradiction",
]
