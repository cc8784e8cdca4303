# FILE: app/agents/adversary_review.py
"""
Adversary review - red-teams a complete spec before approval.

Looks for ambiguity, missing constraints, contradictions, security gaps and
untestable scenarios. The result feeds only the outcome evaluator.

INVARIANT: approved is False whenever any blocker is present, whatever the
           backend claims.
INVARIANT: backend failure never raises. It yields approved=False with one
           warning asking for manual review.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.simulator.backend import ReasoningBackend, reason_structured
from app.specs.errors import BackendUnavailableError
from app.specs.schema import ExecutableSpec
from app.specs.service import AuditEntry, AuditSink

logger = logging.getLogger(__name__)

AGENT_NAME = "AdversaryReview"

SEVERITIES = ("blocker", "warning", "suggestion")
CATEGORIES = ("ambiguity", "missing_constraint", "contradiction", "security", "testability")


# =============================================================================
# Backend response shape
# =============================================================================

class AdversaryReportIssue(BaseModel):
    severity: Literal["blocker", "warning", "suggestion"]
    category: str = "ambiguity"
    description: str
    location: str = ""
    suggestion: str = ""


class AdversaryReport(BaseModel):
    approved: bool = False
    issues: List[AdversaryReportIssue] = Field(default_factory=list)
    overallVerdict: str = ""


# =============================================================================
# Result
# =============================================================================

@dataclass
class AdversaryIssue:
    severity: str  # blocker | warning | suggestion
    description: str
    category: str = "ambiguity"
    location: str = ""
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "category": self.category,
            "description": self.description,
            "location": self.location,
            "suggestion": self.suggestion,
        }


@dataclass
class AdversaryReviewResult:
    approved: bool
    issues: List[AdversaryIssue] = field(default_factory=list)
    overall_verdict: str = ""

    def count(self, severity: str) -> int:
        return sum(1 for i in self.issues if i.severity == severity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "approved": self.approved,
            "issues": [i.to_dict() for i in self.issues],
            "overallVerdict": self.overall_verdict,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AdversaryReviewResult":
        """Lenient parse; issues with an unknown severity are dropped."""
        data = data or {}
        issues = []
        for raw in data.get("issues") or []:
            if not isinstance(raw, dict) or raw.get("severity") not in SEVERITIES:
                continue
            issues.append(AdversaryIssue(
                severity=raw["severity"],
                description=str(raw.get("description", "")),
                category=str(raw.get("category", "ambiguity")),
                location=str(raw.get("location", "")),
                suggestion=str(raw.get("suggestion", "")),
            ))
        return cls(
            approved=bool(data.get("approved", False)),
            issues=issues,
            overall_verdict=str(data.get("overallVerdict", data.get("overall_verdict", ""))),
        )


def _manual_review_result() -> AdversaryReviewResult:
    return AdversaryReviewResult(
        approved=False,
        issues=[AdversaryIssue(
            severity="warning",
            category="ambiguity",
            description="Could not complete adversary review, manual review required",
            location="entire spec",
            suggestion="Re-run adversary review or perform manual review",
        )],
        overall_verdict="Adversary review failed. Please re-run.",
    )


# =============================================================================
# Prompt
# =============================================================================

ADVERSARY_SYSTEM_PROMPT = """You are AdversaryReview, a skeptical senior engineer whose job is to FIND PROBLEMS in Executable Specifications before any code is written.

Look for:
1. AMBIGUITY: requirements different engineers would read differently
2. MISSING CONSTRAINTS: critical rules that are implied but not stated
3. CONTRADICTIONS: constraints that conflict with each other or with verification scenarios
4. SECURITY GAPS: operations on user data, permissions, or external systems without explicit auth checks
5. TESTABILITY: verification scenarios that cannot be automated or measured

Severity:
- "blocker": the spec cannot ship without addressing this
- "warning": should be addressed but won't cause a disaster
- "suggestion": nice to have

approved = true only if there are ZERO blocker issues.

Respond ONLY with valid JSON (no markdown fences):
{
  "approved": false,
  "issues": [
    {
      "severity": "blocker|warning|suggestion",
      "category": "ambiguity|missing_constraint|contradiction|security|testability",
      "description": "Specific description of the problem",
      "location": "narrative|contextPointers|constraints|verification|constraints[0]",
      "suggestion": "Concrete action to fix this issue"
    }
  ],
  "overallVerdict": "2-3 sentence honest assessment of the spec quality"
}"""


def build_adversary_prompt(spec: ExecutableSpec) -> str:
    return (
        "Red-team this Executable Specification and find every problem:\n\n"
        f"{json.dumps(spec.to_dict(), indent=2, ensure_ascii=False)}\n\n"
        "Think like the engineer who has to implement it, the security researcher looking "
        "for permission bypasses, and the QA lead writing tests for the scenarios.\n\n"
        "Report all issues you find."
    )


# =============================================================================
# Review
# =============================================================================

async def run_adversary_review(
    spec: ExecutableSpec,
    backend: Optional[ReasoningBackend],
    spec_id: Optional[str] = None,
    audit_sink: Optional[AuditSink] = None,
    timeout_seconds: Optional[float] = None,
) -> AdversaryReviewResult:
    if backend is None:
        logger.warning("[adversary] No reasoning backend; manual review required")
        result = _manual_review_result()
    else:
        try:
            report = await reason_structured(
                backend,
                AdversaryReport,
                ADVERSARY_SYSTEM_PROMPT,
                build_adversary_prompt(spec),
                temperature=0.4,
                max_tokens=4096,
                timeout_seconds=timeout_seconds,
            )
            issues = [
                AdversaryIssue(
                    severity=i.severity,
                    description=i.description,
                    category=i.category,
                    location=i.location,
                    suggestion=i.suggestion,
                )
                for i in report.issues
            ]
            result = AdversaryReviewResult(
                approved=report.approved,
                issues=issues,
                overall_verdict=report.overallVerdict,
            )
        except BackendUnavailableError as e:
            logger.warning("[adversary] Review degraded: %s", e)
            result = _manual_review_result()

    blockers = result.count("blocker")
    if blockers:
        result.approved = False

    reasoning = (
        f"Red-teamed spec: found {len(result.issues)} issues ({blockers} blockers). "
        f"Approved: {result.approved}"
    )
    logger.info("[adversary] %s", reasoning)

    if audit_sink is not None:
        try:
            audit_sink.append(AuditEntry(
                agent_name=AGENT_NAME,
                action="agent.adversaryReview",
                reasoning=reasoning,
                details={
                    "specId": spec_id,
                    "approved": result.approved,
                    "issueCount": len(result.issues),
                    "blockerCount": blockers,
                    "warningCount": result.count("warning"),
                    "categories": sorted({i.category for i in result.issues}),
                    "verdict": result.overall_verdict,
                },
                spec_id=spec_id,
            ))
        except Exception:
            logger.exception("[adversary] Audit write failed (review still returned)")

    return result


__all__ = [
    "AGENT_NAME",
    "AdversaryIssue",
    "AdversaryReport",
    "AdversaryReviewResult",
    "build_adversary_prompt",
    "run_adversary_review",
]
