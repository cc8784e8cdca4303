# app/simulator/__init__.py
"""
Pre-code simulator.

Scores an ExecutableSpec before any code is written: completeness,
ambiguity, contradiction and testability, folded into one coverage score.

Usage:
    from app.simulator import simulate_spec

    result = await simulate_spec(spec, spec_id=record.spec_id, audit_sink=SqlAuditSink(db))
    if not result.passed:
        for failure in result.failures:
            print(failure.scenario, failure.reason)

Exports:
    - simulate_spec, compute_coverage_score: aggregator
    - check_completeness, check_testability, check_ambiguity, check_contradiction: the four checks
    - detect_ambiguity, detect_contradictions, calculate_coverage_score,
      detect_missing_error_paths, validate_testability, simulate_document: rule/dictionary library
    - ReasoningBackend, LlmReasoningBackend, default_backend: reasoning tier
"""

from .types import CheckResult, ScenarioFailure, SimulatorChecks, SimulatorResult

# Checks
from .completeness import check_completeness
from .testability import check_testability, validate_testability, TestabilityMapping
from .ambiguity import AMBIGUOUS_TERMS, AmbiguityIssue, check_ambiguity, detect_ambiguity, is_ambiguous
from .contradiction import Contradiction, check_contradiction, detect_contradictions

# Compiled-document coverage
from .coverage import (
    CoverageResult,
    RequirementCoverage,
    calculate_coverage_score,
    detect_missing_error_paths,
    simulate_document,
)

# Reasoning tier
from .backend import (
    BackendUnavailableError,
    LlmReasoningBackend,
    ReasoningBackend,
    default_backend,
)

# Aggregator
from .runner import compute_coverage_score, simulate_spec

__all__ = [
    "CheckResult",
    "ScenarioFailure",
    "SimulatorChecks",
    "SimulatorResult",
    "check_completeness",
    "check_testability",
    "validate_testability",
    "TestabilityMapping",
    "AMBIGUOUS_TERMS",
    "AmbiguityIssue",
    "check_ambiguity",
    "detect_ambiguity",
    "is_ambiguous",
    "Contradiction",
    "check_contradiction",
    "detect_contradictions",
    "CoverageResult",
    "RequirementCoverage",
    "calculate_coverage_score",
    "detect_missing_error_paths",
    "simulate_document",
    "BackendUnavailableError",
    "LlmReasoningBackend",
    "ReasoningBackend",
    "default_backend",
    "compute_coverage_score",
    "simulate_spec",
]
