# FILE: app/specs/__init__.py
"""
Specs Module

Document model, canonical hashing, compilation, storage and the approval
gate for executable specifications.

Usage:
    from app.specs import ExecutableSpec, create_spec_record, approve_spec

    spec = ExecutableSpec.from_dict(payload)
    record = create_spec_record(db, spec, feature_id="bulk-delete")
    receipt = approve_spec(db, record.spec_id, approved_by="lead@example.com")

The HTTP router lives in app.specs.router and is imported by main.py.
"""

# Errors
from .errors import (
    SpecError,
    SpecValidationError,
    SpecNotFoundError,
    SpecConflictError,
    BackendUnavailableError,
    PersistenceError,
)

# Document model
from .schema import (
    SpecStatus,
    ConstraintSeverity,
    RequirementPriority,
    Narrative,
    ContextPointer,
    SpecConstraint,
    VerificationScenario,
    ExecutableSpec,
    ContextSource,
    SpecContext,
    AcceptanceCriterion,
    Requirement,
    Constraint,
    Risk,
    SpecLayers,
    SpecDocument,
    spec_to_markdown,
)

# Hashing
from .canonical import (
    canonical_json_bytes,
    compute_spec_hash,
    verify_hash,
    compute_content_hash,
)

# Compilation
from .compiler import (
    INITIAL_VERSION,
    StructureValidationResult,
    bump_version,
    compile_spec,
    validate_spec_structure,
)
from .gherkin import GherkinValidationResult, spec_to_gherkin, validate_gherkin

# Storage
from .models import SpecRecord, AuditLogRecord
from .service import (
    AuditEntry,
    AuditSink,
    SqlAuditSink,
    list_audit_entries,
    create_spec_record,
    get_spec,
    require_spec,
    list_specs,
    get_spec_body,
    update_draft,
    save_new_version,
    lock_spec_if_unlocked,
    update_spec_scores,
)

# Approval
from .approval import ApprovalReceipt, approve_spec

__all__ = [
    "SpecError",
    "SpecValidationError",
    "SpecNotFoundError",
    "SpecConflictError",
    "BackendUnavailableError",
    "PersistenceError",
    "SpecStatus",
    "ConstraintSeverity",
    "RequirementPriority",
    "Narrative",
    "ContextPointer",
    "SpecConstraint",
    "VerificationScenario",
    "ExecutableSpec",
    "ContextSource",
    "SpecContext",
    "AcceptanceCriterion",
    "Requirement",
    "Constraint",
    "Risk",
    "SpecLayers",
    "SpecDocument",
    "spec_to_markdown",
    "canonical_json_bytes",
    "compute_spec_hash",
    "verify_hash",
    "compute_content_hash",
    "INITIAL_VERSION",
    "StructureValidationResult",
    "bump_version",
    "compile_spec",
    "validate_spec_structure",
    "GherkinValidationResult",
    "spec_to_gherkin",
    "validate_gherkin",
    "SpecRecord",
    "AuditLogRecord",
    "AuditEntry",
    "AuditSink",
    "SqlAuditSink",
    "list_audit_entries",
    "create_spec_record",
    "get_spec",
    "require_spec",
    "list_specs",
    "get_spec_body",
    "update_draft",
    "save_new_version",
    "lock_spec_if_unlocked",
    "update_spec_scores",
    "ApprovalReceipt",
    "approve_spec",
]
