# FILE: tests/test_spec_service.py
"""Tests for app/specs/service.py"""

import pytest

from app.specs.approval import approve_spec
from app.specs.errors import SpecConflictError, SpecNotFoundError
from app.specs.schema import ExecutableSpec, Narrative
from app.specs.service import (
    AuditEntry,
    SqlAuditSink,
    create_spec_record,
    get_spec_body,
    list_audit_entries,
    list_specs,
    lock_spec_if_unlocked,
    require_spec,
    save_new_version,
    update_draft,
    update_spec_scores,
)
from app.specs.models import utcnow


class TestSpecRecords:
    def test_create_and_read_back(self, db_session, good_spec):
        record = create_spec_record(db_session, good_spec, feature_id="bulk-delete")
        assert record.status == "draft"
        assert record.version == "1.0.0"
        assert record.title == "Bulk delete archived projects"
        assert get_spec_body(require_spec(db_session, record.spec_id)) == good_spec

    def test_require_unknown(self, db_session):
        with pytest.raises(SpecNotFoundError):
            require_spec(db_session, "nope")

    def test_list_filters(self, db_session, good_spec):
        create_spec_record(db_session, good_spec, feature_id="a")
        create_spec_record(db_session, good_spec, feature_id="b")
        assert [r.feature_id for r in list_specs(db_session, feature_id="a")] == ["a"]
        assert len(list_specs(db_session, status="draft")) == 2


class TestLockedSpecsAreWriteOnce:
    def test_update_draft_in_place(self, db_session, good_spec):
        record = create_spec_record(db_session, good_spec)
        edited = ExecutableSpec(narrative=Narrative(title="Renamed feature"))
        updated = update_draft(db_session, record.spec_id, edited)
        assert updated.title == "Renamed feature"

    def test_update_locked_conflicts(self, db_session, good_spec):
        record = create_spec_record(db_session, good_spec)
        approve_spec(db_session, record.spec_id, approved_by="alice")
        with pytest.raises(SpecConflictError):
            update_draft(db_session, record.spec_id, ExecutableSpec())
        db_session.expire_all()
        assert get_spec_body(require_spec(db_session, record.spec_id)) == good_spec

    def test_save_new_version_leaves_locked_row(self, db_session, good_spec):
        record = create_spec_record(db_session, good_spec, feature_id="bulk-delete")
        receipt = approve_spec(db_session, record.spec_id, approved_by="alice")

        new = save_new_version(db_session, record.spec_id, ExecutableSpec(narrative=Narrative(title="v2")))

        assert new.spec_id != record.spec_id
        assert new.version == "1.0.1"
        assert new.parent_spec_id == record.spec_id
        assert new.status == "draft"
        db_session.expire_all()
        assert require_spec(db_session, record.spec_id).content_hash == receipt.content_hash

    def test_conditional_lock_only_wins_once(self, db_session, good_spec):
        record = create_spec_record(db_session, good_spec)
        now = utcnow()
        assert lock_spec_if_unlocked(db_session, record.spec_id, "a", now, "h1") == 1
        assert lock_spec_if_unlocked(db_session, record.spec_id, "b", now, "h2") == 0


class TestScoresAndAudit:
    def test_scores_written_together(self, db_session, good_spec):
        record = create_spec_record(db_session, good_spec)
        scores = {
            "completeness_score": 100,
            "grounding_score": 100,
            "testability_score": 100,
            "adversarial_score": 95,
            "overall_score": 99,
        }
        assert update_spec_scores(db_session, record.spec_id, scores) == 1
        db_session.expire_all()
        stored = require_spec(db_session, record.spec_id)
        assert (stored.adversarial_score, stored.overall_score) == (95, 99)

    def test_audit_sink_appends(self, db_session):
        sink = SqlAuditSink(db_session)
        entry_id = sink.append(AuditEntry(agent_name="Test", action="x.run", details={"n": 1}, spec_id="s1"))
        entries = list_audit_entries(db_session, spec_id="s1")
        assert [e.id for e in entries] == [entry_id]
        assert entries[0].details == {"n": 1}
