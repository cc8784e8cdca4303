# FILE: tests/conftest.py
"""
Pytest configuration for the spec engine test suite.

Configures:
- pytest-asyncio for async test support
- project root on sys.path
- shared fixtures: in-memory SQLite session, sample specs
"""
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

pytest_plugins = ["pytest_asyncio"]


def make_session_factory():
    from app.db import Base
    from app.specs import models  # noqa: F401  (register tables)

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session_factory():
    return make_session_factory()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def good_spec_dict():
    """A spec every deterministic check is happy with."""
    return {
        "narrative": {
            "title": "Bulk delete archived projects",
            "objective": "Let workspace admins delete up to 500 archived projects in one request",
            "rationale": "Admins currently delete projects one by one, which takes hours for large workspaces",
        },
        "contextPointers": [
            {"source": "Jira OPS-42", "snippet": "Deleting 300 projects took me all afternoon", "link": "https://jira.example/OPS-42"},
            {"source": "Slack #admins", "snippet": "Need a way to clean up archived projects in bulk"},
            {"source": "Support ticket 981", "snippet": "Customer asked for mass delete of archived items"},
        ],
        "constraints": [
            {"rule": "Only workspace admins may delete projects", "severity": "critical", "rationale": "Prevents data loss by members"},
            {"rule": "Deletion is soft for 30 days", "severity": "warning", "rationale": "Allows recovery"},
        ],
        "verification": [
            {
                "scenario": "Admin deletes archived projects",
                "given": ["an admin with 3 archived projects"],
                "when": ["the admin deletes all 3 projects"],
                "then": ["the response lists 3 deleted project ids within 2000ms"],
            },
            {
                "scenario": "Member is refused",
                "given": ["a member with 1 archived project"],
                "when": ["the member requests deletion"],
                "then": ["the API returns 403 and no project is deleted"],
            },
            {
                "scenario": "Restore within 30 days",
                "given": ["a project deleted 10 days ago"],
                "when": ["the admin restores it"],
                "then": ["the project status is archived again"],
            },
        ],
    }


@pytest.fixture
def good_spec():
    from app.specs.schema import ExecutableSpec
    return ExecutableSpec.from_dict(good_spec_dict())


@pytest.fixture
def empty_spec():
    from app.specs.schema import ExecutableSpec
    return ExecutableSpec.from_dict({})


@pytest.fixture
def good_spec_data():
    return good_spec_dict()
