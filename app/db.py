# FILE: app/db.py
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

# Default store: ./data/spec_engine.db relative to the working directory.
# SPEC_ENGINE_DATABASE_URL points it anywhere SQLAlchemy can reach.
DATABASE_URL = os.getenv("SPEC_ENGINE_DATABASE_URL", "sqlite:///./data/spec_engine.db")
SQL_ECHO = os.getenv("SPEC_ENGINE_SQL_ECHO", "").lower() in ("1", "true", "yes")

_is_sqlite = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    # FastAPI runs sync endpoints in a threadpool; SQLite must allow that
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    echo=SQL_ECHO,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _ensure_sqlite_dir(url: str) -> None:
    path = url[len("sqlite:///"):]
    if _is_sqlite and path and path != ":memory:":
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)


def init_db():
    """Create the specs and audit_log tables. Call once at startup."""
    _ensure_sqlite_dir(DATABASE_URL)
    from app.specs import models  # noqa: F401  (registers tables on Base)
    Base.metadata.create_all(bind=engine)
