# modules/db.py
"""SQLAlchemy engine and session handling for the snapshot store."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import default_database_url, load_config

log = logging.getLogger(__name__)


def _safe_url(url: str) -> str:
    """URL for logs, password masked."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url.split(":", 1)[0] + "://***"


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # In-memory and file SQLite: one shared connection across threads.
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    # Postgres and friends: pre_ping drops dead pooled connections.
    return {"pool_pre_ping": True}


DATABASE_URL = load_config().db.url
if DATABASE_URL == default_database_url():
    log.warning("db.url.default DATABASE_URL not set; using local SQLite file.")

engine = create_engine(DATABASE_URL, echo=False, future=True, **_engine_options(DATABASE_URL))
log.info(
    "db.engine.ready dialect=%s pool=%s url=%s",
    engine.dialect.name,
    type(engine.pool).__name__,
    _safe_url(DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def is_sqlite() -> bool:
    return engine.dialect.name == "sqlite"


@contextmanager
def session_scope() -> Iterator[Session]:
    """One transaction: commit on success, rollback and re-raise on error."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_models() -> None:
    """Create missing tables (no migrations)."""
    import modules.repo  # noqa: F401 - registers the models

    Base.metadata.create_all(bind=engine)
    log.info("db.models.ready dialect=%s tables=%s", engine.dialect.name, len(Base.metadata.tables))
