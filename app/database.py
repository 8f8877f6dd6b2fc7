"""
database.py
-----------

SQLAlchemy engine and session factory for the product store.

Route handlers are plain ``def`` functions that FastAPI runs in its
thread pool, so the synchronous ORM is used.  SQLite needs
``check_same_thread=False`` for that, and an in-memory SQLite URL is
pinned to a single connection so every thread sees the same database
(this is what the test-suite uses).
"""

from __future__ import annotations

import json
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.logging_config import logger

settings = get_settings()


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20, "pool_recycle": 1800}
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.database_url, future=True, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def init_db() -> None:
    """Create missing tables and indexes."""
    # importar los modelos para que queden registrados en Base.metadata
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(json.dumps({"event": "database_ready", "tables": sorted(Base.metadata.tables)}))


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a session that is always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_database() -> None:
    """Raise if the database cannot answer a trivial query."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
