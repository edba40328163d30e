# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Database engine — single source of truth for DB connectivity and schema.
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from clubflow.core.config import settings

SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS members (
        id      VARCHAR(36) PRIMARY KEY,
        email   VARCHAR(255) NOT NULL UNIQUE,
        version INTEGER NOT NULL,
        body    TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tracks (
        id        VARCHAR(36) PRIMARY KEY,
        committee VARCHAR(255) NOT NULL,
        version   INTEGER NOT NULL,
        body      TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS courses (
        id        VARCHAR(36) PRIMARY KEY,
        committee VARCHAR(255) NOT NULL,
        version   INTEGER NOT NULL,
        body      TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS announcements (
        id       VARCHAR(36) PRIMARY KEY,
        track_id VARCHAR(36),
        version  INTEGER NOT NULL,
        body     TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS fanout_intents (
        id              VARCHAR(36) PRIMARY KEY,
        announcement_id VARCHAR(36) NOT NULL,
        status          VARCHAR(20) NOT NULL,
        delivered       INTEGER NOT NULL DEFAULT 0,
        failed          INTEGER NOT NULL DEFAULT 0,
        payload         TEXT NOT NULL,
        created_at      VARCHAR(40) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS inbox_deliveries (
        intent_id    VARCHAR(36) NOT NULL,
        member_id    VARCHAR(36) NOT NULL,
        delivered_at VARCHAR(40) NOT NULL,
        PRIMARY KEY (intent_id, member_id)
    )
    """,
)


def build_engine(url: str) -> Engine:
    """Create an engine; SQLite URLs get thread-safe, single-pool settings."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def init_schema(target: Engine) -> None:
    """Create all tables if they do not exist yet."""
    with target.begin() as conn:
        for statement in SCHEMA:
            conn.execute(text(statement))


engine = build_engine(settings.DATABASE_URL)
