"""Async engine and session management for the directory store."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings

_REPO_ROOT = Path(__file__).resolve().parents[3]

# Applied on every new SQLite connection. Like toggles from many browsers
# contend for the same file, so writers wait instead of failing immediately.
_SQLITE_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _resolve_database_url(raw_url: str) -> str:
    """Anchor relative SQLite paths at the repository root and create the folder."""

    url = make_url(raw_url)
    if not url.drivername.startswith("sqlite") or not url.database or url.database == ":memory:":
        return raw_url

    db_path = Path(url.database)
    if not db_path.is_absolute():
        db_path = (_REPO_ROOT / db_path).resolve()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return url.set(database=str(db_path)).render_as_string(hide_password=False)


def _apply_sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        for pragma in _SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def build_engine(raw_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """Create an async engine; SQLite connections get the directory PRAGMAs."""

    url = _resolve_database_url(raw_url)
    engine = create_async_engine(url, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _apply_sqlite_pragmas)
    return engine


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings().database_url, pool_pre_ping=True)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session from the shared factory; it is closed on exit."""

    async with get_session_factory()() as session:
        yield session


async def init_models(engine: AsyncEngine | None = None) -> None:
    """Create the directory tables if they do not exist yet."""

    from app.models.tables import Base

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close pooled connections and forget the cached engine."""

    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
