# src/Teskilat/db.py
from __future__ import annotations

import contextlib
import os
from collections.abc import AsyncIterator

import structlog
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from Teskilat.config import load_settings

settings = load_settings()
log = structlog.get_logger()

_ASYNC_DRIVERS = {"postgresql": "postgresql+asyncpg", "sqlite": "sqlite+aiosqlite"}


def _normalize_url(url: str) -> str:
    """Swap a plain or sync driver URL for the async driver of the same backend."""
    parsed = make_url(url)
    target = _ASYNC_DRIVERS.get(parsed.get_backend_name())
    if target is None or parsed.drivername == target:
        return url
    return parsed.set(drivername=target).render_as_string(hide_password=False)


DATABASE_URL = _normalize_url(settings.database_url)


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_schema_initialized: bool = False


def _is_memory_sqlite() -> bool:
    return DATABASE_URL.startswith("sqlite+aiosqlite://") and ":memory:" in DATABASE_URL


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves FK enforcement off per connection unless asked
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _engine_kwargs() -> dict[str, object]:
    backend = make_url(DATABASE_URL).get_backend_name()
    if backend == "sqlite":
        kwargs: dict[str, object] = {"connect_args": {"timeout": 30}}
        # One shared connection, or an in-memory schema vanishes between sessions
        if _is_memory_sqlite() or os.environ.get("TESKILAT_SQLITE_STATIC_POOL") == "1":
            kwargs["poolclass"] = StaticPool
        return kwargs
    if backend == "postgresql":
        return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10, "pool_timeout": 30}
    return {}


def get_engine() -> AsyncEngine:
    global _engine, _sessionmaker
    if _engine is None:
        _engine = create_async_engine(DATABASE_URL, **_engine_kwargs())
        if _engine.dialect.name == "sqlite":
            event.listen(_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        _sessionmaker = async_sessionmaker(_engine, expire_on_commit=False)

        url = make_url(DATABASE_URL)
        log.info(
            "db.connection.config",
            backend=_engine.dialect.name,
            user=url.username or "",
            host=url.host or "",
            database=url.database or "",
            driver=url.drivername,
        )
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _sessionmaker is None:
        get_engine()
    return _sessionmaker  # type: ignore[return-value]


async def dispose_engine() -> None:
    """Dispose the engine and forget the cached sessionmaker."""
    global _engine, _sessionmaker, _schema_initialized
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None
    _schema_initialized = False


async def _ensure_schema_created_if_needed() -> None:
    """Create tables on first use of an in-memory SQLite database.

    Real databases are migrated with Alembic; this is a no-op for them.
    """
    global _schema_initialized
    if _schema_initialized:
        return
    if _is_memory_sqlite():
        from Teskilat import models as _models  # noqa: F401

        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    _schema_initialized = True


@contextlib.asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session whose work commits on clean exit and rolls back otherwise."""
    await _ensure_schema_created_if_needed()
    async with get_sessionmaker()() as s:
        try:
            yield s
            await s.commit()
        except Exception:
            log.error("db.session.error", exc_info=True)
            await s.rollback()
            raise
