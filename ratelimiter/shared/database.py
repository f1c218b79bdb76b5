# ratelimiter/shared/database.py
from __future__ import annotations

from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ratelimiter.shared.config import Settings, get_settings


class Base(DeclarativeBase):
    """Project-wide SQLAlchemy declarative base."""
    pass


# NOTE: DB is the source of truth for tenants and rules; Redis only holds counters.
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _create_engine(settings: Settings) -> AsyncEngine:
    """Create a single AsyncEngine for the app."""
    kwargs = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database_url.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_recycle=1800,
        )
    return create_async_engine(settings.database_url, **kwargs)


def get_engine() -> AsyncEngine:
    """Lazy singleton engine."""
    global _engine
    if _engine is None:
        _engine = _create_engine(get_settings())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazy singleton session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request, committed by the caller."""
    Session = get_session_factory()
    async with Session() as session:
        yield session


async def dispose_engine() -> None:
    """Dispose the global engine (shutdown / test teardown)."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
