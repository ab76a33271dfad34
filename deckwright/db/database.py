"""
Database engine and session management.

The module-level engine follows `settings.database_url`. Tests and
embedding applications build their own with `make_engine` and hand the
resulting session factory to the persistence gateway.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from deckwright.config import settings
from deckwright.models.db import Base

SessionFactory = async_sessionmaker[AsyncSession]


def make_engine(url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    return create_async_engine(
        url or settings.database_url,
        echo=settings.debug if echo is None else echo,
        pool_pre_ping=True,
    )


def make_session_factory(bind: AsyncEngine) -> SessionFactory:
    # Loaded decks are read after commit, so keep attributes populated
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine()
async_session_factory = make_session_factory(engine)


@asynccontextmanager
async def session_scope(factory: SessionFactory | None = None) -> AsyncIterator[AsyncSession]:
    """
    Session that commits on success and rolls back on database errors.

    Usage:
        async with session_scope(factory) as session:
            ...
    """
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all deck tables. Safe to call on an initialized database."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """
    Drop all deck tables.

    WARNING: Destroys all data. Use only for testing.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
