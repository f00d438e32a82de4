"""Async SQLAlchemy engine and session factory helpers for the customer store."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


def create_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Create a reusable async session factory for the customer database URL.

    Connections are pinged before checkout so a MySQL server that dropped idle
    connections surfaces as a fresh connect attempt, not a stale-socket error.
    """

    engine = create_async_engine(database_url, pool_pre_ping=True)
    return async_sessionmaker(engine, expire_on_commit=False)


async def dispose_session_factory(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Release pooled connections held by the factory's engine."""

    bind = session_factory.kw.get("bind")
    if bind is not None:
        await bind.dispose()
