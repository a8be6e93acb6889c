"""
SQLAlchemy integration — durable key-value store on any async engine.

Usage:

    session_factory, engine = await create_database("sqlite+aiosqlite:///app.db")
    store = SQLAlchemyStore(session_factory)

    state = LocalState(store, namespace="AgriMart")
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, cast

from sqlalchemy import String, DateTime, Text, select, delete as sa_delete
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from combinators import lift as L
from kungfu import Result

from storesync.store._types import StoreError


# ═══════════════════════════════════════════════════════════════════════════════
# Base & Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class KeyValueTable(Base):
    """One row per persisted key."""

    __tablename__ = "storesync_kv"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy Store
# ═══════════════════════════════════════════════════════════════════════════════


def _failed(action: str) -> Callable[[Exception], StoreError]:
    def on_error(e: Exception) -> StoreError:
        return StoreError(f"Failed to {action}: {e}", e)
    return on_error


class SQLAlchemyStore:
    """
    Key-value store backed by a single SQLAlchemy table.

    Each operation runs in its own session and commits before returning.
    Driver exceptions are lifted into Error(StoreError).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _run[T](
        self,
        action: str,
        fn: Callable[[AsyncSession], Awaitable[T]],
    ) -> Result[T, StoreError]:
        async def execute() -> T:
            async with self._session_factory() as session:
                return await fn(session)

        return await L.catching_async(execute, on_error=_failed(action))

    async def get(self, key: str) -> Result[str | None, StoreError]:
        async def fn(session: AsyncSession) -> str | None:
            result = await session.execute(
                select(KeyValueTable.value).where(KeyValueTable.key == key)
            )
            return result.scalar_one_or_none()

        return await self._run("get", fn)

    async def set(self, key: str, value: str) -> Result[None, StoreError]:
        async def fn(session: AsyncSession) -> None:
            await session.merge(
                KeyValueTable(key=key, value=value, updated_at=datetime.now())
            )
            await session.commit()

        return await self._run("set", fn)

    async def delete(self, key: str) -> Result[bool, StoreError]:
        async def fn(session: AsyncSession) -> bool:
            cursor = cast(
                CursorResult[Any],
                await session.execute(
                    sa_delete(KeyValueTable).where(KeyValueTable.key == key)
                ),
            )
            await session.commit()
            return cursor.rowcount > 0

        return await self._run("delete", fn)

    async def delete_many(self, keys: tuple[str, ...]) -> Result[int, StoreError]:
        async def fn(session: AsyncSession) -> int:
            if not keys:
                return 0
            cursor = cast(
                CursorResult[Any],
                await session.execute(
                    sa_delete(KeyValueTable).where(KeyValueTable.key.in_(keys))
                ),
            )
            await session.commit()
            return cursor.rowcount

        return await self._run("delete many", fn)


__all__ = (
    "Base",
    "KeyValueTable",
    "create_database",
    "SQLAlchemyStore",
)
