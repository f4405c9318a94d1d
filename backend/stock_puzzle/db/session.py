"""Database engine and session utilities."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from stock_puzzle.db.base import Base

# Import models so that SQLAlchemy is aware of all tables before create_all runs.
import stock_puzzle.models  # noqa: F401  # pylint: disable=unused-import

logger = logging.getLogger(__name__)


class Database:
    """Configure an async SQLAlchemy engine and session factory.

    Constructed by the process entry point and handed to whatever needs it;
    nothing here is created at import time.
    """

    def __init__(self, url: str, **engine_options: Any):
        self._url = url
        self._engine: AsyncEngine = create_async_engine(url, future=True, echo=False, **engine_options)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False, class_=AsyncSession)

    @property
    def url(self) -> str:
        return self._url

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_all(self) -> None:
        """Ensure all tables exist for the running application."""

        try:
            async with self._engine.begin() as connection:
                await connection.run_sync(Base.metadata.create_all)
        except SQLAlchemyError:
            logger.exception("Failed to initialise database schema")
            raise

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def dispose(self) -> None:
        await self._engine.dispose()


__all__ = ["Database"]
