"""Durable keyed storage for puzzles, company snapshots and user predictions."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from stock_puzzle.db.session import Database
from stock_puzzle.models import DailyCompany, Puzzle, UserPrediction

logger = logging.getLogger(__name__)

# Drivers such as asyncpg report an unreachable server as a bare OSError.
_STORE_ERRORS = (SQLAlchemyError, OSError)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PuzzleStoreError(RuntimeError):
    """Raised when a read or write against the puzzle store fails."""


class PuzzleStore:
    """Get-by-key reads and merge writes over the puzzle tables.

    Every read opens its own session so callers may issue them concurrently.
    """

    def __init__(self, database: Database) -> None:
        self._database = database
        dialect = database.engine.dialect.name
        try:
            self._insert = _INSERT_BY_DIALECT[dialect]
        except KeyError as exc:
            raise PuzzleStoreError(f"Unsupported database dialect for upserts: {dialect}") from exc

    async def get_puzzle(self, date_key: str) -> Puzzle | None:
        return await self._get(Puzzle, date_key)

    async def get_company(self, symbol: str) -> DailyCompany | None:
        return await self._get(DailyCompany, symbol)

    async def get_prediction(self, user_id: str, date_key: str) -> UserPrediction | None:
        return await self._get(UserPrediction, (user_id, date_key))

    async def save_prediction(
        self,
        user_id: str,
        date_key: str,
        predictions: Mapping[str, str | None],
        streak: int,
    ) -> None:
        """Merge-write the prediction record keyed by ``(user_id, date_key)``."""

        stmt = self._insert(UserPrediction).values(
            user_id=user_id,
            date_key=date_key,
            predictions=dict(predictions),
            streak=streak,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserPrediction.user_id, UserPrediction.date_key],
            set_={"predictions": stmt.excluded.predictions, "streak": stmt.excluded.streak},
        )
        try:
            async with self._database.session() as session:
                async with session.begin():
                    await session.execute(stmt)
        except _STORE_ERRORS as exc:
            logger.exception("Failed to save predictions for user %s on %s", user_id, date_key)
            raise PuzzleStoreError(f"Failed to save predictions for {date_key}") from exc

    async def publish_daily(self, companies: Sequence[Mapping[str, Any]], puzzle: Mapping[str, Any]) -> None:
        """Upsert every company snapshot plus the puzzle in one transaction.

        Either all rows land or none do.
        """

        try:
            async with self._database.session() as session:
                async with session.begin():
                    for company in companies:
                        stmt = self._insert(DailyCompany).values(**company)
                        stmt = stmt.on_conflict_do_update(
                            index_elements=[DailyCompany.symbol],
                            set_={
                                "name": stmt.excluded.name,
                                "date_key": stmt.excluded.date_key,
                                "price": stmt.excluded.price,
                                "logo_url": stmt.excluded.logo_url,
                                "updated_at": func.now(),
                            },
                        )
                        await session.execute(stmt)

                    stmt = self._insert(Puzzle).values(**puzzle)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[Puzzle.date_key],
                        set_={
                            "symbols": stmt.excluded.symbols,
                            "is_ready": stmt.excluded.is_ready,
                            "created_at": func.now(),
                        },
                    )
                    await session.execute(stmt)
        except _STORE_ERRORS as exc:
            raise PuzzleStoreError(f"Failed to publish puzzle {puzzle.get('date_key')}") from exc

    async def _get(self, model: type, key: Any) -> Any:
        try:
            async with self._database.session() as session:
                return await session.get(model, key)
        except _STORE_ERRORS as exc:
            raise PuzzleStoreError(f"Failed to read {model.__tablename__} {key!r}") from exc


__all__ = ["PuzzleStore", "PuzzleStoreError"]
