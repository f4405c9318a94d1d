"""Process-level wiring of settings, database, store and quote client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from stock_puzzle.config import AppSettings
from stock_puzzle.core.dates import Clock
from stock_puzzle.db.session import Database
from stock_puzzle.providers.fmp import FMPClient
from stock_puzzle.services.generator import PuzzleGenerator
from stock_puzzle.services.session import PuzzleSession
from stock_puzzle.services.store import PuzzleStore


@dataclass
class AppContext:
    """Handles owned by the entry point for the lifetime of the process."""

    settings: AppSettings
    database: Database
    store: PuzzleStore
    quotes: FMPClient
    clock: Clock

    @classmethod
    def build(
        cls,
        settings: AppSettings,
        *,
        clock: Clock | None = None,
        http_client: httpx.AsyncClient | None = None,
        **engine_options: Any,
    ) -> "AppContext":
        database = Database(settings.database_url, **engine_options)
        return cls(
            settings=settings,
            database=database,
            store=PuzzleStore(database),
            quotes=FMPClient.from_settings(settings, client=http_client),
            clock=clock or Clock(timezone=settings.puzzle_timezone),
        )

    def generator(self) -> PuzzleGenerator:
        return PuzzleGenerator(
            self.store,
            self.quotes,
            self.clock,
            logo_base_url=self.settings.logo_base_url,
        )

    def session_for(self, user_id: str | None) -> PuzzleSession:
        return PuzzleSession(self.store, self.clock, user_id=user_id)

    async def start(self) -> None:
        await self.database.create_all()

    async def aclose(self) -> None:
        await self.quotes.aclose()
        await self.database.dispose()


__all__ = ["AppContext"]
