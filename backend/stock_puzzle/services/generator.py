"""Daily puzzle generation: quote snapshot plus idempotent publication."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Sequence

import httpx

from stock_puzzle.core.dates import Clock
from stock_puzzle.providers.fmp import FMPClient, FMPError, Quote, QuoteRejected, QuoteResult
from stock_puzzle.services.store import PuzzleStore, PuzzleStoreError

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    symbol: str
    name: str


CANDIDATE_COMPANIES: tuple[Candidate, ...] = (
    Candidate("AAPL", "Apple Inc."),
    Candidate("MSFT", "Microsoft Corp."),
    Candidate("GOOGL", "Alphabet Inc. (Class A)"),
    Candidate("AMZN", "Amazon.com Inc."),
    Candidate("TSLA", "Tesla, Inc."),
    Candidate("JPM", "JPMorgan Chase & Co."),
)

_LOGO_STRIP = re.compile(r"[^a-z0-9]")


def logo_url(symbol: str, base_url: str) -> str:
    """Logo reference built from the lower-cased symbol without punctuation."""

    slug = _LOGO_STRIP.sub("", symbol.lower())
    return f"{base_url.rstrip('/')}/{slug}.com"


@dataclass
class GenerationResult:
    date_key: str
    symbols: list[str]
    priced: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


class PuzzleGenerator:
    """Publish today's puzzle and company snapshots.

    Safe to run more than once per day: every write is an upsert keyed by
    date or symbol, so a rerun replaces rows with equivalent content.
    """

    def __init__(
        self,
        store: PuzzleStore,
        quotes: FMPClient,
        clock: Clock,
        *,
        candidates: Sequence[Candidate] = CANDIDATE_COMPANIES,
        logo_base_url: str = "https://logo.clearbit.com",
    ) -> None:
        self._store = store
        self._quotes = quotes
        self._clock = clock
        self._candidates = tuple(candidates)
        self._logo_base_url = logo_base_url

    async def run(self) -> GenerationResult | None:
        """Run one generation; failures are logged and reported as ``None``."""

        if not self._quotes.has_credentials:
            logger.error("FMP_API_KEY not set; skipping daily puzzle generation")
            return None

        symbols = [c.symbol for c in self._candidates]
        results = await asyncio.gather(*(self._fetch(symbol) for symbol in symbols), return_exceptions=True)
        quotes: dict[str, Quote] = {}
        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException):
                logger.error("Unexpected error fetching quote for %s", symbol, exc_info=result)
            elif isinstance(result, Quote):
                quotes[symbol] = result

        today = self._clock.today_key()
        companies = [self._snapshot(candidate, quotes.get(candidate.symbol), today) for candidate in self._candidates]
        puzzle = {"date_key": today, "symbols": symbols, "is_ready": True}

        try:
            await self._store.publish_daily(companies, puzzle)
        except PuzzleStoreError:
            logger.exception("Failed to publish daily puzzle for %s", today)
            return None

        priced = [c["symbol"] for c in companies if c["price"] is not None]
        missing = [c["symbol"] for c in companies if c["price"] is None]
        logger.info("Daily puzzle set for %s: %s", today, ", ".join(symbols))
        if missing:
            logger.warning("Daily puzzle %s published without prices for %s", today, ", ".join(missing))
        return GenerationResult(date_key=today, symbols=symbols, priced=priced, missing=missing)

    async def _fetch(self, symbol: str) -> QuoteResult:
        try:
            result = await self._quotes.quote(symbol)
        except (FMPError, httpx.HTTPError) as exc:
            logger.warning("Quote API failed for symbol %s: %s", symbol, exc)
            return QuoteRejected(symbol=symbol, reason=str(exc))
        if isinstance(result, QuoteRejected):
            logger.warning("Quote API returned unusable data for symbol %s: %s", symbol, result.reason)
        return result

    def _snapshot(self, candidate: Candidate, quote: Quote | None, today: str) -> dict[str, Any]:
        name = (quote.name if quote else None) or candidate.name or candidate.symbol
        return {
            "symbol": candidate.symbol,
            "name": name,
            "date_key": today,
            "price": quote.price if quote else None,
            "logo_url": logo_url(candidate.symbol, self._logo_base_url),
        }


__all__ = [
    "CANDIDATE_COMPANIES",
    "Candidate",
    "GenerationResult",
    "PuzzleGenerator",
    "logo_url",
]
