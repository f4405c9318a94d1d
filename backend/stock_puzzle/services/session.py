"""Per-user reconciliation of the daily puzzle view and submission."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from stock_puzzle.core.dates import Clock
from stock_puzzle.models import DailyCompany, Prediction, Puzzle, UserPrediction
from stock_puzzle.services.identity import IdentityEvents
from stock_puzzle.services.store import PuzzleStore, PuzzleStoreError
from stock_puzzle.services.streak import displayed_streak, next_streak, yesterday_streak

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    UNAVAILABLE = "unavailable"
    OPEN = "open"
    SUBMITTED = "submitted"
    ERROR = "error"


class SubmissionRejected(ValueError):
    """Raised when a submission is refused before anything is written."""


class PuzzleLockedError(SubmissionRejected):
    pass


class PuzzleNotOpenError(SubmissionRejected):
    pass


class IncompleteSubmissionError(SubmissionRejected):
    pass


class UnconfirmedSubmissionError(SubmissionRejected):
    pass


class UnknownCompanyError(SubmissionRejected):
    pass


class SubmissionSaveError(RuntimeError):
    """Raised when the store rejects the prediction write."""


@dataclass(frozen=True)
class CompanyView:
    symbol: str
    name: str
    price: float | None
    logo_url: str | None


@dataclass
class PuzzleView:
    state: SessionState
    date_key: str | None = None
    companies: list[CompanyView] = field(default_factory=list)
    predictions: dict[str, str | None] = field(default_factory=dict)
    streak: int = 0
    error: str | None = None

    @property
    def locked(self) -> bool:
        return self.state is SessionState.SUBMITTED

    @property
    def selected_count(self) -> int:
        return sum(1 for value in self.predictions.values() if value)

    @property
    def all_selected(self) -> bool:
        return bool(self.companies) and all(self.predictions.get(c.symbol) for c in self.companies)


async def _join(*reads: Awaitable[Any]) -> list[Any]:
    """Await every read before surfacing the first failure."""

    results = await asyncio.gather(*reads, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


def _is_ready(puzzle: Puzzle | None) -> bool:
    return puzzle is not None and bool(puzzle.is_ready)


def _company_view(snapshot: DailyCompany) -> CompanyView:
    return CompanyView(
        symbol=snapshot.symbol,
        name=snapshot.name or snapshot.symbol,
        price=snapshot.price,
        logo_url=snapshot.logo_url,
    )


class PuzzleSession:
    """Derives a user's puzzle state from stored records and accepts one submission.

    Each ``load`` starts from fresh reads; nothing is carried over from a
    previous view.
    """

    def __init__(self, store: PuzzleStore, clock: Clock, user_id: str | None = None) -> None:
        self._store = store
        self._clock = clock
        self.user_id = user_id
        self._yesterday: UserPrediction | None = None
        self._view = PuzzleView(state=SessionState.UNAUTHENTICATED)

    @property
    def view(self) -> PuzzleView:
        return self._view

    async def load(self) -> PuzzleView:
        self._yesterday = None
        if not self.user_id:
            self._view = PuzzleView(state=SessionState.UNAUTHENTICATED)
            return self._view

        today_key = self._clock.today_key()
        yesterday_key = self._clock.yesterday_key()
        try:
            self._view = await self._reconcile(self.user_id, today_key, yesterday_key)
        except PuzzleStoreError as exc:
            logger.error("Failed to load puzzle data for %s: %s", today_key, exc)
            self._view = PuzzleView(state=SessionState.ERROR, date_key=today_key, error="Failed to load puzzle data")
        return self._view

    async def _reconcile(self, user_id: str, today_key: str, yesterday_key: str) -> PuzzleView:
        puzzle, yesterday, today = await _join(
            self._store.get_puzzle(today_key),
            self._store.get_prediction(user_id, yesterday_key),
            self._store.get_prediction(user_id, today_key),
        )
        self._yesterday = yesterday
        base = yesterday_streak(yesterday)

        companies: list[CompanyView] = []
        if _is_ready(puzzle):
            companies = await self._companies(puzzle.symbols or [], today_key)

        if today is not None:
            return PuzzleView(
                state=SessionState.SUBMITTED,
                date_key=today_key,
                companies=companies,
                predictions=dict(today.predictions or {}),
                streak=displayed_streak(today, yesterday),
            )
        if not _is_ready(puzzle):
            return PuzzleView(state=SessionState.UNAVAILABLE, date_key=today_key, streak=base)
        return PuzzleView(
            state=SessionState.OPEN,
            date_key=today_key,
            companies=companies,
            predictions={c.symbol: None for c in companies},
            streak=base,
        )

    async def _companies(self, symbols: list[str], today_key: str) -> list[CompanyView]:
        snapshots = await _join(*(self._store.get_company(symbol) for symbol in symbols))
        # Snapshots left over from an earlier day are skipped, not trusted.
        return [_company_view(s) for s in snapshots if s is not None and s.date_key == today_key]

    def select_prediction(self, symbol: str, value: Prediction | str) -> PuzzleView:
        if self._view.state is not SessionState.OPEN:
            return self._view
        if symbol not in self._view.predictions:
            raise UnknownCompanyError(f"{symbol} is not part of today's puzzle")
        try:
            choice = Prediction(value)
        except ValueError as exc:
            raise SubmissionRejected(f"Invalid prediction {value!r} for {symbol}") from exc
        self._view.predictions = {**self._view.predictions, symbol: choice.value}
        return self._view

    async def submit(self, confirmed: bool) -> PuzzleView:
        view = self._view
        if view.state is SessionState.SUBMITTED:
            raise PuzzleLockedError("Predictions for today are already locked")
        if view.state is not SessionState.OPEN or not self.user_id or view.date_key is None:
            raise PuzzleNotOpenError("Today's puzzle is not open")
        if not view.all_selected:
            raise IncompleteSubmissionError(
                f"Select a prediction for every company ({view.selected_count}/{len(view.companies)})"
            )
        if not confirmed:
            raise UnconfirmedSubmissionError("Submission must be confirmed")

        streak = next_streak(self._yesterday)
        predictions = dict(view.predictions)
        try:
            await self._store.save_prediction(self.user_id, view.date_key, predictions, streak)
        except PuzzleStoreError as exc:
            raise SubmissionSaveError("Failed to save predictions") from exc

        self._view = PuzzleView(
            state=SessionState.SUBMITTED,
            date_key=view.date_key,
            companies=view.companies,
            predictions=predictions,
            streak=streak,
        )
        logger.info("Predictions submitted for %s (streak %d)", view.date_key, streak)
        return self._view

    async def watch(self, identity: IdentityEvents) -> Callable[[], None]:
        """Recompute the view whenever the signed-in user changes.

        Loads once for the current identity and returns the unsubscribe
        callable.
        """

        async def _on_change(user_id: str | None) -> None:
            self.user_id = user_id
            await self.load()

        unsubscribe = identity.subscribe(_on_change)
        await _on_change(identity.current)
        return unsubscribe


__all__ = [
    "CompanyView",
    "IncompleteSubmissionError",
    "PuzzleLockedError",
    "PuzzleNotOpenError",
    "PuzzleSession",
    "PuzzleView",
    "SessionState",
    "SubmissionRejected",
    "SubmissionSaveError",
    "UnconfirmedSubmissionError",
    "UnknownCompanyError",
]
