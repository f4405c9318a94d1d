"""Calendar-day keys used as the only time axis for puzzles and predictions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

DATE_KEY_FORMAT = "%Y-%m-%d"


def date_key(day: date) -> str:
    """Return the ``YYYY-MM-DD`` key for a calendar day."""

    return day.strftime(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` key, raising ``ValueError`` on malformed input."""

    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def previous_date_key(key: str) -> str:
    return date_key(parse_date_key(key) - timedelta(days=1))


def _system_now(tz: ZoneInfo) -> datetime:
    return datetime.now(tz)


@dataclass
class Clock:
    """Wall clock pinned to a time zone.

    ``now`` is injectable so tests can fix the current instant instead of
    depending on when they run.
    """

    timezone: str
    now: Callable[[ZoneInfo], datetime] = field(default=_system_now)

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def current(self) -> datetime:
        moment = self.now(self.tzinfo)
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tzinfo)
        return moment.astimezone(self.tzinfo)

    def today_key(self) -> str:
        return date_key(self.current().date())

    def yesterday_key(self) -> str:
        return previous_date_key(self.today_key())

    @classmethod
    def fixed(cls, moment: datetime, timezone: str) -> "Clock":
        """Return a clock that always reports ``moment``."""

        return cls(timezone=timezone, now=lambda _tz: moment)


__all__ = ["Clock", "DATE_KEY_FORMAT", "date_key", "parse_date_key", "previous_date_key"]
