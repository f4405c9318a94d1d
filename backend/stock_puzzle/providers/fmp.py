"""Financial Modeling Prep quote client used by the puzzle generator."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Optional, Union

import httpx

from stock_puzzle.config import AppSettings


class FMPError(RuntimeError):
    """Raised when the quote endpoint answers with an error or an unreadable body."""


@dataclass(frozen=True)
class Quote:
    symbol: str
    name: str | None = None
    price: float | None = None


@dataclass(frozen=True)
class QuoteRejected:
    symbol: str
    reason: str


QuoteResult = Union[Quote, QuoteRejected]


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_quote(payload: Any, symbol: str) -> QuoteResult:
    """Validate a raw quote payload for ``symbol``.

    The single-quote endpoint answers with a list holding one object, but a
    bare object is accepted too. The first object with a string ``symbol``
    wins; ``price`` falls back to ``regularMarketPrice`` and then to ``None``.
    """

    candidates = payload if isinstance(payload, list) else [payload]
    item = next(
        (c for c in candidates if isinstance(c, dict) and isinstance(c.get("symbol"), str)),
        None,
    )
    if item is None:
        return QuoteRejected(symbol=symbol, reason="no quote object in payload")
    if item["symbol"] != symbol:
        return QuoteRejected(symbol=symbol, reason=f"payload is for {item['symbol']}")

    price = _number(item.get("price"))
    if price is None:
        price = _number(item.get("regularMarketPrice"))
    name = item.get("name")
    return Quote(
        symbol=symbol,
        name=name if isinstance(name, str) and name else None,
        price=price,
    )


class FMPClient:
    """Throttled Financial Modeling Prep client."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://financialmodelingprep.com/stable",
        requests_per_minute: int = 60,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key.strip() if api_key else None
        self.base_url = base_url.rstrip("/")
        self.requests_per_minute = requests_per_minute
        self.timeout = timeout
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self._calls: Deque[float] = deque()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: AppSettings, client: Optional[httpx.AsyncClient] = None) -> "FMPClient":
        return cls(
            settings.fmp_api_key,
            base_url=settings.fmp_base_url,
            requests_per_minute=settings.fmp_requests_per_minute,
            timeout=settings.fmp_timeout_seconds,
            client=client,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    async def _throttle(self) -> None:
        async with self._lock:
            now = time.monotonic()
            while self._calls and now - self._calls[0] >= 60:
                self._calls.popleft()
            if len(self._calls) >= self.requests_per_minute:
                await asyncio.sleep(60 - (now - self._calls[0]))
                self._calls.popleft()
            self._calls.append(time.monotonic())

    async def _request(self, path: str, params: dict[str, Any]) -> Any:
        if not self.api_key:
            raise FMPError("FMP API key is not configured")
        await self._throttle()
        query = {**params, "apikey": self.api_key}
        response = await self._client.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        if response.status_code >= 400:
            raise FMPError(f"FMP error {response.status_code}: {response.text[:100]}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise FMPError("FMP returned invalid JSON payload") from exc
        if isinstance(payload, dict) and "Error Message" in payload:
            raise FMPError(str(payload["Error Message"]))
        return payload

    async def quote(self, symbol: str) -> QuoteResult:
        """Fetch and validate the current quote for ``symbol``."""

        payload = await self._request("/quote/", {"symbol": symbol})
        return parse_quote(payload, symbol)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["FMPClient", "FMPError", "Quote", "QuoteRejected", "QuoteResult", "parse_quote"]
