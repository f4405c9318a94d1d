"""HTTP API tests."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from stock_puzzle.core import telemetry
from stock_puzzle.main import create_app

from test_generator import QuoteServer, _prices


def _client(context) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=create_app(context)), base_url="http://test")


async def _seed(context) -> None:
    companies = [
        {"symbol": "AAPL", "name": "Apple Inc.", "date_key": "2025-01-02", "price": 150.0, "logo_url": None},
        {"symbol": "MSFT", "name": "Microsoft Corp.", "date_key": "2025-01-02", "price": 300.0, "logo_url": None},
    ]
    await context.store.publish_daily(companies, {"date_key": "2025-01-02", "symbols": ["AAPL", "MSFT"], "is_ready": True})


@pytest.mark.asyncio
async def test_health(sqlite_context):
    async with sqlite_context() as context, _client(context) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["timezone"] == "America/New_York"


@pytest.mark.asyncio
async def test_today_requires_identity(sqlite_context):
    async with sqlite_context() as context, _client(context) as client:
        response = await client.get("/puzzle/today")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_view_submit_and_lock(sqlite_context):
    headers = {"X-User-Id": "user-1"}
    async with sqlite_context() as context, _client(context) as client:
        await _seed(context)
        await context.store.save_prediction("user-1", "2025-01-01", {}, 4)

        view = (await client.get("/puzzle/today", headers=headers)).json()
        assert view["state"] == "open"
        assert [c["symbol"] for c in view["companies"]] == ["AAPL", "MSFT"]
        assert view["predictions"] == {"AAPL": None, "MSFT": None}
        assert view["streak"] == 4

        incomplete = await client.post(
            "/puzzle/today/predictions", headers=headers, json={"predictions": {"AAPL": "up"}, "confirm": True}
        )
        assert incomplete.status_code == 422

        submitted = await client.post(
            "/puzzle/today/predictions",
            headers=headers,
            json={"predictions": {"AAPL": "up", "MSFT": "down"}, "confirm": True},
        )
        assert submitted.status_code == 200
        body = submitted.json()
        assert body["state"] == "submitted"
        assert body["locked"] is True
        assert body["streak"] == 5

        again = await client.post(
            "/puzzle/today/predictions",
            headers=headers,
            json={"predictions": {"AAPL": "down", "MSFT": "down"}, "confirm": True},
        )
        assert again.status_code == 409
        stored = await context.store.get_prediction("user-1", "2025-01-02")
        assert stored.predictions == {"AAPL": "up", "MSFT": "down"}


@pytest.mark.asyncio
async def test_submit_to_unavailable_puzzle_conflicts(sqlite_context):
    async with sqlite_context() as context, _client(context) as client:
        response = await client.post(
            "/puzzle/today/predictions",
            headers={"X-User-Id": "user-1"},
            json={"predictions": {"AAPL": "up"}, "confirm": True},
        )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_job_trigger_publishes_and_checks_token(sqlite_context):
    server = QuoteServer(_prices())
    async with sqlite_context(http_client=server, internal_auth_token="secret") as context, _client(context) as client:
        denied = await client.post("/jobs/puzzle")
        response = await client.post("/jobs/puzzle", headers={"X-Internal-Token": "secret"})
        puzzle = await context.store.get_puzzle("2025-01-02")

    assert denied.status_code == 401
    assert response.status_code == 200
    assert response.json()["status"] == "published"
    assert response.json()["symbols"] == ["AAPL", "MSFT", "GOOGL", "AMZN", "TSLA", "JPM"]
    assert puzzle.is_ready is True


def test_telemetry_is_skipped_when_disabled(settings):
    app = FastAPI()
    assert telemetry.setup_telemetry(settings, app=app) is False
    assert telemetry._tracer_provider is None
