from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from app.jobs.trending_sync import normalize_windows, run_trending_sync
from app.orchestrator import TrendingOrchestrator


class FakeOrchestrator(TrendingOrchestrator):
    def __init__(self) -> None:
        super().__init__(session_factory=lambda: None)
        self.calls: list[list[str]] = []

    async def run_trending_sync(self, windows=None):
        self.calls.append(list(windows or []))
        return {"success": True, "windows": {window: {"success": True} for window in windows}, "inserted": 1, "deleted": 0}


def test_normalize_windows_orders_and_filters() -> None:
    assert normalize_windows("monthly, daily,daily,yearly") == ["daily", "monthly"]
    assert normalize_windows(["WEEKLY"]) == ["weekly"]
    assert normalize_windows("") == ["daily", "weekly", "monthly"]
    assert normalize_windows(None, default=["daily"]) == ["daily"]
    assert normalize_windows("bogus", default=["weekly"]) == ["weekly"]


def test_run_trending_sync_uses_configured_windows(monkeypatch) -> None:
    monkeypatch.setattr("app.jobs.trending_sync.settings.TRENDING_WINDOWS", "weekly,daily")
    orchestrator = FakeOrchestrator()

    asyncio.run(run_trending_sync(orchestrator=orchestrator))
    asyncio.run(run_trending_sync(orchestrator=orchestrator, windows="monthly"))

    assert orchestrator.calls == [["daily", "weekly"], ["monthly"]]


def test_lambda_handler_dispatches_trending(monkeypatch) -> None:
    import app.handler as handler

    orchestrator = FakeOrchestrator()
    monkeypatch.setattr(handler, "orchestrator", orchestrator)

    ok = handler.lambda_handler({"source": "trending", "windows": "daily"}, None)
    unknown = handler.lambda_handler({"source": "rss"}, None)

    assert ok["statusCode"] == 200
    assert ok["result"]["inserted"] == 1
    assert orchestrator.calls == [["daily"]]
    assert unknown["statusCode"] == 500
    assert "Unknown source" in unknown["error"]


def test_http_endpoints(monkeypatch) -> None:
    import app.main as main

    orchestrator = FakeOrchestrator()
    monkeypatch.setattr(main, "orchestrator", orchestrator)
    monkeypatch.setattr(main, "last_stats", {})
    client = TestClient(main.app)

    assert client.get("/api/health").json()["status"] == "healthy"
    assert client.get("/api/stats").json()["inserted"] == 0

    response = client.post("/api/sync/trending", params={"windows": "weekly"})

    assert response.json()["windows"] == ["weekly"]
    assert orchestrator.calls == [["weekly"]]
    assert client.get("/api/stats").json()["inserted"] == 1
