"""Trending sync entrypoints."""

from __future__ import annotations

from typing import Any, Sequence

from app.config.settings import settings
from app.crawlers.github_trending import TIME_WINDOWS
from app.orchestrator import TrendingOrchestrator


def configured_windows() -> list[str]:
    return normalize_windows(settings.TRENDING_WINDOWS, default=TIME_WINDOWS)


def normalize_windows(windows: str | Sequence[str] | None, *, default: Sequence[str] = TIME_WINDOWS) -> list[str]:
    """Normalize window selector input into deterministic daily/weekly/monthly order."""
    if windows is None:
        return list(default)

    if isinstance(windows, str):
        requested = {part.strip().lower() for part in windows.split(",") if part.strip()}
    else:
        requested = {str(part).strip().lower() for part in windows if str(part).strip()}

    selected = [window for window in TIME_WINDOWS if window in requested]
    return selected or list(default)


async def run_trending_sync(
    *,
    orchestrator: TrendingOrchestrator | None = None,
    windows: str | Sequence[str] | None = None,
) -> dict[str, Any]:
    """Run the trending sync for the requested windows, or the configured ones."""
    job_orchestrator = orchestrator or TrendingOrchestrator()
    selected = normalize_windows(windows, default=configured_windows())
    return await job_orchestrator.run_trending_sync(selected)
