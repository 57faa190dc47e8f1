"""Base crawler class with common functionality"""

from typing import Optional
import logging

import httpx
from bs4 import BeautifulSoup

from app.config.settings import settings

logger = logging.getLogger(__name__)


class BaseCrawler:
    """
    Base crawler class

    HTML scrapers inherit from this class. An httpx client can be injected
    (tests pass one backed by `httpx.MockTransport`); otherwise a short-lived
    client is opened per request.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.user_agent = settings.USER_AGENT
        self._client = client

    def log_start(self, target: str):
        """Log crawl start"""
        self.logger.info(f"Starting {self.__class__.__name__}: {target}")

    def log_end(self, count: int):
        """Log crawl end with count"""
        self.logger.info(f"Finished {self.__class__.__name__}: {count} entries")

    def log_error(self, error: Exception):
        """Log error"""
        self.logger.error(f"Error in {self.__class__.__name__}: {str(error)}", exc_info=True)

    @property
    def default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    async def fetch_text(self, url: str, headers: Optional[dict[str, str]] = None) -> str:
        """GET `url` and return the body; raises `httpx.HTTPError` on failure."""
        request_headers = {**self.default_headers, **(headers or {})}
        if self._client is not None:
            response = await self._client.get(url, headers=request_headers, follow_redirects=True)
            response.raise_for_status()
            return response.text

        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True) as client:
            response = await client.get(url, headers=request_headers)
            response.raise_for_status()
            return response.text

    async def fetch_soup(self, url: str) -> BeautifulSoup:
        return BeautifulSoup(await self.fetch_text(url), "lxml")
