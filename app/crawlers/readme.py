"""README fetcher for the ELI5 description"""

from __future__ import annotations

import re
from typing import Optional

import httpx
import mistune
from bs4 import BeautifulSoup

from app.crawlers.base import BaseCrawler

# Checked in order; new README locations go here as they are found
README_PATHS = (
    "release/readme.md",
    "dev/README.rst",
    "main/README.md",
    "master/README.md",
)

_WHITESPACE = re.compile(r"\s+")


class ReadmeNotFoundError(Exception):
    """Raised when none of the candidate README locations exists."""


def readme_to_text(markdown: str) -> str:
    """Render README markdown (with inline HTML) and keep only its prose."""
    html = mistune.html(markdown)
    soup = BeautifulSoup(html, "lxml")

    # Code blocks are noise for the summary; inline code spans stay
    for block in soup.find_all(["pre", "script", "style"]):
        block.decompose()

    text = soup.get_text(" ")
    return _WHITESPACE.sub(" ", text).strip()


class ReadmeCrawler(BaseCrawler):
    """Fetches a repository README from raw.githubusercontent.com"""

    RAW_URL = "https://raw.githubusercontent.com/{owner}/{name}/{path}"

    async def fetch_repository_readme(self, owner: str, name: str) -> str:
        """
        Fetch the README of a repository as plain text

        Raises:
            ReadmeNotFoundError: if no candidate location exists
        """
        for path in README_PATHS:
            url = self.RAW_URL.format(owner=owner, name=name, path=path)
            content = await self._try_fetch(url)
            if content is None:
                continue
            text = readme_to_text(content)
            if text:
                return text
        raise ReadmeNotFoundError(f"README couldn't be found for {owner}/{name}")

    async def _try_fetch(self, url: str) -> Optional[str]:
        try:
            return await self.fetch_text(url, headers={"Accept": "text/plain"})
        except httpx.HTTPError as e:
            self.logger.debug(f"No README at {url}: {e}")
            return None
