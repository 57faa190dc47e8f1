"""Hacker News story search using the Algolia HN API"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Any, List, Optional

import httpx
from bs4 import BeautifulSoup

from app.config.settings import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HackerNewsStories:
    """Comments and discussion links collected for one search query"""

    comments: List[str] = field(default_factory=list)
    links_to_posts: List[str] = field(default_factory=list)


class HackerNewsSearchClient:
    """
    Searches Hacker News stories and collects their comments

    API Docs: https://hn.algolia.com/api
    """

    HN_ITEM_URL = "https://news.ycombinator.com/item?id={}"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        max_stories: Optional[int] = None,
        max_comments_per_story: Optional[int] = None,
    ):
        self._client = client
        self.max_stories = max_stories or settings.HN_MAX_STORIES
        self.max_comments = max_comments_per_story or settings.HN_MAX_COMMENTS_PER_STORY

    async def search_stories(self, query: str) -> Optional[HackerNewsStories]:
        """
        Find stories matching `query` and gather their comment text

        Returns:
            HackerNewsStories, or None if no story was found or the API failed
        """
        if not query.strip():
            return None

        try:
            if self._client is not None:
                return await self._search(self._client, query)
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                return await self._search(client, query)
        except httpx.HTTPError as e:
            logger.warning(f"Hacker News search failed for {query!r}: {e}")
            return None

    async def _search(self, client: httpx.AsyncClient, query: str) -> Optional[HackerNewsStories]:
        response = await client.get(
            settings.HN_SEARCH_URL,
            params={"query": query, "tags": "story", "hitsPerPage": self.max_stories},
        )
        response.raise_for_status()
        hits = [hit for hit in response.json().get("hits", []) if hit.get("objectID")]
        if not hits:
            logger.debug(f"No Hacker News stories for {query!r}")
            return None

        results = await asyncio.gather(
            *[self._fetch_comments(client, hit["objectID"]) for hit in hits[: self.max_stories]],
            return_exceptions=True,
        )

        stories = HackerNewsStories()
        for hit, result in zip(hits, results):
            stories.links_to_posts.append(self.HN_ITEM_URL.format(hit["objectID"]))
            if isinstance(result, Exception):
                logger.warning(f"Error fetching comments for story {hit['objectID']}: {result}")
                continue
            stories.comments.extend(result)

        return stories

    async def _fetch_comments(self, client: httpx.AsyncClient, story_id: str) -> List[str]:
        response = await client.get(f"{settings.HN_ITEM_URL}/{story_id}")
        response.raise_for_status()

        comments: List[str] = []
        self._collect_comments(response.json().get("children") or [], comments)
        return comments[: self.max_comments]

    def _collect_comments(self, children: List[dict[str, Any]], out: List[str]) -> None:
        # Depth-first keeps replies next to the comment they answer
        for child in children:
            if len(out) >= self.max_comments:
                return
            text = child.get("text")
            if child.get("type") == "comment" and text:
                out.append(BeautifulSoup(text, "lxml").get_text(separator=" ", strip=True))
            self._collect_comments(child.get("children") or [], out)
