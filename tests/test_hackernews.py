from __future__ import annotations

import httpx
import pytest

from app.crawlers.hackernews import HackerNewsSearchClient


def _client(handler, **kwargs) -> HackerNewsSearchClient:
    return HackerNewsSearchClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)


STORY_TREE = {
    "id": 1,
    "type": "story",
    "children": [
        {
            "type": "comment",
            "text": "<p>Great <i>tool</i></p>",
            "children": [{"type": "comment", "text": "Agreed", "children": []}],
        },
        {"type": "comment", "text": None, "children": []},
        {"type": "comment", "text": "Slow on large repos", "children": []},
    ],
}


@pytest.mark.asyncio
async def test_search_stories_collects_comments_depth_first_and_links() -> None:
    search_params: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v1/search":
            search_params.append(dict(request.url.params))
            return httpx.Response(200, json={"hits": [{"objectID": "1"}, {"objectID": "2"}, {"title": "no id"}]})
        if request.url.path == "/api/v1/items/1":
            return httpx.Response(200, json=STORY_TREE)
        return httpx.Response(500)

    client = _client(handler)
    stories = await client.search_stories("acme/rocket")

    assert stories is not None
    assert stories.comments == ["Great tool", "Agreed", "Slow on large repos"]
    assert stories.links_to_posts == [
        "https://news.ycombinator.com/item?id=1",
        "https://news.ycombinator.com/item?id=2",
    ]
    assert search_params[0]["query"] == "acme/rocket"
    assert search_params[0]["tags"] == "story"


@pytest.mark.asyncio
async def test_search_stories_caps_comments_per_story() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v1/search":
            return httpx.Response(200, json={"hits": [{"objectID": "1"}]})
        return httpx.Response(200, json=STORY_TREE)

    stories = await _client(handler, max_comments_per_story=2).search_stories("rocket")

    assert stories.comments == ["Great tool", "Agreed"]


@pytest.mark.asyncio
async def test_search_stories_returns_none_without_hits() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"hits": []})

    assert await _client(handler).search_stories("nothing") is None


@pytest.mark.asyncio
async def test_search_stories_returns_none_on_api_failure() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    assert await _client(handler).search_stories("rocket") is None


@pytest.mark.asyncio
async def test_search_stories_ignores_blank_query() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _client(handler).search_stories("   ") is None
