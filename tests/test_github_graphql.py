from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from app.crawlers.contracts import FetchState
from app.crawlers.github_graphql import GitHubGraphQLClient, graphql_string, sanitize_log_extra


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> GitHubGraphQLClient:
    return GitHubGraphQLClient(
        token="test-token",
        url="https://api.github.test/graphql",
        backoff_base_seconds=0,
        backoff_max_seconds=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _history(*users: dict[str, Any] | None) -> dict[str, Any]:
    edges = [{"node": {"author": {"user": user}}} for user in users]
    return {"data": {"repository": {"defaultBranchRef": {"target": {"history": {"edges": edges}}}}}}


@pytest.mark.asyncio
async def test_get_repo_info_maps_repository_fields() -> None:
    requests: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        assert request.headers["Authorization"] == "Bearer test-token"
        return httpx.Response(
            200,
            json={
                "data": {
                    "repository": {
                        "name": "Rocket",
                        "description": "Launch things",
                        "stargazerCount": 1200,
                        "issues": {"totalCount": 14},
                        "forkCount": 80,
                        "pullRequests": {"totalCount": 3},
                        "url": "https://github.com/acme/Rocket",
                        "homepageUrl": "",
                        "owner": {"login": "acme", "__typename": "Organization"},
                    }
                }
            },
        )

    async with _client(handler) as client:
        result = await client.get_repo_info("acme", "rocket")

    assert result.state == FetchState.OK
    assert result.data.name == "Rocket"
    assert result.data.stargazer_count == 1200
    assert result.data.issue_count == 14
    assert result.data.pull_request_count == 3
    assert result.data.homepage_url is None
    assert result.data.owner_type == "Organization"
    assert 'owner: "acme"' in requests[0]["query"]


@pytest.mark.asyncio
async def test_not_found_errors_without_data_are_empty() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"data": {"organization": None}, "errors": [{"type": "NOT_FOUND", "message": "Could not resolve"}]},
        )

    async with _client(handler) as client:
        result = await client.get_organization_info("someone")

    assert result.state == FetchState.EMPTY
    assert "Could not resolve" in result.error


@pytest.mark.asyncio
async def test_other_graphql_errors_without_data_fail() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"errors": [{"type": "FORBIDDEN", "message": "Resource not accessible"}]})

    async with _client(handler) as client:
        result = await client.get_user_info("alice")

    assert result.state == FetchState.FAILED


@pytest.mark.asyncio
async def test_server_error_returns_failed_result() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    async with _client(handler) as client:
        result = await client.get_repo_info("acme", "rocket")

    assert result.state == FetchState.FAILED
    assert result.status_code == 502


@pytest.mark.asyncio
async def test_rate_limit_is_retried_until_success() -> None:
    calls = {"count": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(429, headers={"retry-after": "0"})
        if calls["count"] == 2:
            return httpx.Response(200, json={"errors": [{"type": "RATE_LIMITED", "message": "slow down"}]})
        return httpx.Response(200, json={"data": {"user": {"login": "alice", "name": "Alice"}}})

    async with _client(handler, max_retries=3) as client:
        result = await client.get_user_info("alice")

    assert calls["count"] == 3
    assert result.ok
    assert result.data.name == "Alice"


@pytest.mark.asyncio
async def test_rate_limit_exhaustion_returns_failed_result() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(403, headers={"retry-after": "0"})

    async with _client(handler, max_retries=2) as client:
        result = await client.get_repo_info("acme", "rocket")

    assert result.state == FetchState.FAILED
    assert result.status_code == 429


@pytest.mark.asyncio
async def test_get_repo_founders_deduplicates_by_login() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=_history(
                {"login": "alice", "name": "Alice", "twitterUsername": "alice_tw"},
                {"login": "alice", "name": "Alice", "twitterUsername": "alice_tw"},
                None,
                {"login": "bob", "name": None, "twitterUsername": None},
            ),
        )

    async with _client(handler) as client:
        founders = await client.get_repo_founders("acme", "rocket")

    assert [(founder.login, founder.name, founder.twitter_username) for founder in founders] == [
        ("alice", "Alice", "alice_tw"),
        ("bob", "", ""),
    ]


@pytest.mark.asyncio
async def test_get_repo_founders_requires_owner_and_name() -> None:
    client = _client(lambda _: httpx.Response(500))

    with pytest.raises(ValueError):
        await client.get_repo_founders("", "rocket")


@pytest.mark.asyncio
async def test_get_contributor_count_counts_distinct_logins() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["variables"] == {"owner": "acme", "repo": "rocket"}
        return httpx.Response(200, json=_history({"login": "alice"}, {"login": "bob"}, {"login": "alice"}, None))

    async with _client(handler) as client:
        assert await client.get_contributor_count("acme", "rocket") == 2


def test_graphql_string_escapes_quotes() -> None:
    assert graphql_string('we"ird') == '"we\\"ird"'


def test_sanitize_log_extra_redacts_tokens_and_payloads() -> None:
    extra = sanitize_log_extra(
        headers={"Authorization": "Bearer abc"},
        error="token=abc123 expired",
        readme="long text",
    )

    assert extra["headers"]["Authorization"] == "***REDACTED***"
    assert "abc123" not in extra["error"]
    assert extra["readme"] == "<redacted payload (9 chars)>"
