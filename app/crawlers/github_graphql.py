"""Async GitHub GraphQL client for repository, owner and founder metadata."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
import re
import time
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config.settings import settings
from app.crawlers.contracts import FetchResult, FetchState

logger = logging.getLogger(__name__)

_REDACTED_VALUE = "***REDACTED***"
_SENSITIVE_KEYS = (
    "authorization",
    "token",
    "api_key",
    "apikey",
    "secret",
    "password",
    "cookie",
)
_PAYLOAD_KEYS = ("body", "raw", "content", "payload", "response", "readme", "comments")
_TOKEN_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[^\s,;]+"),
    re.compile(r"(?i)(token\s*[=:]\s*)[^\s,;]+"),
    re.compile(r"(?i)(api[_-]?key\s*[=:]\s*)[^\s,;]+"),
    re.compile(r"(?i)(secret\s*[=:]\s*)[^\s,;]+"),
)


def sanitize_for_log(value: Any, *, key: Optional[str] = None) -> Any:
    """Return a recursively sanitized copy of log payloads."""

    if isinstance(value, dict):
        sanitized: dict[str, Any] = {}
        for raw_key, raw_value in value.items():
            field = str(raw_key)
            if _contains_keyword(field, _SENSITIVE_KEYS):
                sanitized[field] = _REDACTED_VALUE
                continue
            if _contains_keyword(field, _PAYLOAD_KEYS) and isinstance(raw_value, str):
                sanitized[field] = _redact_payload(raw_value)
                continue
            sanitized[field] = sanitize_for_log(raw_value, key=field)
        return sanitized

    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_log(item, key=key) for item in value]

    if isinstance(value, str):
        redacted = _redact_text(value)
        if key and _contains_keyword(key, _PAYLOAD_KEYS):
            return _redact_payload(redacted)
        return redacted

    return value


def sanitize_log_extra(**kwargs: Any) -> dict[str, Any]:
    """Helper for `extra=` payloads in structured logging."""

    return {key: sanitize_for_log(value, key=key) for key, value in kwargs.items()}


def _contains_keyword(field_name: str, keywords: tuple[str, ...]) -> bool:
    lowered = field_name.lower()
    return any(keyword in lowered for keyword in keywords)


def _redact_payload(raw: str) -> str:
    trimmed = raw.strip()
    if not trimmed:
        return ""
    return f"<redacted payload ({len(raw)} chars)>"


def _redact_text(raw: str) -> str:
    redacted = raw
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub(rf"\1{_REDACTED_VALUE}", redacted)
    return redacted


def graphql_string(value: str) -> str:
    """Quote a value for interpolation into a GraphQL string literal."""
    return json.dumps(str(value))


@dataclass(slots=True)
class RepoInfo:
    name: str
    description: Optional[str]
    stargazer_count: int
    issue_count: int
    fork_count: int
    pull_request_count: int
    url: Optional[str]
    homepage_url: Optional[str]
    owner_login: Optional[str]
    owner_type: Optional[str]


@dataclass(slots=True)
class OrganizationInfo:
    login: str
    name: Optional[str]
    avatar_url: Optional[str]
    repository_count: int
    email: Optional[str]
    website_url: Optional[str]
    twitter_username: Optional[str]
    url: Optional[str]


@dataclass(slots=True)
class UserInfo:
    login: str
    name: Optional[str]
    avatar_url: Optional[str]
    email: Optional[str]
    website_url: Optional[str]
    twitter_username: Optional[str]
    url: Optional[str]
    company: Optional[str]
    location: Optional[str]
    bio: Optional[str]
    repository_count: int
    follower_count: int


@dataclass(slots=True)
class ProjectFounder:
    login: str
    name: str
    twitter_username: str


class _RateLimitRetryableError(Exception):
    """Retryable rate-limit signal for tenacity."""


class GitHubGraphQLClient:
    """GitHub GraphQL API client with rate-limit resilience."""

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base_seconds: Optional[float] = None,
        backoff_max_seconds: Optional[float] = None,
        rate_limit_buffer_seconds: Optional[int] = None,
        transport: Optional[Any] = None,
    ) -> None:
        self._token = token or settings.GITHUB_TOKEN
        self._url = url or settings.GITHUB_GRAPHQL_URL
        self._timeout_seconds = timeout_seconds or settings.GITHUB_TIMEOUT_SECONDS
        self._max_retries = max_retries or settings.GITHUB_MAX_RETRIES
        self._backoff_base_seconds = backoff_base_seconds if backoff_base_seconds is not None else settings.GITHUB_BACKOFF_BASE_SECONDS
        self._backoff_max_seconds = backoff_max_seconds if backoff_max_seconds is not None else settings.GITHUB_BACKOFF_MAX_SECONDS
        self._rate_limit_buffer_seconds = (
            rate_limit_buffer_seconds if rate_limit_buffer_seconds is not None else settings.GITHUB_RATE_LIMIT_BUFFER_SECONDS
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GitHubGraphQLClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_repo_info(self, owner: str, name: str) -> FetchResult[RepoInfo]:
        query = f"""query {{
  repository(owner: {graphql_string(owner)}, name: {graphql_string(name)}) {{
    name
    description
    stargazerCount
    issues(states: [OPEN]) {{ totalCount }}
    forkCount
    pullRequests(states: [OPEN]) {{ totalCount }}
    url
    homepageUrl
    owner {{ login __typename }}
  }}
}}"""
        result = await self._fetch_node(query, "repository")
        if not result.ok:
            return result

        node = result.data
        owner_node = node.get("owner") or {}
        return FetchResult(
            state=FetchState.OK,
            status_code=result.status_code,
            data=RepoInfo(
                name=node.get("name") or name,
                description=node.get("description"),
                stargazer_count=_total(node.get("stargazerCount")),
                issue_count=_total((node.get("issues") or {}).get("totalCount")),
                fork_count=_total(node.get("forkCount")),
                pull_request_count=_total((node.get("pullRequests") or {}).get("totalCount")),
                url=node.get("url"),
                homepage_url=node.get("homepageUrl") or None,
                owner_login=owner_node.get("login"),
                owner_type=owner_node.get("__typename"),
            ),
        )

    async def get_organization_info(self, login: str) -> FetchResult[OrganizationInfo]:
        query = f"""query {{
  organization(login: {graphql_string(login)}) {{
    login
    name
    avatarUrl
    repositories {{ totalCount }}
    email
    websiteUrl
    twitterUsername
    url
  }}
}}"""
        result = await self._fetch_node(query, "organization")
        if not result.ok:
            return result

        node = result.data
        return FetchResult(
            state=FetchState.OK,
            status_code=result.status_code,
            data=OrganizationInfo(
                login=node.get("login") or login,
                name=node.get("name"),
                avatar_url=node.get("avatarUrl"),
                repository_count=_total((node.get("repositories") or {}).get("totalCount")),
                email=node.get("email") or None,
                website_url=node.get("websiteUrl"),
                twitter_username=node.get("twitterUsername"),
                url=node.get("url"),
            ),
        )

    async def get_user_info(self, login: str) -> FetchResult[UserInfo]:
        query = f"""query {{
  user(login: {graphql_string(login)}) {{
    login
    name
    avatarUrl
    email
    websiteUrl
    twitterUsername
    url
    company
    location
    bio
    repositories {{ totalCount }}
    followers {{ totalCount }}
  }}
}}"""
        result = await self._fetch_node(query, "user")
        if not result.ok:
            return result

        node = result.data
        return FetchResult(
            state=FetchState.OK,
            status_code=result.status_code,
            data=UserInfo(
                login=node.get("login") or login,
                name=node.get("name"),
                avatar_url=node.get("avatarUrl"),
                email=node.get("email") or None,
                website_url=node.get("websiteUrl"),
                twitter_username=node.get("twitterUsername"),
                url=node.get("url"),
                company=node.get("company"),
                location=node.get("location"),
                bio=node.get("bio"),
                repository_count=_total((node.get("repositories") or {}).get("totalCount")),
                follower_count=_total((node.get("followers") or {}).get("totalCount")),
            ),
        )

    async def get_contributor_count(self, owner: str, name: str) -> int:
        """Distinct commit authors on the first history page of the default branch.

        This may be smaller than the count on the GitHub page because only
        contributors that committed into the default branch are counted.
        """
        query = """query($owner: String!, $repo: String!) {
  repository(owner: $owner, name: $repo) {
    defaultBranchRef {
      target {
        ... on Commit {
          history(first: 100) {
            edges { node { author { user { login } } } }
          }
        }
      }
    }
  }
}"""
        result = await self._fetch_node(query, "repository", variables={"owner": owner, "repo": name})
        if not result.ok:
            return 0

        logins = {
            login
            for login in (_author_user(edge).get("login") for edge in _history_edges(result.data))
            if login
        }
        return len(logins)

    async def get_repo_founders(self, owner: str, name: str) -> list[ProjectFounder]:
        """Authors of the first commits on the default branch, deduplicated by login."""
        if not owner or not name:
            raise ValueError("Not able to fetch repository to get founders of the project")

        query = f"""query {{
  repository(owner: {graphql_string(owner)}, name: {graphql_string(name)}) {{
    defaultBranchRef {{
      target {{
        ... on Commit {{
          history(first: {int(settings.FOUNDER_COMMIT_COUNT)}) {{
            edges {{ node {{ author {{ user {{ name login twitterUsername }} }} }} }}
          }}
        }}
      }}
    }}
  }}
}}"""
        result = await self._fetch_node(query, "repository")
        if not result.ok:
            logger.info(f"No commit history available for {owner}/{name}: {result.state.value}")
            return []

        founders: list[ProjectFounder] = []
        seen: set[str] = set()
        for edge in _history_edges(result.data):
            user = _author_user(edge)
            login = user.get("login")
            if not login or login in seen:
                continue
            seen.add(login)
            founders.append(
                ProjectFounder(
                    login=login,
                    name=user.get("name") or "",
                    twitter_username=user.get("twitterUsername") or "",
                )
            )
        return founders

    async def _fetch_node(
        self,
        query: str,
        root_field: str,
        *,
        variables: Optional[dict[str, Any]] = None,
    ) -> FetchResult[dict[str, Any]]:
        response = await self.execute(query, variables=variables)
        if not response.ok:
            return response

        node = (response.data or {}).get(root_field)
        if not node:
            return FetchResult(state=FetchState.EMPTY, status_code=response.status_code)
        return FetchResult(state=FetchState.OK, data=node, status_code=response.status_code)

    async def execute(self, query: str, *, variables: Optional[dict[str, Any]] = None) -> FetchResult[dict[str, Any]]:
        """Post a query and return its `data` object."""
        client = await self._ensure_client()
        body: dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = variables

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_retries),
                wait=wait_exponential(multiplier=self._backoff_base_seconds, max=self._backoff_max_seconds),
                retry=retry_if_exception_type(_RateLimitRetryableError),
                reraise=True,
            ):
                with attempt:
                    response = await client.post(self._url, json=body)

                    if response.status_code in (403, 429):
                        wait_seconds = self._compute_rate_limit_wait(response.headers)
                        logger.warning(
                            "GitHub API rate limit encountered",
                            extra=sanitize_log_extra(
                                variables=variables,
                                status_code=response.status_code,
                                retry_after_seconds=wait_seconds,
                            ),
                        )
                        if wait_seconds > 0:
                            await asyncio.sleep(wait_seconds)
                        raise _RateLimitRetryableError(f"GitHub rate limit encountered ({response.status_code})")

                    response.raise_for_status()
                    payload = response.json()
                    return self._to_result(payload, response.status_code)
        except _RateLimitRetryableError as exc:
            logger.warning(
                "GitHub request failed after rate-limit retries",
                extra=sanitize_log_extra(variables=variables, error=str(exc), status_code=429),
            )
            return FetchResult(state=FetchState.FAILED, error=str(exc), status_code=429)
        except httpx.HTTPError as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            logger.warning(
                "GitHub request failed",
                extra=sanitize_log_extra(variables=variables, error=str(exc), status_code=status_code),
            )
            return FetchResult(state=FetchState.FAILED, error=str(exc), status_code=status_code)

        return FetchResult(state=FetchState.FAILED, error="Unknown GitHub request failure")

    @staticmethod
    def _to_result(payload: Any, status_code: int) -> FetchResult[dict[str, Any]]:
        if not isinstance(payload, dict):
            return FetchResult(state=FetchState.FAILED, error="Malformed GraphQL response", status_code=status_code)

        data = payload.get("data") if isinstance(payload.get("data"), dict) else None
        errors = payload.get("errors") or []
        if errors:
            if any(error.get("type") == "RATE_LIMITED" for error in errors if isinstance(error, dict)):
                raise _RateLimitRetryableError("GitHub GraphQL rate limit encountered")
            has_data = bool(data) and any(value is not None for value in data.values())
            if not has_data:
                messages = "; ".join(str(error.get("message", error)) for error in errors if isinstance(error, dict))
                not_found = all(isinstance(error, dict) and error.get("type") == "NOT_FOUND" for error in errors)
                return FetchResult(
                    state=FetchState.EMPTY if not_found else FetchState.FAILED,
                    error=messages or "GraphQL error",
                    status_code=status_code,
                )

        if not data:
            return FetchResult(state=FetchState.EMPTY, data={}, status_code=status_code)
        return FetchResult(state=FetchState.OK, data=data, status_code=status_code)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client

        headers = {
            "Accept": "application/json",
            "User-Agent": settings.USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=self._timeout_seconds,
            transport=self._transport,
        )
        return self._client

    def _compute_rate_limit_wait(self, headers: httpx.Headers) -> float:
        retry_after = headers.get("retry-after")
        if retry_after is not None:
            try:
                return max(float(retry_after), 0.0)
            except ValueError:
                pass

        reset_raw = headers.get("x-ratelimit-reset")
        if reset_raw is not None:
            try:
                reset_epoch = int(reset_raw)
                wait_seconds = reset_epoch - int(time.time()) + self._rate_limit_buffer_seconds
                return float(max(wait_seconds, 0))
            except ValueError:
                pass

        return self._backoff_base_seconds


def _total(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    return 0


def _history_edges(repository: dict[str, Any]) -> list[dict[str, Any]]:
    target = ((repository.get("defaultBranchRef") or {}).get("target")) or {}
    edges = (target.get("history") or {}).get("edges")
    return edges if isinstance(edges, list) else []


def _author_user(edge: dict[str, Any]) -> dict[str, Any]:
    return (((edge or {}).get("node") or {}).get("author") or {}).get("user") or {}
