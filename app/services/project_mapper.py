"""Mapping helpers from fetched payloads to table rows."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlparse

from app.crawlers.github_graphql import OrganizationInfo, RepoInfo, UserInfo
from app.crawlers.linkedin import LinkedInCompany

GITHUB_HOSTS = ("github.com", "www.github.com")


def format_github_stats(repo: RepoInfo, *, contributor_count: Optional[int] = None) -> dict[str, Any]:
    """Map repository stats into `project` columns refreshed on every update."""
    row = {
        "about": _pick_text(repo.description, None),
        "star_count": _pick_int(repo.stargazer_count, 0),
        "issue_count": _pick_int(repo.issue_count, 0),
        "fork_count": _pick_int(repo.fork_count, 0),
        "pull_request_count": _pick_int(repo.pull_request_count, 0),
        "github_url": _pick_text(repo.url, None),
        "website_url": _pick_text(repo.homepage_url, None),
    }
    if contributor_count is not None:
        row["contributor_count"] = _pick_int(contributor_count, 0)
    return row


def build_project_insertion(
    repo: RepoInfo,
    *,
    contributor_count: int,
    owning_organization: Optional[str],
    owning_person: Optional[str],
) -> dict[str, Any]:
    """Map aggregated data into a full `project` insertion row."""
    return {
        "name": _pick_text(repo.name, None, required=True),
        **format_github_stats(repo, contributor_count=contributor_count),
        "owning_organization": owning_organization,
        # A project has exactly one owner column set
        "owning_person": None if owning_organization else owning_person,
        "is_bookmarked": False,
    }


def format_organization(info: OrganizationInfo) -> dict[str, Any]:
    return {
        "login": _pick_text(info.login, None, required=True),
        "name": _pick_text(info.name, None),
        "avatar_url": _pick_text(info.avatar_url, None),
        "repository_count": _pick_int(info.repository_count, 0),
        "email": _pick_text(info.email, None),
        "website_url": _pick_text(info.website_url, None),
        "twitter_username": _pick_text(info.twitter_username, None),
        "github_url": _pick_text(info.url, None, fallback=f"https://github.com/{info.login}"),
    }


def format_person(info: UserInfo) -> dict[str, Any]:
    return {
        "login": _pick_text(info.login, None, required=True),
        "name": _pick_text(info.name, None),
        "avatar_url": _pick_text(info.avatar_url, None),
        "email": _pick_text(info.email, None),
        "website_url": _pick_text(info.website_url, None),
        "twitter_username": _pick_text(info.twitter_username, None),
        "github_url": _pick_text(info.url, None, fallback=f"https://github.com/{info.login}"),
        "company": _pick_text(info.company, None),
        "location": _pick_text(info.location, None),
        "bio": _pick_text(info.bio, None),
        "repository_count": _pick_int(info.repository_count, 0),
        "follower_count": _pick_int(info.follower_count, 0),
    }


def format_linkedin_company_data(company: LinkedInCompany, existing: Any | None = None) -> dict[str, Any]:
    """Map a LinkedIn company into `organization` columns, keeping GitHub values where LinkedIn is silent."""
    return {
        "linkedin_url": company.linkedin_url,
        "linkedin_description": _pick_text(company.description, None),
        "industry": _pick_text(company.industry, None),
        "company_size": _pick_text(company.company_size, None),
        "follower_count": company.follower_count if isinstance(company.follower_count, int) else None,
        "founded_year": company.founded_year if isinstance(company.founded_year, int) else None,
        "headquarters": _pick_text(company.headquarters, None),
        "specialities": list(company.specialities) or None,
        "website_url": _pick_text(getattr(existing, "website_url", None), company.website),
    }


def parse_github_url(url: str) -> Optional[tuple[str, str]]:
    """Return (owner, repo) for a github.com repository URL, else None."""
    raw = (url or "").strip()
    if not raw:
        return None
    if "://" not in raw:
        raw = f"https://{raw}"

    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https") or parsed.netloc.lower() not in GITHUB_HOSTS:
        return None

    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 2:
        return None

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return None
    return owner, repo


def _pick_text(primary: Any, secondary: Any, *, fallback: str | None = None, required: bool = False) -> str | None:
    if isinstance(primary, str) and primary.strip():
        return primary.strip()
    if isinstance(secondary, str) and secondary.strip():
        return secondary.strip()
    if fallback is not None:
        return fallback
    if required:
        raise ValueError("Missing required textual field")
    return None


def _pick_int(primary: Any, secondary: Any) -> int:
    for value in (primary, secondary):
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return max(value, 0)
    return 0
