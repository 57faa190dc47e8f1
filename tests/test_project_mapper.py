from __future__ import annotations

import pytest

from app.crawlers.github_graphql import OrganizationInfo, RepoInfo
from app.crawlers.linkedin import LinkedInCompany
from app.services.project_mapper import (
    build_project_insertion,
    format_github_stats,
    format_linkedin_company_data,
    format_organization,
    parse_github_url,
)


def _repo(**overrides) -> RepoInfo:
    values = dict(
        name="rocket",
        description="  Launch things  ",
        stargazer_count=10,
        issue_count=2,
        fork_count=1,
        pull_request_count=0,
        url="https://github.com/acme/rocket",
        homepage_url=None,
        owner_login="acme",
        owner_type="Organization",
    )
    values.update(overrides)
    return RepoInfo(**values)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/acme/rocket", ("acme", "rocket")),
        ("https://www.github.com/acme/rocket.git", ("acme", "rocket")),
        ("github.com/acme/rocket/tree/main/docs", ("acme", "rocket")),
        ("http://github.com/acme/rocket/", ("acme", "rocket")),
        ("https://gitlab.com/acme/rocket", None),
        ("https://github.com/acme", None),
        ("ftp://github.com/acme/rocket", None),
        ("", None),
    ],
)
def test_parse_github_url(url: str, expected) -> None:
    assert parse_github_url(url) == expected


def test_build_project_insertion_keeps_a_single_owner() -> None:
    row = build_project_insertion(_repo(), contributor_count=4, owning_organization="org-1", owning_person="person-1")

    assert row["name"] == "rocket"
    assert row["about"] == "Launch things"
    assert row["contributor_count"] == 4
    assert row["owning_organization"] == "org-1"
    assert row["owning_person"] is None
    assert row["is_bookmarked"] is False


def test_format_github_stats_omits_unknown_contributor_count() -> None:
    row = format_github_stats(_repo(stargazer_count=-3))

    assert "contributor_count" not in row
    assert row["star_count"] == 0


def test_format_organization_falls_back_to_profile_url() -> None:
    info = OrganizationInfo(
        login="acme",
        name=None,
        avatar_url=None,
        repository_count=3,
        email=None,
        website_url=None,
        twitter_username=None,
        url=None,
    )

    assert format_organization(info)["github_url"] == "https://github.com/acme"


def test_format_linkedin_company_data_keeps_github_website() -> None:
    company = LinkedInCompany(name="Acme", linkedin_url="https://www.linkedin.com/company/acme", website="https://acme.io")

    class Existing:
        website_url = "https://acme.dev"

    row = format_linkedin_company_data(company, existing=Existing())

    assert row["website_url"] == "https://acme.dev"
    assert row["specialities"] is None
    assert format_linkedin_company_data(company)["website_url"] == "https://acme.io"
