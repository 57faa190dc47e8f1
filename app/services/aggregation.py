"""Aggregates GitHub data for a repository into an insertable project row."""

from __future__ import annotations

import logging
from typing import Any, Optional

from app.crawlers.github_graphql import GitHubGraphQLClient
from app.services.project_mapper import build_project_insertion, format_organization, format_person
from app.services.project_store import ProjectStore

logger = logging.getLogger(__name__)


class DataAggregator:
    """Goes through the data sources for a repository and merges them."""

    def __init__(self, store: ProjectStore, github: GitHubGraphQLClient) -> None:
        self.store = store
        self.github = github

    async def aggregate_data_for_repo(self, name: str, owner: str) -> Optional[dict[str, Any]]:
        """
        Build the `project` insertion row for owner/name

        Returns:
            The row, or None when GitHub has no data for the repository
        """
        repo_result = await self.github.get_repo_info(owner, name)
        if not repo_result.ok:
            logger.error(f"Could not get GitHub data for {owner}/{name}: {repo_result.error or repo_result.state.value}")
            return None

        repo = repo_result.data
        owner_login = repo.owner_login or owner
        contributor_count = await self.github.get_contributor_count(owner_login, repo.name)

        organization_id = None
        person_id = None
        if repo.owner_type != "User":
            organization_id = await self.get_organization_id(owner_login)
        if organization_id is None:
            person_id = await self.get_person_id(owner_login)
        if organization_id is None and person_id is None:
            logger.warning(f"Could not resolve owner {owner_login} of {repo.name}; inserting without owner")

        return build_project_insertion(
            repo,
            contributor_count=contributor_count,
            owning_organization=organization_id,
            owning_person=person_id,
        )

    async def get_organization_id(self, login: str) -> Optional[str]:
        """Organization id from the database, fetching and inserting it from GitHub when missing."""
        organization_id = self.store.get_organization_id(login)
        if organization_id:
            return organization_id

        result = await self.github.get_organization_info(login)
        if not result.ok:
            logger.debug(f"{login} is not a GitHub organization ({result.state.value})")
            return None

        organization = self.store.insert_organization(format_organization(result.data))
        logger.info(f"Inserted organization {organization.login}")
        return organization.id

    async def get_person_id(self, login: str) -> Optional[str]:
        """Person id from the database, fetching and inserting the user from GitHub when missing."""
        person_id = self.store.get_person_id(login)
        if person_id:
            return person_id

        result = await self.github.get_user_info(login)
        if not result.ok:
            logger.info(f"Could not get GitHub user {login} ({result.state.value})")
            return None

        person = self.store.insert_person(format_person(result.data))
        logger.info(f"Inserted associated person {person.login}")
        return person.id
