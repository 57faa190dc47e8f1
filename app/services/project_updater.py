"""Per-project enrichment updates: ELI5, founders, stats, LinkedIn, sentiment, trending flags."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from app.crawlers.github_trending import TrendingRepo
from app.crawlers.hackernews import HackerNewsSearchClient
from app.crawlers.linkedin import LinkedInClient
from app.crawlers.readme import ReadmeCrawler
from app.services.aggregation import DataAggregator
from app.services.project_mapper import format_github_stats, format_linkedin_company_data
from app.services.project_store import TRENDING_STATES, ProjectStore
from app.services.summarizer import SummarizerService

logger = logging.getLogger(__name__)

ELI5_FALLBACK = "ELI5/description could not be generated for this project"
COMMENT_GROUP_SEPARATOR = "\n Next group of comments: \n"


class ProjectUpdater:
    """
    Refreshes the enrichment columns of projects already in the database

    Every update is a no-op for projects that are not stored yet. Optional
    sources (summarizer, LinkedIn, Hacker News) degrade to skipping the
    update when unavailable.
    """

    def __init__(
        self,
        store: ProjectStore,
        aggregator: DataAggregator,
        *,
        readme_crawler: Optional[ReadmeCrawler] = None,
        summarizer: Optional[SummarizerService] = None,
        hackernews: Optional[HackerNewsSearchClient] = None,
        linkedin: Optional[LinkedInClient] = None,
        checkpoint: Optional[Callable[[], None]] = None,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.github = aggregator.github
        self.readme_crawler = readme_crawler or ReadmeCrawler()
        self.summarizer = summarizer
        self.hackernews = hackernews or HackerNewsSearchClient()
        self.linkedin = linkedin or LinkedInClient()
        self.checkpoint = checkpoint or (lambda: None)

    async def update_all_project_info(self, name: str, owner: str, trending_state: Optional[str] = None) -> bool:
        """Run every update in order, calling `checkpoint` after each one."""
        if not self.store.repo_is_already_in_db(name, owner):
            return False
        await self.update_project_eli5(name, owner)
        self.checkpoint()
        await self.update_project_founders(name, owner)
        self.checkpoint()
        await self.update_project_github_stats(name, owner)
        self.checkpoint()
        await self.update_project_linkedin_data(owner)
        self.checkpoint()
        await self.update_project_sentiment(name, owner)
        self.checkpoint()
        if trending_state:
            await self.update_project_trending_state(name, owner, trending_state)
            self.checkpoint()
        return True

    async def update_project_eli5(self, name: str, owner: str) -> bool:
        """Generate the ELI5 from the README, storing a fallback text on any failure."""
        if not self.store.repo_is_already_in_db(name, owner):
            return False
        try:
            if self.summarizer is None:
                raise RuntimeError("No LLM provider configured")
            readme = await self.readme_crawler.fetch_repository_readme(owner, name)
            description = await self.summarizer.eli5_from_readme(readme)
        except Exception as e:
            logger.error(f"Error while generating ELI5 for {name} owned by {owner}: {e}")
            return self.store.update_project(name, owner, {"eli5": ELI5_FALLBACK})

        updated = self.store.update_project(name, owner, {"eli5": description})
        if updated:
            logger.info(f"Updated eli5 of {name} owned by {owner}")
        return updated

    async def update_project_founders(self, name: str, owner: str) -> int:
        """
        Link the founders of a project, inserting missing people

        Founders are the first committers, so they do not change over time;
        existing links are left alone.

        Returns:
            Number of founder links added
        """
        project_id = self.store.get_project_id(name, owner)
        if not project_id:
            return 0

        founders = await self.github.get_repo_founders(owner, name)
        added = 0
        for founder in founders:
            founder_id = await self.aggregator.get_person_id(founder.login)
            if not founder_id:
                # Neither stored nor fetchable from GitHub
                continue
            if self.store.founder_link_exists(founder_id, project_id):
                continue
            self.store.insert_founder_link(founder_id, project_id)
            added += 1
            logger.info(f"Added {founder.login} as founder for {name} owned by {owner}")
        return added

    async def update_project_github_stats(self, name: str, owner: str) -> bool:
        if not self.store.repo_is_already_in_db(name, owner):
            return False

        result = await self.github.get_repo_info(owner, name)
        if not result.ok:
            logger.info(f"Could not get github stats for {name} owned by {owner}")
            return False

        contributor_count = await self.github.get_contributor_count(owner, name)
        updated = self.store.update_project(
            name,
            owner,
            format_github_stats(result.data, contributor_count=contributor_count or None),
        )
        if updated:
            logger.info(f"Updated github stats for {name} owned by {owner}")
        else:
            logger.info(f"Could not update github stats for {name} owned by {owner}")
        return updated

    async def update_project_linkedin_data(self, organization_handle: str) -> bool:
        """Fill the LinkedIn columns of an organization that has none yet."""
        organization = self.store.get_organization(organization_handle)
        # Person-owned projects have no organization; a set url means it was fetched already
        if organization is None or organization.linkedin_url:
            return False
        if not self.linkedin.enabled:
            return False

        logger.info(f"Fetching LinkedIn data for organization {organization_handle}...")
        company = await self.linkedin.get_company_info(organization_handle)
        if company is None or not company.name:
            logger.info(f"No LinkedIn data found for organization {organization_handle}")
            return False

        updated = self.store.update_organization(
            organization_handle,
            format_linkedin_company_data(company, existing=organization),
        )
        if updated:
            logger.info(f"Updated LinkedIn data for {organization_handle}")
        return updated

    async def update_project_sentiment(self, name: str, owner: str) -> bool:
        """Summarize Hacker News comments found for 'owner/name' and for 'name'."""
        if not self.store.repo_is_already_in_db(name, owner):
            return False

        all_comments = ""
        all_links: list[str] = []
        for query in (f"{owner}/{name}", name):
            stories = await self.hackernews.search_stories(query)
            if stories is None:
                continue
            if stories.comments:
                all_comments += COMMENT_GROUP_SEPARATOR + "\n".join(stories.comments)
            for link in stories.links_to_posts:
                if link not in all_links:
                    all_links.append(link)

        if not all_comments:
            logger.info(f"No comments found for {name} owned by {owner}")
            return False
        if self.summarizer is None:
            logger.info(f"No LLM provider configured; skipping sentiment for {name} owned by {owner}")
            return False

        try:
            sentiment = await self.summarizer.hackernews_sentiment(all_comments)
        except Exception as e:
            logger.error(f"Error while summarizing sentiment for {name} owned by {owner}: {e}")
            return False

        updated = self.store.update_project(
            name,
            owner,
            {"hackernews_sentiment": sentiment, "hackernews_stories": all_links},
        )
        if updated:
            logger.info(f"Updated sentiment for {name} owned by {owner}")
        else:
            logger.error(f"Error while updating sentiment for {name} owned by {owner}")
        return updated

    async def update_project_trending_state(self, name: str, owner: str, trending_state: Optional[str]) -> bool:
        if not trending_state:
            return False
        if trending_state not in TRENDING_STATES:
            raise ValueError(f"Unknown trending state: {trending_state}")

        updated = self.store.update_project(name, owner, {trending_state: True})
        if updated:
            logger.info(f"Updated trending state of {name} to {trending_state}")
        return updated

    async def update_project_trending_states_for_list_of_repos(
        self,
        repos: Sequence[TrendingRepo],
        trending_state: str,
    ) -> int:
        updated = 0
        for repo in repos:
            if await self.update_project_trending_state(repo.name, repo.owner, trending_state):
                updated += 1
        return updated


def trending_state_for_window(since: str) -> str:
    state = f"is_trending_{since}"
    if state not in TRENDING_STATES:
        raise ValueError(f"Unknown trending window: {since}")
    return state
