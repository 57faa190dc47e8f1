"""Orchestrator for trending ingestion, project insertion and periodic refresh"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError

from app.config.database import SessionLocal
from app.config.settings import settings
from app.crawlers.github_graphql import GitHubGraphQLClient, sanitize_log_extra
from app.crawlers.github_trending import TIME_WINDOWS, GitHubTrendingCrawler, TrendingDeveloper
from app.crawlers.hackernews import HackerNewsSearchClient
from app.crawlers.linkedin import LinkedInClient
from app.crawlers.readme import ReadmeCrawler
from app.services import responses
from app.services.aggregation import DataAggregator
from app.services.project_mapper import parse_github_url
from app.services.project_store import ProjectStore
from app.services.project_updater import ELI5_FALLBACK, ProjectUpdater, trending_state_for_window
from app.services.responses import OperationResult
from app.services.summarizer import SummarizerService

logger = logging.getLogger(__name__)

INSERTED = "inserted"
ALREADY_PRESENT = "already_present"
NOT_FOUND = "not_found"


@dataclass
class _Pipeline:
    db: Any
    store: ProjectStore
    aggregator: DataAggregator
    updater: ProjectUpdater


class TrendingOrchestrator:
    """Coordinates scraping, aggregation, enrichment and storage of trending projects"""

    def __init__(
        self,
        *,
        session_factory: Callable[[], Any] = SessionLocal,
        github_client_factory: Callable[[], Any] = GitHubGraphQLClient,
        trending_crawler: Optional[GitHubTrendingCrawler] = None,
        readme_crawler: Optional[ReadmeCrawler] = None,
        hackernews: Optional[HackerNewsSearchClient] = None,
        linkedin: Optional[LinkedInClient] = None,
        summarizer_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._github_client_factory = github_client_factory
        self.trending_crawler = trending_crawler or GitHubTrendingCrawler()
        self._readme_crawler = readme_crawler
        self._hackernews = hackernews
        self._linkedin = linkedin
        self._summarizer_factory = summarizer_factory or SummarizerService
        self._summarizer: Any = None
        self._summarizer_loaded = False

    async def run_trending_sync(self, windows: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        Refresh the database from the trending pages

        Pipeline:
        1. Reset every trending flag
        2. For each window, flag stored repositories and insert new ones
        3. Delete stale projects nobody bookmarked
        4. Refresh GitHub stats of the remaining older projects and retry missing ELI5s

        Returns:
            Dictionary with sync statistics
        """
        selected = list(windows or TIME_WINDOWS)
        logger.info(f"Starting trending sync for windows: {', '.join(selected)}")

        stats: Dict[str, Any] = {
            "started_at": datetime.utcnow().isoformat(),
            "windows": {},
            "inserted": 0,
            "updated": 0,
            "deleted": 0,
            "refreshed": 0,
            "errors": [],
        }

        db = self._session_factory()
        try:
            store = ProjectStore(db)
            purged = store.purge_trending_state()
            db.commit()
            logger.info(f"Reset trending state of {purged} projects")

            async with self._pipeline(db) as pipeline:
                for since in selected:
                    stats["windows"][since] = await self._sync_window(pipeline, since, stats)

                run_started = datetime.utcnow()
                stats["deleted"] = self._delete_stale_projects(pipeline, run_started, stats)
                stats["refreshed"] = await self._refresh_old_projects(pipeline, run_started, stats)

        except Exception as e:
            logger.error(f"Trending sync failed: {e}", exc_info=True)
            db.rollback()
            stats["errors"].append(f"sync: {e}")

        finally:
            db.close()

        stats["completed_at"] = datetime.utcnow().isoformat()
        stats["success"] = not stats["errors"]
        logger.info(
            "Trending sync completed",
            extra=sanitize_log_extra(
                inserted=stats["inserted"],
                updated=stats["updated"],
                deleted=stats["deleted"],
                refreshed=stats["refreshed"],
                errors=stats["errors"],
            ),
        )
        return stats

    async def insert_project(self, name: str, owner: str, trending_state: Optional[str] = None) -> str:
        """
        Aggregate and insert one repository unless it is already stored

        Returns:
            'inserted', 'already_present' or 'not_found'
        """
        db = self._session_factory()
        try:
            async with self._pipeline(db) as pipeline:
                return await self._insert_project(pipeline, name, owner, trending_state)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    async def add_project(self, name: str, owner: str) -> OperationResult:
        """User-facing insert of owner/name."""
        try:
            outcome = await self.insert_project(name, owner)
        except Exception as e:
            logger.error(f"Failed to add {owner}/{name}: {e}", exc_info=True)
            return responses.database_error(e)

        if outcome == ALREADY_PRESENT:
            return responses.REPO_ALREADY_IN_DB
        if outcome == NOT_FOUND:
            return responses.REPO_NOT_FOUND
        return responses.CREATED

    async def add_project_by_url(self, url: str) -> OperationResult:
        parsed = parse_github_url(url)
        if parsed is None:
            return responses.INVALID_GITHUB_URL
        owner, name = parsed
        return await self.add_project(name, owner)

    async def trending_developers(self, since: str = "daily") -> List[TrendingDeveloper]:
        return await self.trending_crawler.fetch_trending_developers(since)

    async def _sync_window(self, pipeline: _Pipeline, since: str, stats: Dict[str, Any]) -> Dict[str, Any]:
        trending_state = trending_state_for_window(since)
        window_stats = {"crawled": 0, "inserted": 0, "updated": 0, "failed": 0, "success": False}

        try:
            repos = await self.trending_crawler.fetch_trending_repos(since)
        except Exception as e:
            logger.error(f"Error fetching {since} trending repos: {e}", exc_info=True)
            stats["errors"].append(f"{since}: {e}")
            window_stats["error"] = str(e)
            return window_stats

        repos = repos[: settings.TRENDING_REPOS_PER_WINDOW]
        window_stats["crawled"] = len(repos)

        for repo in repos:
            try:
                if pipeline.store.repo_is_already_in_db(repo.name, repo.owner):
                    logger.info(f"{repo.name} owned by {repo.owner} is already in the database")
                    await pipeline.updater.update_project_trending_state(repo.name, repo.owner, trending_state)
                    pipeline.db.commit()
                    window_stats["updated"] += 1
                    stats["updated"] += 1
                    continue

                outcome = await self._insert_project(pipeline, repo.name, repo.owner, trending_state)
                if outcome == INSERTED:
                    window_stats["inserted"] += 1
                    stats["inserted"] += 1

            except Exception as e:
                pipeline.db.rollback()
                window_stats["failed"] += 1
                stats["errors"].append(f"{since}: {repo.full_name}: {e}")
                logger.error(f"Failed to process {repo.full_name}: {e}", exc_info=True)

        window_stats["success"] = True
        return window_stats

    async def _insert_project(
        self,
        pipeline: _Pipeline,
        name: str,
        owner: str,
        trending_state: Optional[str],
    ) -> str:
        if pipeline.store.repo_is_already_in_db(name, owner):
            return ALREADY_PRESENT

        canonical_name = name
        try:
            row = await pipeline.aggregator.aggregate_data_for_repo(name, owner)
            if row is None:
                pipeline.db.commit()
                return NOT_FOUND

            # GitHub may return the canonical casing of the name
            canonical_name = row["name"]
            if canonical_name != name and pipeline.store.repo_is_already_in_db(canonical_name, owner):
                pipeline.db.commit()
                return ALREADY_PRESENT

            pipeline.store.insert_project(row)
            pipeline.db.commit()
        except IntegrityError:
            # A concurrent insert of the same project or owner won the race
            pipeline.db.rollback()
            if pipeline.store.repo_is_already_in_db(canonical_name, owner):
                logger.info(f"{canonical_name} owned by {owner} was inserted concurrently")
                return ALREADY_PRESENT
            raise
        logger.info(f"Inserted {canonical_name} owned by {owner}")

        await pipeline.updater.update_all_project_info(canonical_name, owner, trending_state)
        pipeline.db.commit()
        return INSERTED

    def _delete_stale_projects(self, pipeline: _Pipeline, now: datetime, stats: Dict[str, Any]) -> int:
        cutoff = now - timedelta(hours=settings.STALE_PROJECT_HOURS)
        try:
            deleted = pipeline.store.delete_stale_projects(cutoff)
            pipeline.db.commit()
        except Exception as e:
            pipeline.db.rollback()
            logger.error(f"Error while deleting old projects: {e}", exc_info=True)
            stats["errors"].append(f"delete: {e}")
            return 0

        logger.info(f"Deleted {deleted} projects created before {cutoff.isoformat()}")
        return deleted

    async def _refresh_old_projects(self, pipeline: _Pipeline, now: datetime, stats: Dict[str, Any]) -> int:
        cutoff = now - timedelta(minutes=settings.REFRESH_AFTER_MINUTES)
        refreshed = 0

        for project in pipeline.store.list_projects_created_before(cutoff):
            owner = pipeline.store.resolve_owner_login(project)
            if not owner:
                logger.debug(f"Skipping refresh of {project.name}: owner unknown")
                continue

            name = project.name
            try:
                if await pipeline.updater.update_project_github_stats(name, owner):
                    refreshed += 1
                if not project.eli5 or project.eli5 == ELI5_FALLBACK:
                    await pipeline.updater.update_project_eli5(name, owner)
                pipeline.db.commit()
            except Exception as e:
                pipeline.db.rollback()
                stats["errors"].append(f"refresh: {owner}/{name}: {e}")
                logger.error(f"Failed to refresh {owner}/{name}: {e}", exc_info=True)

        return refreshed

    @asynccontextmanager
    async def _pipeline(self, db: Any) -> AsyncIterator[_Pipeline]:
        async with self._github_client_factory() as github:
            store = ProjectStore(db)
            aggregator = DataAggregator(store, github)
            updater = ProjectUpdater(
                store,
                aggregator,
                readme_crawler=self._readme_crawler,
                summarizer=self._get_summarizer(),
                hackernews=self._hackernews,
                linkedin=self._linkedin,
                checkpoint=db.commit,
            )
            yield _Pipeline(db=db, store=store, aggregator=aggregator, updater=updater)

    def _get_summarizer(self) -> Any:
        """Build the summarizer once; without LLM credentials the AI columns are skipped."""
        if not self._summarizer_loaded:
            self._summarizer_loaded = True
            try:
                self._summarizer = self._summarizer_factory()
            except ValueError as e:
                logger.warning(f"Summarization disabled: {e}")
                self._summarizer = None
        return self._summarizer
