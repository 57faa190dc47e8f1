"""GitHub trending crawler using BeautifulSoup to scrape the trending pages"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from app.crawlers.base import BaseCrawler

TIME_WINDOWS = ("daily", "weekly", "monthly")


@dataclass(frozen=True, slots=True)
class TrendingRepo:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(slots=True)
class TrendingDeveloper:
    name: str
    username: str
    repo: str = ""


def validate_time_window(since: str) -> str:
    if since not in TIME_WINDOWS:
        raise ValueError(f"Unsupported trending window: {since!r} (expected one of {', '.join(TIME_WINDOWS)})")
    return since


class GitHubTrendingCrawler(BaseCrawler):
    """Crawler for the GitHub trending repositories and developers pages"""

    TRENDING_URL = "https://github.com/trending?since={since}"
    TRENDING_DEVELOPERS_URL = "https://github.com/trending/developers?since={since}"

    async def fetch_trending_repos(self, since: str = "daily") -> List[TrendingRepo]:
        """
        Fetch the repositories listed on the trending page, in page order

        Args:
            since: 'daily', 'weekly' or 'monthly'

        Returns:
            List of TrendingRepo (owner, name) pairs
        """
        url = self.TRENDING_URL.format(since=validate_time_window(since))
        self.log_start(url)

        soup = await self.fetch_soup(url)
        repos: List[TrendingRepo] = []
        seen: set[TrendingRepo] = set()

        for repo_element in soup.find_all("article", class_="Box-row"):
            heading = repo_element.find("h2")
            repo_link = heading.find("a") if heading else None
            if not repo_link:
                continue

            repo = self._parse_repo_path(repo_link.get("href", "") or repo_link.get_text())
            if repo is None:
                self.logger.warning(f"Failed to parse trending repo link: {repo_link.get('href')!r}")
                continue
            if repo in seen:
                continue
            seen.add(repo)
            repos.append(repo)

        self.log_end(len(repos))
        return repos

    async def fetch_trending_developers(self, since: str = "daily") -> List[TrendingDeveloper]:
        """
        Fetch trending developers together with their highlighted repository

        Returns:
            List of TrendingDeveloper; `repo` is empty when the developer has none
        """
        url = self.TRENDING_DEVELOPERS_URL.format(since=validate_time_window(since))
        self.log_start(url)

        soup = await self.fetch_soup(url)
        developers: List[TrendingDeveloper] = []
        repos_by_username: dict[str, str] = {}

        for link in soup.select("h1.h3.lh-condensed a"):
            username = (link.get("href") or "").strip("/")
            if not username:
                continue
            developers.append(TrendingDeveloper(name=link.get_text(strip=True), username=username))

        for link in soup.select("h1.h4.lh-condensed a"):
            path = (link.get("href") or "").strip("/")
            parts = path.split("/")
            if len(parts) >= 2 and parts[0] and parts[1]:
                repos_by_username.setdefault(parts[0], parts[1])

        for developer in developers:
            developer.repo = repos_by_username.get(developer.username, "")

        self.log_end(len(developers))
        return developers

    @staticmethod
    def _parse_repo_path(raw: str) -> TrendingRepo | None:
        """Parse '/owner/name' (or the link text 'owner / name') into a TrendingRepo"""
        parts = [part.strip() for part in raw.replace("\n", " ").split("/") if part.strip()]
        if len(parts) != 2:
            return None
        owner, name = parts
        if " " in owner or " " in name:
            return None
        return TrendingRepo(owner=owner, name=name)
