"""LinkedIn company lookup through the Proxycurl API"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, List, Optional

import httpx

from app.config.settings import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LinkedInCompany:
    name: str
    linkedin_url: str
    description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    follower_count: Optional[int] = None
    founded_year: Optional[int] = None
    headquarters: Optional[str] = None
    website: Optional[str] = None
    specialities: List[str] = field(default_factory=list)


class LinkedInClient:
    """
    Looks up company pages by handle

    Proxycurl bills every lookup, so callers only ask for organizations
    that have no LinkedIn data yet.
    """

    COMPANY_URL = "https://www.linkedin.com/company/{handle}"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, *, api_key: Optional[str] = None):
        self._client = client
        self.api_key = api_key or settings.PROXYCURL_API_KEY

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def get_company_info(self, handle: str) -> Optional[LinkedInCompany]:
        if not self.enabled:
            logger.debug("PROXYCURL_API_KEY not set, skipping LinkedIn lookup")
            return None

        linkedin_url = self.COMPANY_URL.format(handle=handle)
        try:
            if self._client is not None:
                data = await self._fetch(self._client, linkedin_url)
            else:
                async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
                    data = await self._fetch(client, linkedin_url)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.info(f"No LinkedIn company page for {handle}")
            else:
                logger.warning(f"LinkedIn lookup failed for {handle}: {e}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"LinkedIn lookup failed for {handle}: {e}")
            return None

        if not data or not data.get("name"):
            return None
        return self._parse_company(data, linkedin_url)

    async def _fetch(self, client: httpx.AsyncClient, linkedin_url: str) -> dict[str, Any]:
        response = await client.get(
            settings.PROXYCURL_COMPANY_URL,
            params={"url": linkedin_url, "use_cache": "if-present"},
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _parse_company(data: dict[str, Any], linkedin_url: str) -> LinkedInCompany:
        size = data.get("company_size")
        company_size = None
        if isinstance(size, (list, tuple)) and size:
            low, high = (list(size) + [None])[:2]
            company_size = f"{low}-{high}" if high else f"{low}+"

        hq = data.get("hq") or {}
        headquarters = ", ".join(part for part in (hq.get("city"), hq.get("country")) if part) or None

        return LinkedInCompany(
            name=data["name"],
            linkedin_url=linkedin_url,
            description=data.get("description"),
            industry=data.get("industry"),
            company_size=company_size,
            follower_count=data.get("follower_count"),
            founded_year=data.get("founded_year"),
            headquarters=headquarters,
            website=data.get("website"),
            specialities=list(data.get("specialities") or []),
        )
