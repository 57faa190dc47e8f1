"""GraphQL schema: project listing, trending developers, project and bookmark mutations"""

from datetime import datetime
from typing import Annotated, Any, List, Optional

import strawberry
from strawberry.types import Info

from app.crawlers.github_trending import TrendingDeveloper
from app.models import AssociatedPerson, Organization, Project
from app.services.project_store import ProjectStore
from app.services.responses import OperationResult


@strawberry.type
class MutationResponse:
    code: str
    message: Optional[str] = None
    hint: Optional[str] = None

    @classmethod
    def from_result(cls, result: OperationResult) -> "MutationResponse":
        return cls(code=result.code, message=result.message, hint=result.hint)


@strawberry.type
class OrganizationType:
    id: strawberry.ID
    login: str
    name: Optional[str]
    avatar_url: Optional[str]
    repository_count: int
    email: Optional[str]
    website_url: Optional[str]
    twitter_username: Optional[str]
    github_url: Optional[str]
    linkedin_url: Optional[str]
    linkedin_description: Optional[str]
    industry: Optional[str]
    company_size: Optional[str]
    follower_count: Optional[int]
    founded_year: Optional[int]
    headquarters: Optional[str]
    specialities: List[str]

    @classmethod
    def from_model(cls, organization: Organization) -> "OrganizationType":
        return cls(
            id=strawberry.ID(organization.id),
            login=organization.login,
            name=organization.name,
            avatar_url=organization.avatar_url,
            repository_count=organization.repository_count or 0,
            email=organization.email,
            website_url=organization.website_url,
            twitter_username=organization.twitter_username,
            github_url=organization.github_url,
            linkedin_url=organization.linkedin_url,
            linkedin_description=organization.linkedin_description,
            industry=organization.industry,
            company_size=organization.company_size,
            follower_count=organization.follower_count,
            founded_year=organization.founded_year,
            headquarters=organization.headquarters,
            specialities=list(organization.specialities or []),
        )


@strawberry.type
class PersonType:
    id: strawberry.ID
    login: str
    name: Optional[str]
    avatar_url: Optional[str]
    email: Optional[str]
    website_url: Optional[str]
    twitter_username: Optional[str]
    github_url: Optional[str]
    company: Optional[str]
    location: Optional[str]
    bio: Optional[str]
    repository_count: int
    follower_count: int

    @classmethod
    def from_model(cls, person: AssociatedPerson) -> "PersonType":
        return cls(
            id=strawberry.ID(person.id),
            login=person.login,
            name=person.name,
            avatar_url=person.avatar_url,
            email=person.email,
            website_url=person.website_url,
            twitter_username=person.twitter_username,
            github_url=person.github_url,
            company=person.company,
            location=person.location,
            bio=person.bio,
            repository_count=person.repository_count or 0,
            follower_count=person.follower_count or 0,
        )


@strawberry.type
class ProjectType:
    id: strawberry.ID
    name: str
    about: Optional[str]
    eli5: Optional[str]
    star_count: int
    issue_count: int
    fork_count: int
    pull_request_count: int
    contributor_count: int
    github_url: Optional[str]
    website_url: Optional[str]
    is_bookmarked: bool
    is_trending_daily: bool
    is_trending_weekly: bool
    is_trending_monthly: bool
    hackernews_sentiment: Optional[str]
    hackernews_stories: List[str]
    created_at: datetime
    updated_at: datetime
    owning_organization: Optional[OrganizationType]
    owning_person: Optional[PersonType]
    founders: List[PersonType]

    @classmethod
    def from_model(cls, project: Project) -> "ProjectType":
        return cls(
            id=strawberry.ID(project.id),
            name=project.name,
            about=project.about,
            eli5=project.eli5,
            star_count=project.star_count or 0,
            issue_count=project.issue_count or 0,
            fork_count=project.fork_count or 0,
            pull_request_count=project.pull_request_count or 0,
            contributor_count=project.contributor_count or 0,
            github_url=project.github_url,
            website_url=project.website_url,
            is_bookmarked=bool(project.is_bookmarked),
            is_trending_daily=bool(project.is_trending_daily),
            is_trending_weekly=bool(project.is_trending_weekly),
            is_trending_monthly=bool(project.is_trending_monthly),
            hackernews_sentiment=project.hackernews_sentiment,
            hackernews_stories=list(project.hackernews_stories or []),
            created_at=project.created_at,
            updated_at=project.updated_at,
            owning_organization=OrganizationType.from_model(project.organization) if project.organization else None,
            owning_person=PersonType.from_model(project.person) if project.person else None,
            founders=[PersonType.from_model(founder) for founder in project.founders],
        )


@strawberry.type
class TrendingDeveloperType:
    name: str
    username: str
    repo: str

    @classmethod
    def from_developer(cls, developer: TrendingDeveloper) -> "TrendingDeveloperType":
        return cls(name=developer.name, username=developer.username, repo=developer.repo)


@strawberry.type
class Query:
    @strawberry.field
    def all_projects(self, info: Info) -> List[ProjectType]:
        db = info.context["session_factory"]()
        try:
            return [ProjectType.from_model(project) for project in ProjectStore(db).list_projects()]
        finally:
            db.close()

    @strawberry.field
    async def trending_developers(self, info: Info, since: str = "daily") -> List[TrendingDeveloperType]:
        developers = await info.context["orchestrator"].trending_developers(since)
        return [TrendingDeveloperType.from_developer(developer) for developer in developers]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_project_by_name(self, info: Info, name: str, owner: str) -> MutationResponse:
        result = await info.context["orchestrator"].add_project(name, owner)
        return MutationResponse.from_result(result)

    @strawberry.mutation
    async def add_project_by_url(self, info: Info, url: str) -> MutationResponse:
        result = await info.context["orchestrator"].add_project_by_url(url)
        return MutationResponse.from_result(result)

    @strawberry.mutation
    def add_bookmark(
        self,
        info: Info,
        project_id: Annotated[strawberry.ID, strawberry.argument(name="projectID")],
        category: str,
    ) -> MutationResponse:
        result = info.context["bookmarks"].add_bookmark(_user_id(info), str(project_id), category)
        return MutationResponse.from_result(result)

    @strawberry.mutation
    def delete_bookmark(
        self,
        info: Info,
        project_id: Annotated[strawberry.ID, strawberry.argument(name="projectID")],
    ) -> MutationResponse:
        result = info.context["bookmarks"].delete_bookmark(_user_id(info), str(project_id))
        return MutationResponse.from_result(result)

    @strawberry.mutation
    def edit_bookmark_category(
        self,
        info: Info,
        project_id: Annotated[strawberry.ID, strawberry.argument(name="projectID")],
        new_category: str,
    ) -> MutationResponse:
        result = info.context["bookmarks"].edit_bookmark_category(_user_id(info), str(project_id), new_category)
        return MutationResponse.from_result(result)

    @strawberry.mutation
    def rename_bookmark_category(self, info: Info, old_category: str, new_category: str) -> MutationResponse:
        result = info.context["bookmarks"].rename_bookmark_category(_user_id(info), old_category, new_category)
        return MutationResponse.from_result(result)


def _user_id(info: Info) -> Optional[str]:
    user_id: Any = info.context.get("user_id")
    if isinstance(user_id, str) and user_id.strip():
        return user_id.strip()
    return None


schema = strawberry.Schema(query=Query, mutation=Mutation)
