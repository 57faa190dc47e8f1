from __future__ import annotations

import pytest

from app.crawlers.github_trending import TrendingDeveloper
from app.graphql import build_context, schema
from app.models import AssociatedPerson, FoundedBy, Organization, Project
from app.services import responses
from app.services.bookmarks import BookmarkService


class FakeOrchestrator:
    def __init__(self) -> None:
        self.added: list[tuple[str, str]] = []

    async def add_project(self, name: str, owner: str):
        self.added.append((owner, name))
        return responses.REPO_ALREADY_IN_DB if name == "rocket" else responses.CREATED

    async def add_project_by_url(self, url: str):
        return responses.INVALID_GITHUB_URL

    async def trending_developers(self, since: str = "daily"):
        return [TrendingDeveloper(name="Alice", username="alice", repo="wonder")]


def _context(session_factory, user_id=None, orchestrator=None) -> dict:
    return build_context(
        user_id=user_id,
        orchestrator=orchestrator or FakeOrchestrator(),
        bookmarks=BookmarkService(session_factory=session_factory),
        session_factory=session_factory,
    )


def _seed(session_factory) -> str:
    db = session_factory()
    organization = Organization(login="acme", name="Acme", specialities=["rockets"])
    founder = AssociatedPerson(login="alice", name="Alice")
    db.add_all([organization, founder])
    db.flush()
    project = Project(name="rocket", owning_organization=organization.id, star_count=10, hackernews_stories=["https://news.ycombinator.com/item?id=1"])
    db.add(project)
    db.flush()
    db.add(FoundedBy(founder_id=founder.id, project_id=project.id))
    db.commit()
    project_id = project.id
    db.close()
    return project_id


@pytest.mark.asyncio
async def test_all_projects_returns_owner_and_founders(session_factory) -> None:
    _seed(session_factory)

    result = await schema.execute(
        """
        query {
          allProjects {
            name
            starCount
            isBookmarked
            hackernewsStories
            owningOrganization { login specialities }
            owningPerson { login }
            founders { login name }
          }
        }
        """,
        context_value=_context(session_factory),
    )

    assert result.errors is None
    assert result.data["allProjects"] == [
        {
            "name": "rocket",
            "starCount": 10,
            "isBookmarked": False,
            "hackernewsStories": ["https://news.ycombinator.com/item?id=1"],
            "owningOrganization": {"login": "acme", "specialities": ["rockets"]},
            "owningPerson": None,
            "founders": [{"login": "alice", "name": "Alice"}],
        }
    ]


@pytest.mark.asyncio
async def test_trending_developers_query(session_factory) -> None:
    result = await schema.execute(
        'query { trendingDevelopers(since: "weekly") { name username repo } }',
        context_value=_context(session_factory),
    )

    assert result.errors is None
    assert result.data["trendingDevelopers"] == [{"name": "Alice", "username": "alice", "repo": "wonder"}]


@pytest.mark.asyncio
async def test_add_project_mutations_return_mutation_response(session_factory) -> None:
    orchestrator = FakeOrchestrator()
    context = _context(session_factory, orchestrator=orchestrator)

    by_name = await schema.execute(
        'mutation { addProjectByName(name: "rocket", owner: "acme") { code message hint } }',
        context_value=context,
    )
    by_url = await schema.execute(
        'mutation { addProjectByUrl(url: "not a url") { code message hint } }',
        context_value=context,
    )

    assert by_name.data["addProjectByName"]["code"] == "409"
    assert orchestrator.added == [("acme", "rocket")]
    assert by_url.data["addProjectByUrl"]["code"] == "400"


@pytest.mark.asyncio
async def test_bookmark_mutations_need_a_user(session_factory) -> None:
    project_id = _seed(session_factory)

    result = await schema.execute(
        'mutation AddBookmark($id: ID!) { addBookmark(projectID: $id, category: "tools") { code hint } }',
        variable_values={"id": project_id},
        context_value=_context(session_factory, user_id="  "),
    )

    assert result.data["addBookmark"] == {"code": "400", "hint": "Are you loggedIn?"}


@pytest.mark.asyncio
async def test_bookmark_mutation_flow(session_factory) -> None:
    project_id = _seed(session_factory)
    context = _context(session_factory, user_id="user-1")

    added = await schema.execute(
        'mutation AddBookmark($id: ID!) { addBookmark(projectID: $id, category: "tools") { code } }',
        variable_values={"id": project_id},
        context_value=context,
    )
    edited = await schema.execute(
        'mutation Edit($id: ID!) { editBookmarkCategory(projectID: $id, newCategory: "space") { code } }',
        variable_values={"id": project_id},
        context_value=context,
    )
    renamed = await schema.execute(
        'mutation { renameBookmarkCategory(oldCategory: "space", newCategory: "rockets") { code } }',
        context_value=context,
    )
    projects = await schema.execute("query { allProjects { isBookmarked } }", context_value=context)
    deleted = await schema.execute(
        'mutation Delete($id: ID!) { deleteBookmark(projectID: $id) { code } }',
        variable_values={"id": project_id},
        context_value=context,
    )

    assert added.data["addBookmark"]["code"] == "201"
    assert edited.data["editBookmarkCategory"]["code"] == "204"
    assert renamed.data["renameBookmarkCategory"]["code"] == "204"
    assert projects.data["allProjects"] == [{"isBookmarked": True}]
    assert deleted.data["deleteBookmark"]["code"] == "204"
