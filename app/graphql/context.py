"""Request context and FastAPI router for the GraphQL endpoint."""

from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import Request
from strawberry.fastapi import GraphQLRouter

from app.config.database import SessionLocal
from app.config.settings import settings
from app.graphql.schema import schema
from app.orchestrator import TrendingOrchestrator
from app.services.bookmarks import BookmarkService


def build_context(
    *,
    user_id: Optional[str],
    orchestrator: TrendingOrchestrator,
    bookmarks: BookmarkService,
    session_factory: Callable[[], Any] = SessionLocal,
) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "orchestrator": orchestrator,
        "bookmarks": bookmarks,
        "session_factory": session_factory,
    }


def create_graphql_router(
    orchestrator: TrendingOrchestrator,
    *,
    bookmarks: Optional[BookmarkService] = None,
    session_factory: Callable[[], Any] = SessionLocal,
) -> GraphQLRouter:
    """Mountable router; the user id comes from the header set by the upstream gateway."""
    bookmark_service = bookmarks or BookmarkService(session_factory=session_factory)

    async def get_context(request: Request) -> dict[str, Any]:
        return build_context(
            user_id=request.headers.get(settings.USER_ID_HEADER),
            orchestrator=orchestrator,
            bookmarks=bookmark_service,
            session_factory=session_factory,
        )

    return GraphQLRouter(schema, context_getter=get_context)
