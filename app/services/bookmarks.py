"""User bookmark operations behind the GraphQL mutations."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.config.database import SessionLocal
from app.services import responses
from app.services.project_store import ProjectStore
from app.services.responses import OperationResult

logger = logging.getLogger(__name__)


class BookmarkService:
    """Each call is one unit of work: committed on success, rolled back on error."""

    def __init__(self, session_factory: Callable[[], Any] = SessionLocal) -> None:
        self._session_factory = session_factory

    def add_bookmark(self, user_id: Optional[str], project_id: str, category: str) -> OperationResult:
        if not user_id:
            return responses.BAD_USER

        def _add(store: ProjectStore) -> OperationResult:
            if store.get_project(project_id) is None:
                return responses.PROJECT_DOES_NOT_EXIST
            if store.bookmark_is_already_in_db(user_id, project_id):
                return responses.BOOKMARK_ALREADY_EXISTS
            store.insert_bookmark(project_id, user_id, category)
            return responses.CREATED

        return self._run("add bookmark", _add)

    def delete_bookmark(self, user_id: Optional[str], project_id: str) -> OperationResult:
        if not user_id:
            return responses.BAD_USER

        def _delete(store: ProjectStore) -> OperationResult:
            if not store.delete_bookmark(user_id, project_id):
                return responses.BOOKMARK_DOES_NOT_EXIST
            return responses.CHANGED

        return self._run("delete bookmark", _delete)

    def edit_bookmark_category(self, user_id: Optional[str], project_id: str, new_category: str) -> OperationResult:
        if not user_id:
            return responses.BAD_USER

        def _edit(store: ProjectStore) -> OperationResult:
            if not store.edit_bookmark_category(user_id, project_id, new_category):
                return responses.BOOKMARK_DOES_NOT_EXIST
            return responses.CHANGED

        return self._run("edit bookmark category", _edit)

    def rename_bookmark_category(self, user_id: Optional[str], old_category: str, new_category: str) -> OperationResult:
        if not user_id:
            return responses.BAD_USER

        def _rename(store: ProjectStore) -> OperationResult:
            if store.rename_bookmark_category(user_id, old_category, new_category) == 0:
                return responses.CATEGORY_DOES_NOT_EXIST
            return responses.CHANGED

        return self._run("rename bookmark category", _rename)

    def _run(self, action: str, operation: Callable[[ProjectStore], OperationResult]) -> OperationResult:
        db = self._session_factory()
        try:
            result = operation(ProjectStore(db))
            if result.success:
                db.commit()
            else:
                db.rollback()
            return result
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            return responses.database_error(e)
        finally:
            db.close()
