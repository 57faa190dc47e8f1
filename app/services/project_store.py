"""Data access layer over the project, owner, founder and bookmark tables."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Optional

from sqlalchemy import func

from app.models import AssociatedPerson, Bookmark, FoundedBy, Organization, Project

logger = logging.getLogger(__name__)

TRENDING_STATES = ("is_trending_daily", "is_trending_weekly", "is_trending_monthly")


class ProjectStore:
    """
    Thin CRUD wrapper around a SQLAlchemy session

    Methods flush but never commit; the caller owns the unit of work.
    """

    def __init__(self, db: Any) -> None:
        self.db = db

    # Projects

    def find_project(self, name: str, owner: str) -> Optional[Project]:
        """Find a project by repository name and owner login (case-insensitive login)."""
        owner_key = owner.lower()
        candidates = self.db.query(Project).filter(Project.name == name).all()
        for project in candidates:
            if project.owning_organization:
                organization = self.db.query(Organization).filter_by(id=project.owning_organization).first()
                if organization is not None and organization.login.lower() == owner_key:
                    return project
            elif project.owning_person:
                person = self.db.query(AssociatedPerson).filter_by(id=project.owning_person).first()
                if person is not None and person.login.lower() == owner_key:
                    return project
            elif project.github_url and project.github_url.rstrip("/").lower().endswith(f"/{owner_key}/{name.lower()}"):
                return project
        return None

    def repo_is_already_in_db(self, name: str, owner: str) -> bool:
        return self.find_project(name, owner) is not None

    def get_project(self, project_id: str) -> Optional[Project]:
        return self.db.query(Project).filter_by(id=project_id).first()

    def get_project_id(self, name: str, owner: str) -> Optional[str]:
        project = self.find_project(name, owner)
        return project.id if project is not None else None

    def insert_project(self, row: dict[str, Any]) -> Project:
        project = Project(**row)
        self.db.add(project)
        self.db.flush()
        return project

    def update_project(self, name: str, owner: str, fields: dict[str, Any]) -> bool:
        """Apply `fields` to the project; False when the project is unknown."""
        project = self.find_project(name, owner)
        if project is None:
            return False
        for field_name, value in fields.items():
            setattr(project, field_name, value)
        project.updated_at = datetime.utcnow()
        self.db.flush()
        return True

    def list_projects(self) -> list[Project]:
        return self.db.query(Project).order_by(Project.star_count.desc()).all()

    def list_projects_created_before(self, cutoff: datetime) -> list[Project]:
        return self.db.query(Project).filter(Project.created_at < cutoff).all()

    def purge_trending_state(self) -> int:
        """Reset every trending flag; returns the number of touched rows."""
        count = self.db.query(Project).update({state: False for state in TRENDING_STATES})
        self.db.flush()
        return count

    def delete_stale_projects(self, cutoff: datetime) -> int:
        """Delete projects that are not bookmarked and were created before `cutoff`."""
        stale = (
            self.db.query(Project)
            .filter(Project.is_bookmarked.is_(False), Project.created_at < cutoff)
            .all()
        )
        for project in stale:
            self.db.query(FoundedBy).filter_by(project_id=project.id).delete(synchronize_session=False)
            self.db.delete(project)
        self.db.flush()
        return len(stale)

    def resolve_owner_login(self, project: Project) -> Optional[str]:
        """Owner login of a project: organization first, then person."""
        if project.owning_organization:
            organization = self.db.query(Organization).filter_by(id=project.owning_organization).first()
            if organization is not None:
                return organization.login
        if project.owning_person:
            person = self.db.query(AssociatedPerson).filter_by(id=project.owning_person).first()
            if person is not None:
                return person.login
        return None

    # Organizations and people

    def get_organization(self, login: str) -> Optional[Organization]:
        return self.db.query(Organization).filter(func.lower(Organization.login) == login.lower()).first()

    def get_organization_id(self, login: str) -> Optional[str]:
        organization = self.get_organization(login)
        return organization.id if organization is not None else None

    def insert_organization(self, row: dict[str, Any]) -> Organization:
        organization = Organization(**row)
        self.db.add(organization)
        self.db.flush()
        return organization

    def update_organization(self, login: str, fields: dict[str, Any]) -> bool:
        organization = self.get_organization(login)
        if organization is None:
            return False
        for field_name, value in fields.items():
            setattr(organization, field_name, value)
        self.db.flush()
        return True

    def get_person(self, login: str) -> Optional[AssociatedPerson]:
        return self.db.query(AssociatedPerson).filter(func.lower(AssociatedPerson.login) == login.lower()).first()

    def get_person_id(self, login: str) -> Optional[str]:
        person = self.get_person(login)
        return person.id if person is not None else None

    def insert_person(self, row: dict[str, Any]) -> AssociatedPerson:
        person = AssociatedPerson(**row)
        self.db.add(person)
        self.db.flush()
        return person

    # Founders

    def founder_link_exists(self, founder_id: str, project_id: str) -> bool:
        return self.db.query(FoundedBy).filter_by(founder_id=founder_id, project_id=project_id).first() is not None

    def insert_founder_link(self, founder_id: str, project_id: str) -> FoundedBy:
        link = FoundedBy(founder_id=founder_id, project_id=project_id)
        self.db.add(link)
        self.db.flush()
        return link

    # Bookmarks

    def get_bookmark(self, user_id: str, project_id: str) -> Optional[Bookmark]:
        return self.db.query(Bookmark).filter_by(user_id=user_id, project_id=project_id).first()

    def bookmark_is_already_in_db(self, user_id: str, project_id: str) -> bool:
        return self.get_bookmark(user_id, project_id) is not None

    def insert_bookmark(self, project_id: str, user_id: str, category: str) -> Bookmark:
        bookmark = Bookmark(user_id=user_id, project_id=project_id, category=category)
        self.db.add(bookmark)
        self.db.flush()
        self._sync_bookmarked_flag(project_id)
        return bookmark

    def delete_bookmark(self, user_id: str, project_id: str) -> bool:
        bookmark = self.get_bookmark(user_id, project_id)
        if bookmark is None:
            return False
        self.db.delete(bookmark)
        self.db.flush()
        self._sync_bookmarked_flag(project_id)
        return True

    def edit_bookmark_category(self, user_id: str, project_id: str, new_category: str) -> bool:
        bookmark = self.get_bookmark(user_id, project_id)
        if bookmark is None:
            return False
        bookmark.category = new_category
        self.db.flush()
        return True

    def rename_bookmark_category(self, user_id: str, old_category: str, new_category: str) -> int:
        """Move every bookmark of `user_id` in `old_category` to `new_category`."""
        count = (
            self.db.query(Bookmark)
            .filter(Bookmark.user_id == user_id, Bookmark.category == old_category)
            .update({"category": new_category})
        )
        self.db.flush()
        return count

    def list_bookmarks(self, user_id: str) -> list[Bookmark]:
        return self.db.query(Bookmark).filter_by(user_id=user_id).order_by(Bookmark.created_at).all()

    def _sync_bookmarked_flag(self, project_id: str) -> None:
        project = self.get_project(project_id)
        if project is None:
            return
        project.is_bookmarked = self.db.query(Bookmark).filter_by(project_id=project_id).first() is not None
        self.db.flush()
