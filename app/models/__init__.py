"""Database models"""

from app.models.project import Project
from app.models.organization import Organization
from app.models.associated_person import AssociatedPerson
from app.models.founded_by import FoundedBy
from app.models.bookmark import Bookmark

__all__ = [
    "Project",
    "Organization",
    "AssociatedPerson",
    "FoundedBy",
    "Bookmark",
]
