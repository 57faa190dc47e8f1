"""Project model for repositories discovered on the trending page."""

from datetime import datetime
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.config.database import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


class Project(Base):
    """Project entity mapped to `project` table."""

    __tablename__ = "project"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(200), nullable=False, index=True)
    about = Column(Text, nullable=True)
    eli5 = Column(Text, nullable=True)

    star_count = Column(Integer, nullable=False, default=0)
    issue_count = Column(Integer, nullable=False, default=0)
    fork_count = Column(Integer, nullable=False, default=0)
    pull_request_count = Column(Integer, nullable=False, default=0)
    contributor_count = Column(Integer, nullable=False, default=0)

    github_url = Column(String(500), nullable=True)
    website_url = Column(String(500), nullable=True)

    owning_organization = Column(String(36), ForeignKey("organization.id", ondelete="SET NULL"), nullable=True)
    owning_person = Column(String(36), ForeignKey("associated_person.id", ondelete="SET NULL"), nullable=True)

    is_bookmarked = Column(Boolean, nullable=False, default=False)
    is_trending_daily = Column(Boolean, nullable=False, default=False)
    is_trending_weekly = Column(Boolean, nullable=False, default=False)
    is_trending_monthly = Column(Boolean, nullable=False, default=False)

    hackernews_sentiment = Column(Text, nullable=True)
    hackernews_stories = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    organization = relationship("Organization", backref="projects")
    person = relationship("AssociatedPerson", backref="owned_projects")
    founders = relationship("AssociatedPerson", secondary="founded_by", viewonly=True)

    # NULL owners are distinct in unique indexes, so each pair only binds its own owner kind
    __table_args__ = (
        Index("idx_project_created_at", "created_at"),
        Index("uq_project_name_organization", "name", "owning_organization", unique=True),
        Index("uq_project_name_person", "name", "owning_person", unique=True),
    )

    def __repr__(self):
        return f"<Project {self.name}>"
