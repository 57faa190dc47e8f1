"""Associated person model: project owners and founders."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from app.config.database import Base
from app.models.project import new_uuid


class AssociatedPerson(Base):
    """GitHub user mapped to `associated_person` table."""

    __tablename__ = "associated_person"

    id = Column(String(36), primary_key=True, default=new_uuid)
    login = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    email = Column(String(200), nullable=True)
    website_url = Column(String(500), nullable=True)
    twitter_username = Column(String(100), nullable=True)
    github_url = Column(String(500), nullable=True)
    company = Column(String(200), nullable=True)
    location = Column(String(200), nullable=True)
    bio = Column(Text, nullable=True)
    repository_count = Column(Integer, nullable=False, default=0)
    follower_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<AssociatedPerson {self.login}>"
