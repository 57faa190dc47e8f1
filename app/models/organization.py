"""Organization model: GitHub organizations owning projects, enriched from LinkedIn."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from app.config.database import Base
from app.models.project import new_uuid


class Organization(Base):
    """GitHub organization mapped to `organization` table."""

    __tablename__ = "organization"

    id = Column(String(36), primary_key=True, default=new_uuid)
    login = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    repository_count = Column(Integer, nullable=False, default=0)
    email = Column(String(200), nullable=True)
    website_url = Column(String(500), nullable=True)
    twitter_username = Column(String(100), nullable=True)
    github_url = Column(String(500), nullable=True)

    # LinkedIn columns stay empty until the first successful lookup
    linkedin_url = Column(String(500), nullable=True)
    linkedin_description = Column(Text, nullable=True)
    industry = Column(String(200), nullable=True)
    company_size = Column(String(50), nullable=True)
    follower_count = Column(Integer, nullable=True)
    founded_year = Column(Integer, nullable=True)
    headquarters = Column(String(300), nullable=True)
    specialities = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Organization {self.login}>"
