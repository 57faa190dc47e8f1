"""User bookmark model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String

from app.config.database import Base


class Bookmark(Base):
    """User bookmark of a project mapped to `bookmark` table."""

    __tablename__ = "bookmark"

    user_id = Column(String(255), primary_key=True)
    project_id = Column(String(36), ForeignKey("project.id", ondelete="CASCADE"), primary_key=True)
    category = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_bookmark_user_category", "user_id", "category"),
    )

    def __repr__(self):
        return f"<Bookmark {self.user_id}:{self.project_id} ({self.category})>"
