"""Link table between projects and their founders."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String

from app.config.database import Base


class FoundedBy(Base):
    """Founder link mapped to `founded_by` table."""

    __tablename__ = "founded_by"

    founder_id = Column(String(36), ForeignKey("associated_person.id", ondelete="CASCADE"), primary_key=True)
    project_id = Column(String(36), ForeignKey("project.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<FoundedBy {self.founder_id} -> {self.project_id}>"
