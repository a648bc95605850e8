"""Activity log model."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from reviewsite.database import Base


class ActivityLog(Base):
    """Audit log of review and like actions."""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    action = Column(String(50), nullable=False, index=True)  # review_created, review_approved, like, unlike, ...
    entity_type = Column(String(50))  # album, track, review
    entity_id = Column(Integer)
    details = Column(JSON)  # Additional context (use JSON for SQLite compat)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<Activity {self.action} by user {self.user_id}>"
