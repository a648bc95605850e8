"""Activity (audit) logging service."""
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from reviewsite.models.activity import ActivityLog


class ActivityService:
    """Service for recording review and like actions.

    Entries are flushed into the caller's open transaction, so they commit
    or roll back together with the change they describe.
    """

    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        user_id: int,
        action: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """Record a user activity."""
        activity = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
        self.db.add(activity)
        self.db.flush()
        return activity

    def get_user_activity(self, user_id: int, limit: int = 50) -> List[ActivityLog]:
        """Get a user's most recent activity."""
        return (
            self.db.query(ActivityLog)
            .filter(ActivityLog.user_id == user_id)
            .order_by(ActivityLog.id.desc())
            .limit(limit)
            .all()
        )

    def get_entity_activity(self, entity_type: str, entity_id: int) -> List[ActivityLog]:
        """Get the full history of one entity, oldest first."""
        return (
            self.db.query(ActivityLog)
            .filter(
                ActivityLog.entity_type == entity_type,
                ActivityLog.entity_id == entity_id,
            )
            .order_by(ActivityLog.id)
            .all()
        )
