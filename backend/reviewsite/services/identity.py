"""Resolved caller identity.

Token and header parsing happen at the boundary; services only ever see an
``Actor`` passed in explicitly.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from reviewsite.exceptions import UnauthenticatedError
from reviewsite.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The user performing an operation."""
    id: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, is_admin=bool(user.is_admin))


def _live_users(db: Session):
    return db.query(User).filter(User.deleted_at.is_(None))


def resolve_actor(db: Session, user_id: int) -> Actor:
    """Resolve a user id to an Actor, or raise UnauthenticatedError."""
    user = _live_users(db).filter(User.id == user_id).first()
    if not user:
        logger.warning("Identity resolution failed for user id %s", user_id)
        raise UnauthenticatedError()
    return Actor.from_user(user)


def resolve_actor_by_username(db: Session, username: str) -> Actor:
    """Resolve a username to an Actor, or raise UnauthenticatedError."""
    user = _live_users(db).filter(User.username == username).first()
    if not user:
        logger.warning("Identity resolution failed for username %r", username)
        raise UnauthenticatedError(f"Unknown user '{username}'")
    return Actor.from_user(user)
