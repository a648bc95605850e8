"""Likes on albums, tracks and reviews.

One ledger serves all three kinds. Liking relies on the partial unique
index over live like rows: a concurrent duplicate insert fails inside its
savepoint and is reported as "already liked" instead of an error.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Set

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from reviewsite.database import transaction, unique_insert
from reviewsite.exceptions import TargetNotFoundError, UnauthenticatedError
from reviewsite.models.likes import AlbumLike, TrackLike, ReviewLike
from reviewsite.models.target import TargetKind
from reviewsite.services.activity import ActivityService
from reviewsite.services.catalog import CatalogService
from reviewsite.services.identity import Actor

logger = logging.getLogger(__name__)

LIKE_MODELS = {
    TargetKind.ALBUM: AlbumLike,
    TargetKind.TRACK: TrackLike,
    TargetKind.REVIEW: ReviewLike,
}


@dataclass(frozen=True)
class ReactResult:
    created: bool
    count: int


@dataclass(frozen=True)
class UnreactResult:
    removed: bool
    count: int


class ReactionLedger:
    """At most one live like per (user, target), for every target kind."""

    def __init__(self, db: Session):
        self.db = db
        self.catalog = CatalogService(db)
        self.activity = ActivityService(db)

    @staticmethod
    def _model(kind: TargetKind):
        return LIKE_MODELS[TargetKind(kind)]

    def _live(self, kind: TargetKind, target_id: int):
        model = self._model(kind)
        target_column = getattr(model, model.target_column)
        return self.db.query(model).filter(
            target_column == target_id,
            model.deleted_at.is_(None),
        )

    def react(self, actor: Actor, kind: TargetKind, target_id: int) -> ReactResult:
        """Like a target. Liking twice is a successful no-op.

        Raises:
            TargetNotFoundError: the album/track/review is absent or deleted
        """
        if actor is None:
            raise UnauthenticatedError()
        kind = TargetKind(kind)
        model = self._model(kind)

        with transaction(self.db):
            if not self.catalog.exists(kind, target_id):
                raise TargetNotFoundError(kind.value, target_id)

            key = {"user_id": actor.id, model.target_column: target_id}
            created = unique_insert(self.db, model(**key), **key)
            if created:
                self.activity.log(actor.id, "like", kind.value, target_id)
            count = self.count(kind, target_id)

        if created:
            logger.info("User %s liked %s %s", actor.id, kind.value, target_id)
        else:
            logger.debug("User %s already likes %s %s", actor.id, kind.value, target_id)
        return ReactResult(created=created, count=count)

    def unreact(self, actor: Actor, kind: TargetKind, target_id: int) -> UnreactResult:
        """Remove a like. Unliking something not liked is a successful no-op."""
        if actor is None:
            raise UnauthenticatedError()
        kind = TargetKind(kind)
        model = self._model(kind)
        target_column = getattr(model, model.target_column)

        with transaction(self.db):
            result = self.db.execute(
                update(model)
                .where(
                    model.user_id == actor.id,
                    target_column == target_id,
                    model.deleted_at.is_(None),
                )
                .values(deleted_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount > 0
            if removed:
                self.activity.log(actor.id, "unlike", kind.value, target_id)
            count = self.count(kind, target_id)

        if removed:
            logger.info("User %s unliked %s %s", actor.id, kind.value, target_id)
        return UnreactResult(removed=removed, count=count)

    def count(self, kind: TargetKind, target_id: int) -> int:
        """Number of live likes on a target."""
        model = self._model(kind)
        return self._live(kind, target_id).with_entities(func.count(model.id)).scalar() or 0

    def counts(self, kind: TargetKind, target_ids: Iterable[int]) -> Dict[int, int]:
        """Live like counts for several targets of one kind."""
        ids = list(target_ids)
        if not ids:
            return {}
        model = self._model(kind)
        target_column = getattr(model, model.target_column)
        rows = (
            self.db.query(target_column, func.count(model.id))
            .filter(target_column.in_(ids), model.deleted_at.is_(None))
            .group_by(target_column)
            .all()
        )
        counts = {target_id: 0 for target_id in ids}
        counts.update({target_id: total for target_id, total in rows})
        return counts

    def has_reacted(self, actor: Optional[Actor], kind: TargetKind, target_id: int) -> bool:
        """Check whether the actor currently likes a target."""
        if actor is None:
            return False
        model = self._model(kind)
        return self._live(kind, target_id).filter(model.user_id == actor.id).first() is not None

    def liked_ids(self, actor: Actor, kind: TargetKind) -> Set[int]:
        """IDs of every target of one kind the actor currently likes."""
        model = self._model(kind)
        target_column = getattr(model, model.target_column)
        rows = (
            self.db.query(target_column)
            .filter(model.user_id == actor.id, model.deleted_at.is_(None))
            .all()
        )
        return {row[0] for row in rows}
