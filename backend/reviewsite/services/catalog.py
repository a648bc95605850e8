"""Catalog lookups and rating aggregates for albums and tracks."""
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from reviewsite.models.album import Album
from reviewsite.models.review import Review, ReviewStatus
from reviewsite.models.target import ReviewTarget, TargetKind
from reviewsite.models.track import Track

logger = logging.getLogger(__name__)

TARGET_MODELS = {
    TargetKind.ALBUM: Album,
    TargetKind.TRACK: Track,
    TargetKind.REVIEW: Review,
}


class CatalogService:
    """Existence checks and average-rating maintenance."""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, kind: TargetKind, target_id: int) -> bool:
        """Check that a live album/track/review exists."""
        model = TARGET_MODELS[TargetKind(kind)]
        found = (
            self.db.query(model.id)
            .filter(model.id == target_id, model.deleted_at.is_(None))
            .first()
        )
        return found is not None

    def recalculate_average_rating(self, target: ReviewTarget) -> Optional[float]:
        """Recompute a target's average from its live approved reviews.

        The mean final score is rounded half up to a whole number; a target
        without approved reviews gets 0. Pending writes are flushed first so
        the aggregate reflects the current transaction. The album/track row
        is locked before the reviews are read, so concurrent moderations of
        the same target queue and each sees the others' committed reviews.
        """
        self.db.flush()

        entity = self.db.get(TARGET_MODELS[target.kind], target.id, with_for_update=True)
        if entity is None:
            logger.warning("Cannot update average rating: %s %s missing", target.kind.value, target.id)
            return None

        column = Review.album_id if target.kind == TargetKind.ALBUM else Review.track_id
        average = (
            self.db.query(func.avg(Review.final_score))
            .filter(
                column == target.id,
                Review.status == ReviewStatus.APPROVED.value,
                Review.deleted_at.is_(None),
            )
            .scalar()
        )
        rating = 0.0 if average is None else float(int(float(average) + 0.5))
        entity.average_rating = rating
        self.db.flush()
        logger.debug("Average rating for %s %s is now %s", target.kind.value, target.id, rating)
        return rating

    def recalculate_all(self) -> int:
        """Recompute the aggregate of every live album and track."""
        count = 0
        for album_id, in self.db.query(Album.id).filter(Album.deleted_at.is_(None)).all():
            self.recalculate_average_rating(ReviewTarget.album(album_id))
            count += 1
        for track_id, in self.db.query(Track.id).filter(Track.deleted_at.is_(None)).all():
            self.recalculate_average_rating(ReviewTarget.track(track_id))
            count += 1
        return count
