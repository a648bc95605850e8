"""Review lifecycle: scoring, editing, moderation and soft deletion.

State machine:
    PENDING -> APPROVED | REJECTED   (admin moderation)
    any     -> PENDING               (author edits content)

Every mutation runs in one transaction together with the album/track
average-rating refresh it triggers.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reviewsite.config import settings
from reviewsite.database import transaction, unique_insert
from reviewsite.exceptions import (
    DuplicateReviewError,
    ForbiddenError,
    InvalidDecisionError,
    InvalidTargetError,
    InvalidTransitionError,
    NotFoundError,
    TargetNotFoundError,
    UnauthenticatedError,
)
from reviewsite.models.likes import ReviewLike
from reviewsite.models.review import Review, ReviewStatus, ModerationDecision
from reviewsite.models.target import ReviewTarget
from reviewsite.services.activity import ActivityService
from reviewsite.services.catalog import CatalogService
from reviewsite.services.identity import Actor
from reviewsite.services.scoring import RATING_FIELDS, compute_score, validate_rating

logger = logging.getLogger(__name__)


def _require_actor(actor: Optional[Actor]) -> Actor:
    if actor is None:
        raise UnauthenticatedError()
    return actor


class ReviewService:
    """Service for creating, editing, moderating and deleting reviews."""

    def __init__(self, db: Session):
        self.db = db
        self.catalog = CatalogService(db)
        self.activity = ActivityService(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _live_query(self):
        return self.db.query(Review).filter(Review.deleted_at.is_(None))

    def _get_live(self, review_id: int, for_update: bool = False) -> Review:
        query = self._live_query().filter(Review.id == review_id)
        if for_update:
            query = query.with_for_update()
        review = query.first()
        if not review:
            raise NotFoundError()
        return review

    def get(self, review_id: int) -> Review:
        """Get a live review by ID."""
        return self._get_live(review_id)

    def list_reviews(
        self,
        album_id: Optional[int] = None,
        track_id: Optional[int] = None,
        user_id: Optional[int] = None,
        status: Optional[ReviewStatus] = ReviewStatus.APPROVED,
    ) -> List[Review]:
        """List live reviews, newest first.

        Only approved reviews are returned unless another status is given;
        pass ``status=None`` for every status.
        """
        query = self._live_query()
        if album_id is not None:
            query = query.filter(Review.album_id == album_id)
        if track_id is not None:
            query = query.filter(Review.track_id == track_id)
        if user_id is not None:
            query = query.filter(Review.user_id == user_id)
        if status is not None:
            query = query.filter(Review.status == ReviewStatus(status).value)
        return query.order_by(Review.created_at.desc(), Review.id.desc()).all()

    def pending(self) -> List[Review]:
        """Moderation queue, oldest first."""
        return (
            self._live_query()
            .filter(Review.status == ReviewStatus.PENDING.value)
            .order_by(Review.created_at, Review.id)
            .all()
        )

    def popular(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[Review]:
        """Most liked approved album reviews from the recent window."""
        if limit is None or limit < 1 or limit > settings.popular_reviews_max_limit:
            limit = settings.popular_reviews_limit
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=settings.popular_reviews_window_hours)

        likes = (
            select(ReviewLike.review_id, func.count(ReviewLike.id).label("likes"))
            .where(ReviewLike.deleted_at.is_(None))
            .group_by(ReviewLike.review_id)
            .subquery()
        )
        return (
            self._live_query()
            .outerjoin(likes, likes.c.review_id == Review.id)
            .filter(
                Review.status == ReviewStatus.APPROVED.value,
                Review.album_id.isnot(None),
                Review.created_at >= cutoff,
            )
            .order_by(
                func.coalesce(likes.c.likes, 0).desc(),
                Review.created_at.desc(),
                Review.id.desc(),
            )
            .limit(limit)
            .all()
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        actor: Actor,
        target: ReviewTarget,
        rating_rhymes: int,
        rating_structure: int,
        rating_implementation: int,
        rating_individuality: int,
        atmosphere_rating: int,
        text: str = "",
    ) -> Review:
        """Create a pending review of an album or track.

        Raises:
            InvalidTargetError: target is not a single album or track
            InvalidRatingError: a rating is outside [1, 10]
            TargetNotFoundError: the album/track does not exist
            DuplicateReviewError: the author already reviewed this target
        """
        actor = _require_actor(actor)
        if not isinstance(target, ReviewTarget):
            raise InvalidTargetError()

        score = compute_score(
            rating_rhymes,
            rating_structure,
            rating_implementation,
            rating_individuality,
            atmosphere_rating,
        )

        with transaction(self.db):
            if not self.catalog.exists(target.kind, target.id):
                logger.warning("Review by user %s for missing %s %s", actor.id, target.kind.value, target.id)
                raise TargetNotFoundError(target.kind.value, target.id)

            review = Review(
                user_id=actor.id,
                text=text or "",
                rating_rhymes=rating_rhymes,
                rating_structure=rating_structure,
                rating_implementation=rating_implementation,
                rating_individuality=rating_individuality,
                atmosphere_rating=atmosphere_rating,
                atmosphere_multiplier=score.multiplier,
                final_score=score.final_score,
                status=ReviewStatus.PENDING.value,
                moderated_by=None,
                moderated_at=None,
                **target.as_columns(),
            )
            if not unique_insert(self.db, review, user_id=actor.id, **target.as_columns()):
                raise DuplicateReviewError()

            self.activity.log(
                actor.id, "review_created", "review", review.id,
                {"target": target.kind.value, "target_id": target.id, "final_score": score.final_score},
            )

        logger.info(
            "Review %s created by user %s for %s %s (score %s)",
            review.id, actor.id, target.kind.value, target.id, score.final_score,
        )
        return review

    def edit(
        self,
        actor: Actor,
        review_id: int,
        rating_rhymes: Optional[int] = None,
        rating_structure: Optional[int] = None,
        rating_implementation: Optional[int] = None,
        rating_individuality: Optional[int] = None,
        atmosphere_rating: Optional[int] = None,
        text: Optional[str] = None,
    ) -> Review:
        """Edit a review's content as its author.

        Fields left as None are unchanged. Any actual change recomputes the
        score and sends the review back to pending with the moderator
        cleared. The target cannot be changed.
        """
        actor = _require_actor(actor)

        updates = dict(zip(
            RATING_FIELDS,
            (rating_rhymes, rating_structure, rating_implementation, rating_individuality),
        ))
        updates["atmosphere_rating"] = atmosphere_rating
        updates = {field: value for field, value in updates.items() if value is not None}
        for field, value in updates.items():
            validate_rating(field, value)
        if text is not None:
            updates["text"] = text

        with transaction(self.db):
            review = self._get_live(review_id, for_update=True)
            if review.user_id != actor.id:
                logger.warning("User %s tried to edit review %s owned by %s", actor.id, review_id, review.user_id)
                raise ForbiddenError("You don't have permission to update this review")

            changes = {
                field: value for field, value in updates.items()
                if getattr(review, field) != value
            }
            if not changes:
                return review

            was_approved = review.status == ReviewStatus.APPROVED.value
            for field, value in changes.items():
                setattr(review, field, value)

            score = compute_score(atmosphere_rating=review.atmosphere_rating, **review.ratings)
            review.final_score = score.final_score
            review.atmosphere_multiplier = score.multiplier
            review.status = ReviewStatus.PENDING.value
            review.moderated_by = None
            review.moderated_at = None

            self.activity.log(
                actor.id, "review_edited", "review", review.id,
                {"fields": sorted(changes), "final_score": score.final_score},
            )
            if was_approved:
                self.catalog.recalculate_average_rating(review.target)

        logger.info("Review %s edited by user %s, back to pending", review_id, actor.id)
        return review

    def moderate(self, actor: Actor, review_id: int, decision: ModerationDecision) -> Review:
        """Approve or reject a pending review (admin only).

        Raises:
            ForbiddenError: actor is not an admin
            InvalidDecisionError: decision is not approve/reject
            NotFoundError: review is absent or deleted
            InvalidTransitionError: review is not pending
        """
        actor = _require_actor(actor)
        if not actor.is_admin:
            logger.warning("Non-admin user %s tried to moderate review %s", actor.id, review_id)
            raise ForbiddenError("Admin access required")
        try:
            decision = ModerationDecision(decision)
        except ValueError:
            raise InvalidDecisionError(decision)

        with transaction(self.db):
            review = self._get_live(review_id, for_update=True)
            if review.status != ReviewStatus.PENDING.value:
                raise InvalidTransitionError(review.status, decision.value)

            review.status = decision.resulting_status.value
            review.moderated_by = actor.id
            review.moderated_at = datetime.now(timezone.utc)

            self.activity.log(actor.id, f"review_{review.status}", "review", review.id)
            if decision is ModerationDecision.APPROVE:
                self.catalog.recalculate_average_rating(review.target)

        logger.info("Review %s %s by admin %s", review_id, review.status, actor.id)
        return review

    def approve(self, actor: Actor, review_id: int) -> Review:
        return self.moderate(actor, review_id, ModerationDecision.APPROVE)

    def reject(self, actor: Actor, review_id: int) -> Review:
        return self.moderate(actor, review_id, ModerationDecision.REJECT)

    def delete(self, actor: Actor, review_id: int) -> None:
        """Soft-delete a review (author or admin).

        The row stays for history but disappears from every read and from
        the target's average rating.
        """
        actor = _require_actor(actor)

        with transaction(self.db):
            review = self._get_live(review_id, for_update=True)
            if review.user_id != actor.id and not actor.is_admin:
                logger.warning("User %s tried to delete review %s owned by %s", actor.id, review_id, review.user_id)
                raise ForbiddenError("You don't have permission to delete this review")

            was_approved = review.status == ReviewStatus.APPROVED.value
            review.deleted_at = datetime.now(timezone.utc)

            self.activity.log(actor.id, "review_deleted", "review", review.id)
            if was_approved:
                self.catalog.recalculate_average_rating(review.target)

        logger.info("Review %s deleted by user %s", review_id, actor.id)

    def recalculate_all_ratings(self) -> int:
        """Rebuild every album and track average. Returns targets updated."""
        with transaction(self.db):
            count = self.catalog.recalculate_all()
        logger.info("Recalculated average ratings for %d albums/tracks", count)
        return count
