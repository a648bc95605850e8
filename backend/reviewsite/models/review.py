"""Review model."""
import enum
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey, Text, CheckConstraint, Index,
)
from sqlalchemy import text as sql_text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from reviewsite.database import Base
from reviewsite.models.target import ReviewTarget, TargetKind


class ReviewStatus(str, enum.Enum):
    """Moderation state of a review."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_LIVE_ALBUM_REVIEW = "deleted_at IS NULL AND album_id IS NOT NULL"
_LIVE_TRACK_REVIEW = "deleted_at IS NULL AND track_id IS NOT NULL"


class Review(Base):
    """A user's scored review of one album or one track."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint(
            "(album_id IS NOT NULL AND track_id IS NULL) OR (album_id IS NULL AND track_id IS NOT NULL)",
            name="ck_reviews_single_target",
        ),
        CheckConstraint("rating_rhymes BETWEEN 1 AND 10", name="ck_reviews_rating_rhymes"),
        CheckConstraint("rating_structure BETWEEN 1 AND 10", name="ck_reviews_rating_structure"),
        CheckConstraint("rating_implementation BETWEEN 1 AND 10", name="ck_reviews_rating_implementation"),
        CheckConstraint("rating_individuality BETWEEN 1 AND 10", name="ck_reviews_rating_individuality"),
        CheckConstraint("atmosphere_rating BETWEEN 1 AND 10", name="ck_reviews_atmosphere_rating"),
        CheckConstraint(
            "atmosphere_multiplier >= 1.0 AND atmosphere_multiplier <= 1.6072",
            name="ck_reviews_atmosphere_multiplier",
        ),
        # One live review per author per album / track
        Index(
            "uq_reviews_user_album_live", "user_id", "album_id", unique=True,
            sqlite_where=sql_text(_LIVE_ALBUM_REVIEW), postgresql_where=sql_text(_LIVE_ALBUM_REVIEW),
        ),
        Index(
            "uq_reviews_user_track_live", "user_id", "track_id", unique=True,
            sqlite_where=sql_text(_LIVE_TRACK_REVIEW), postgresql_where=sql_text(_LIVE_TRACK_REVIEW),
        ),
        Index("ix_reviews_status_created", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Exactly one is set; use .target instead of reading these directly
    album_id = Column(Integer, ForeignKey("albums.id"), index=True)
    track_id = Column(Integer, ForeignKey("tracks.id"), index=True)

    text = Column(Text, default="")

    # Ratings (1-10)
    rating_rhymes = Column(Integer, nullable=False)
    rating_structure = Column(Integer, nullable=False)
    rating_implementation = Column(Integer, nullable=False)
    rating_individuality = Column(Integer, nullable=False)
    atmosphere_rating = Column(Integer, nullable=False)  # Slider input

    # Derived from the ratings, never set directly
    atmosphere_multiplier = Column(Float, nullable=False)  # 1.0000 - 1.6072
    final_score = Column(Integer, nullable=False)

    # Moderation
    status = Column(String(20), default=ReviewStatus.PENDING.value, nullable=False)
    moderated_by = Column(Integer, ForeignKey("users.id"))
    moderated_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), index=True)

    author = relationship("User", back_populates="reviews", foreign_keys=[user_id])
    moderator = relationship("User", foreign_keys=[moderated_by])
    album = relationship("Album")
    track = relationship("Track")
    live_likes = relationship(
        "ReviewLike",
        primaryjoin="and_(Review.id == ReviewLike.review_id, ReviewLike.deleted_at.is_(None))",
        viewonly=True,
    )

    @property
    def target(self) -> ReviewTarget:
        """The album or track this review is about."""
        if self.album_id is not None:
            return ReviewTarget(TargetKind.ALBUM, self.album_id)
        return ReviewTarget(TargetKind.TRACK, self.track_id)

    @property
    def ratings(self) -> dict:
        return {
            "rating_rhymes": self.rating_rhymes,
            "rating_structure": self.rating_structure,
            "rating_implementation": self.rating_implementation,
            "rating_individuality": self.rating_individuality,
        }

    @property
    def likes_count(self) -> int:
        """Number of live likes on this review."""
        return len(self.live_likes)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<Review {self.id} by user {self.user_id} ({self.status})>"


class ModerationDecision(str, enum.Enum):
    """Admin decision on a pending review."""
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> ReviewStatus:
        if self is ModerationDecision.APPROVE:
            return ReviewStatus.APPROVED
        return ReviewStatus.REJECTED
