"""Like tables for albums, tracks and reviews.

Each table keeps unliked rows (deleted_at set) for history. A partial
unique index over the live rows guarantees at most one live like per
user and target, so liking again after unliking inserts a fresh row.
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func
from reviewsite.database import Base

_LIVE = "deleted_at IS NULL"


class LikeMixin:
    """Columns shared by every like table."""

    target_column = None

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    deleted_at = Column(DateTime(timezone=True))

    @declared_attr
    def user_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    @classmethod
    def _live_unique_index(cls, tablename: str, target_column: str) -> Index:
        return Index(
            f"uq_{tablename}_user_{target_column}_live",
            "user_id",
            target_column,
            unique=True,
            sqlite_where=text(_LIVE),
            postgresql_where=text(_LIVE),
        )


class AlbumLike(LikeMixin, Base):
    """A user's like on an album."""

    __tablename__ = "album_likes"
    __table_args__ = (LikeMixin._live_unique_index("album_likes", "album_id"),)

    target_column = "album_id"
    album_id = Column(Integer, ForeignKey("albums.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<AlbumLike user={self.user_id} album={self.album_id}>"


class TrackLike(LikeMixin, Base):
    """A user's like on a track."""

    __tablename__ = "track_likes"
    __table_args__ = (LikeMixin._live_unique_index("track_likes", "track_id"),)

    target_column = "track_id"
    track_id = Column(Integer, ForeignKey("tracks.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<TrackLike user={self.user_id} track={self.track_id}>"


class ReviewLike(LikeMixin, Base):
    """A user's like on a review."""

    __tablename__ = "review_likes"
    __table_args__ = (LikeMixin._live_unique_index("review_likes", "review_id"),)

    target_column = "review_id"
    review_id = Column(Integer, ForeignKey("reviews.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<ReviewLike user={self.user_id} review={self.review_id}>"
