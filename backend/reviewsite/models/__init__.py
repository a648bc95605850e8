"""SQLAlchemy models for the review site."""
from reviewsite.models.target import TargetKind, ReviewTarget
from reviewsite.models.user import User
from reviewsite.models.genre import Genre
from reviewsite.models.album import Album
from reviewsite.models.track import Track, track_genres
from reviewsite.models.review import Review, ReviewStatus, ModerationDecision
from reviewsite.models.likes import AlbumLike, TrackLike, ReviewLike
from reviewsite.models.activity import ActivityLog

__all__ = [
    "TargetKind",
    "ReviewTarget",
    "User",
    "Genre",
    "Album",
    "Track",
    "track_genres",
    "Review",
    "ReviewStatus",
    "ModerationDecision",
    "AlbumLike",
    "TrackLike",
    "ReviewLike",
    "ActivityLog",
]
