"""User badges earned from approved reviews."""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session, joinedload, selectinload

from reviewsite.models.album import Album
from reviewsite.models.review import Review, ReviewStatus
from reviewsite.models.track import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Badge:
    """An achievement shown on a user's profile. Lower priority sorts first."""
    name: str
    description: str
    icon: str
    priority: int


class BadgeService:
    """Compute badges from a user's live approved reviews."""

    # (minimum reviews, name, icon, priority), highest tier first
    COUNT_TIERS = (
        (51, "Critic Legend", "👑", 1),
        (21, "Review Master", "⭐", 2),
        (6, "Seasoned Critic", "📝", 3),
        (1, "Novice Critic", "🌱", 4),
    )

    GENRE_BADGES = {
        "Jazz": ("Jazz Critic", "🎷"),
        "Pop": ("Pop Expert", "🎤"),
        "Rock": ("Rock Connoisseur", "🎸"),
        "Electronic": ("Electronic Buff", "🎹"),
        "Hip-Hop": ("Hip-Hop Critic", "🥁"),
        "Classical": ("Classical Connoisseur", "🎻"),
    }

    GENRE_REVIEWS_MIN = 5
    GENRE_PRIORITY = 2
    DIVERSITY_GENRES_MIN = 5
    DIVERSITY_PRIORITY = 3
    SPECIALIST_SHARE = 0.8
    SPECIALIST_PRIORITY = 1

    def __init__(self, db: Session):
        self.db = db

    def _approved_reviews(self, user_id: int) -> List[Review]:
        return (
            self.db.query(Review)
            .options(
                joinedload(Review.album).joinedload(Album.genre),
                joinedload(Review.track).selectinload(Track.genres),
            )
            .filter(
                Review.user_id == user_id,
                Review.status == ReviewStatus.APPROVED.value,
                Review.deleted_at.is_(None),
            )
            .all()
        )

    @staticmethod
    def _genres(review: Review) -> List[str]:
        """Album reviews use the album's genre; track reviews the track's genres."""
        if review.album is not None:
            album = review.album
            if album.deleted_at is None and album.genre is not None and album.genre.deleted_at is None:
                return [album.genre.name]
            return []
        if review.track is not None and review.track.deleted_at is None:
            return [genre.name for genre in review.track.genres if genre.deleted_at is None]
        return []

    def for_user(self, user_id: int) -> List[Badge]:
        """All badges for a user, sorted by priority."""
        reviews = self._approved_reviews(user_id)
        total = len(reviews)
        if not total:
            return []

        genre_counts = Counter()
        for review in reviews:
            genre_counts.update(self._genres(review))
        # Most reviewed first, then alphabetical
        ranked = sorted(genre_counts.items(), key=lambda item: (-item[1], item[0]))

        badges = []
        for minimum, name, icon, priority in self.COUNT_TIERS:
            if total >= minimum:
                badges.append(Badge(name, f"{total} reviews", icon, priority))
                break

        for genre, count in ranked:
            if count >= self.GENRE_REVIEWS_MIN:
                name, icon = self.GENRE_BADGES.get(genre, (f"{genre} Critic", "🎵"))
                badges.append(Badge(name, f"{count} reviews of {genre}", icon, self.GENRE_PRIORITY))

        if len(genre_counts) >= self.DIVERSITY_GENRES_MIN:
            badges.append(Badge(
                "All-Rounder",
                f"Reviews across {len(genre_counts)} genres",
                "🌈",
                self.DIVERSITY_PRIORITY,
            ))

        for genre, count in ranked:
            share = count / total
            if share >= self.SPECIALIST_SHARE:
                name, icon = self.GENRE_BADGES.get(genre, (f"{genre} Specialist", "🎯"))
                badges.append(Badge(
                    f"{name} (Specialist)",
                    f"{share * 100:.0f}% of reviews on {genre}",
                    icon,
                    self.SPECIALIST_PRIORITY,
                ))
                break

        badges.sort(key=lambda badge: badge.priority)
        logger.debug("User %s has %d badges from %d approved reviews", user_id, len(badges), total)
        return badges
