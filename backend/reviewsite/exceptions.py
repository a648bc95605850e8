"""Domain errors raised by the review and reaction services.

All of them are recoverable by the caller; the boundary layer decides how
each one is presented (HTTP status, CLI message, ...).
"""
from typing import Optional


class ReviewSiteError(Exception):
    """Base class for all domain errors."""

    message = "Review site error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidRatingError(ReviewSiteError):
    """A rating or the atmosphere input is outside [1, 10]."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field}: rating must be an integer between 1 and 10, got {value!r}")


class InvalidTargetError(ReviewSiteError):
    """A review must target exactly one of an album or a track."""

    message = "Either album_id or track_id must be provided, but not both"


class TargetNotFoundError(ReviewSiteError):
    """The referenced album, track or review does not exist."""

    def __init__(self, kind: str, target_id: int):
        self.kind = kind
        self.target_id = target_id
        super().__init__(f"{kind.capitalize()} with ID {target_id} not found")


class ForbiddenError(ReviewSiteError):
    """The actor is not allowed to perform this operation."""

    message = "You don't have permission to perform this action"


class NotFoundError(ReviewSiteError):
    """The review is absent or soft-deleted."""

    message = "Review not found"


class InvalidTransitionError(ReviewSiteError):
    """Moderation attempted from a state other than pending."""

    def __init__(self, current: str, decision: str):
        self.current = current
        self.decision = decision
        super().__init__(f"Cannot {decision} a review in status '{current}'")


class DuplicateReviewError(ReviewSiteError):
    """The author already has a live review for this album or track."""

    message = "You already have a review for this item. Please edit the existing review."


class UnauthenticatedError(ReviewSiteError):
    """No live user could be resolved for the caller."""

    message = "User not authenticated"


class InvalidDecisionError(ReviewSiteError):
    """Moderation decision other than approve or reject."""

    def __init__(self, decision):
        self.decision = decision
        super().__init__(f"Unknown moderation decision {decision!r}; expected 'approve' or 'reject'")
