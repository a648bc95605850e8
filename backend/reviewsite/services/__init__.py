"""Business logic services."""
from reviewsite.services.activity import ActivityService
from reviewsite.services.badges import Badge, BadgeService
from reviewsite.services.catalog import CatalogService
from reviewsite.services.identity import Actor, resolve_actor, resolve_actor_by_username
from reviewsite.services.reactions import ReactionLedger, ReactResult, UnreactResult
from reviewsite.services.reviews import ReviewService
from reviewsite.services.scoring import Score, compute_score, atmosphere_multiplier

__all__ = [
    "ActivityService",
    "Badge",
    "BadgeService",
    "CatalogService",
    "Actor",
    "resolve_actor",
    "resolve_actor_by_username",
    "ReactionLedger",
    "ReactResult",
    "UnreactResult",
    "ReviewService",
    "Score",
    "compute_score",
    "atmosphere_multiplier",
]
