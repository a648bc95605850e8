"""Review schemas."""
from typing import Annotated, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator

from reviewsite.models.review import ReviewStatus
from reviewsite.models.target import ReviewTarget

Rating = Annotated[int, Field(ge=1, le=10)]


class ReviewCreate(BaseModel):
    """Create review request. Exactly one of album_id / track_id."""
    album_id: Optional[int] = None
    track_id: Optional[int] = None
    text: str = ""
    rating_rhymes: Rating
    rating_structure: Rating
    rating_implementation: Rating
    rating_individuality: Rating
    atmosphere_rating: Rating

    @model_validator(mode="after")
    def check_single_target(self):
        if (self.album_id is None) == (self.track_id is None):
            raise ValueError("Either album_id or track_id must be provided, but not both")
        return self

    def to_target(self) -> ReviewTarget:
        return ReviewTarget.from_ids(self.album_id, self.track_id)

    def ratings(self) -> dict:
        return self.model_dump(exclude={"album_id", "track_id", "text"})


class ReviewUpdate(BaseModel):
    """Update review request. The target cannot be changed."""
    model_config = ConfigDict(extra="forbid")

    text: Optional[str] = None
    rating_rhymes: Optional[Rating] = None
    rating_structure: Optional[Rating] = None
    rating_implementation: Optional[Rating] = None
    rating_individuality: Optional[Rating] = None
    atmosphere_rating: Optional[Rating] = None


class ReviewResponse(BaseModel):
    """Review response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    album_id: Optional[int] = None
    track_id: Optional[int] = None
    text: Optional[str] = None
    rating_rhymes: int
    rating_structure: int
    rating_implementation: int
    rating_individuality: int
    atmosphere_rating: int
    atmosphere_multiplier: float
    final_score: int
    status: ReviewStatus
    moderated_by: Optional[int] = None
    moderated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    likes_count: int = 0
