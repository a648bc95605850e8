"""User schemas."""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional


class BadgeResponse(BaseModel):
    """Badge shown on a profile."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str
    icon: str
    priority: int


class UserResponse(BaseModel):
    """Public profile with earned badges."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    avatar_path: Optional[str] = None
    bio: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None
    badges: List[BadgeResponse] = []

    @classmethod
    def from_user(cls, user, badges) -> "UserResponse":
        response = cls.model_validate(user)
        response.badges = [BadgeResponse.model_validate(badge) for badge in badges]
        return response
