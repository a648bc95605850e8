"""Like schemas."""
from typing import Union

from pydantic import BaseModel

from reviewsite.services.reactions import ReactResult, UnreactResult


class ReactionResponse(BaseModel):
    """Like/unlike response."""
    liked: bool
    likes_count: int
    message: str

    @classmethod
    def from_result(cls, kind: str, result: Union[ReactResult, UnreactResult]) -> "ReactionResponse":
        label = kind.capitalize()
        if isinstance(result, ReactResult):
            message = f"{label} liked" if result.created else "Already liked"
            return cls(liked=True, likes_count=result.count, message=message)
        message = f"{label} unliked" if result.removed else "Not liked"
        return cls(liked=False, likes_count=result.count, message=message)
