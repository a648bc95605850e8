"""Target kinds and the album-or-track review target."""
import enum
from dataclasses import dataclass
from typing import Optional

from reviewsite.exceptions import InvalidTargetError


class TargetKind(str, enum.Enum):
    """Entity kinds that can be reviewed or liked."""
    ALBUM = "album"
    TRACK = "track"
    REVIEW = "review"


@dataclass(frozen=True)
class ReviewTarget:
    """The single album or track a review is about.

    A review never points at both or neither; constructing a target that
    does raises InvalidTargetError.
    """

    kind: TargetKind
    id: int

    def __post_init__(self):
        if self.kind not in (TargetKind.ALBUM, TargetKind.TRACK):
            raise InvalidTargetError(f"Reviews can only target albums or tracks, not {self.kind.value}")
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise InvalidTargetError(f"Invalid {self.kind.value} id: {self.id!r}")

    @classmethod
    def album(cls, album_id: int) -> "ReviewTarget":
        return cls(TargetKind.ALBUM, album_id)

    @classmethod
    def track(cls, track_id: int) -> "ReviewTarget":
        return cls(TargetKind.TRACK, track_id)

    @classmethod
    def from_ids(cls, album_id: Optional[int] = None, track_id: Optional[int] = None) -> "ReviewTarget":
        """Build a target from the two optional ids of a request payload."""
        if album_id is None and track_id is None:
            raise InvalidTargetError("Either album_id or track_id must be provided")
        if album_id is not None and track_id is not None:
            raise InvalidTargetError("Only one of album_id or track_id can be provided")
        if album_id is not None:
            return cls.album(album_id)
        return cls.track(track_id)

    def as_columns(self) -> dict:
        """Storage columns for this target."""
        return {
            "album_id": self.id if self.kind == TargetKind.ALBUM else None,
            "track_id": self.id if self.kind == TargetKind.TRACK else None,
        }
