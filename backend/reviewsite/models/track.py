"""Track model."""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from reviewsite.database import Base

# Track genres - many-to-many between tracks and genres
track_genres = Table(
    "track_genres",
    Base.metadata,
    Column("track_id", Integer, ForeignKey("tracks.id"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id"), primary_key=True),
)


class Track(Base):
    """Track belonging to an album."""

    __tablename__ = "tracks"

    id = Column(Integer, primary_key=True, index=True)
    album_id = Column(Integer, ForeignKey("albums.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)
    duration = Column(Integer)  # seconds
    track_number = Column(Integer)
    cover_image_path = Column(String(1000))
    average_rating = Column(Float, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), index=True)

    album = relationship("Album", back_populates="tracks")
    genres = relationship("Genre", secondary=track_genres)

    def __repr__(self):
        return f"<Track {self.track_number}. {self.title}>"
