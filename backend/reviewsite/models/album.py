"""Album model."""
from sqlalchemy import Column, Integer, String, Float, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from reviewsite.database import Base


class Album(Base):
    """Album in the catalog."""

    __tablename__ = "albums"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    artist = Column(String(255), nullable=False, index=True)
    genre_id = Column(Integer, ForeignKey("genres.id"), nullable=False)
    cover_image_path = Column(String(1000))
    release_date = Column(Date)
    description = Column(Text)
    average_rating = Column(Float, default=0, nullable=False)  # Mean of approved review scores
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), index=True)

    genre = relationship("Genre", back_populates="albums")
    tracks = relationship("Track", back_populates="album", lazy="dynamic", order_by="Track.track_number")

    def __repr__(self):
        return f"<Album {self.title}>"
