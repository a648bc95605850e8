"""Genre model."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from reviewsite.database import Base


class Genre(Base):
    """Music genre."""

    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(1000))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), index=True)

    albums = relationship("Album", back_populates="genre", lazy="dynamic")

    def __repr__(self):
        return f"<Genre {self.name}>"
