"""User model."""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from reviewsite.database import Base


class User(Base):
    """Registered site user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255))  # Managed by the auth layer
    avatar_path = Column(Text)
    bio = Column(Text)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), index=True)

    reviews = relationship(
        "Review",
        back_populates="author",
        foreign_keys="Review.user_id",
        lazy="dynamic",
    )

    def __repr__(self):
        return f"<User {self.username}>"
