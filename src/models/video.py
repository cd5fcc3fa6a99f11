"""Video model."""

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Video(Base, TimestampMixin):
    """Uploaded video owned by a channel (user)."""

    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    video_file = Column(String, nullable=False)  # media URL
    thumbnail = Column(String, nullable=False)  # media URL
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Float, nullable=False, default=0.0)  # seconds
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    # Relationships
    owner = relationship("User", back_populates="videos")
