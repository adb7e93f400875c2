"""
Timeline models
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from lorehub.core.database import Base, UUID


class Timeline(Base):
    """Official or fan-made timeline"""
    __tablename__ = "timelines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    is_official = Column(Boolean, nullable=False, default=False)
    creator_id = Column(UUID(), ForeignKey("profiles.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    events = relationship("TimelineEvent", back_populates="timeline", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Timeline(id={self.id}, title={self.title}, official={self.is_official})>"


class TimelineEvent(Base):
    __tablename__ = "timeline_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timeline_id = Column(Integer, ForeignKey("timelines.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    year = Column(String(20), nullable=False)  # free text: "20XX", "21XX", "2115"
    series_id = Column(Integer, ForeignKey("series.id"), nullable=True, index=True)
    importance = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    timeline = relationship("Timeline", back_populates="events")
    series = relationship("Series")
