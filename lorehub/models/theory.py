"""
Fan theory ("what if") and vote models
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
import uuid

from lorehub.core.database import Base, UUID


class FanTheory(Base):
    """Fan theory model"""
    __tablename__ = "fan_theories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    branching_point = Column(Text, nullable=False)
    alternate_timeline = Column(Text, nullable=False)
    creator_id = Column(UUID(), ForeignKey("profiles.id"), nullable=False, index=True)
    is_approved = Column(Boolean, nullable=False, default=False, index=True)

    # Denormalized: always equals the number of Vote rows for this theory
    upvotes = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("Profile", back_populates="theories")
    votes = relationship("Vote", back_populates="theory", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="theory", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<FanTheory(id={self.id}, title={self.title}, upvotes={self.upvotes})>"


class Vote(Base):
    """Upvote on a fan theory"""
    __tablename__ = "votes"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    theory_id = Column(Integer, ForeignKey("fan_theories.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # One vote per user per theory
    __table_args__ = (
        UniqueConstraint('user_id', 'theory_id', name='uq_vote_user_theory'),
    )

    user = relationship("Profile", back_populates="votes")
    theory = relationship("FanTheory", back_populates="votes")

    def __repr__(self):
        return f"<Vote(user_id={self.user_id}, theory_id={self.theory_id})>"
