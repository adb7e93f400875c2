"""
Profile model
"""

from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship

from lorehub.core.database import Base, UUID


class Profile(Base):
    """Public profile of an identity-provider user"""
    __tablename__ = "profiles"

    # Same id as the identity provider's user
    id = Column(UUID(), primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    avatar_url = Column(String(500))
    bio = Column(String(1000))
    role = Column(String(20), nullable=False, default="user")  # user|moderator|admin

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    lore_entries = relationship("LoreEntry", back_populates="creator")
    theories = relationship("FanTheory", back_populates="creator")
    comments = relationship("Comment", back_populates="user", cascade="all, delete-orphan")
    votes = relationship("Vote", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Profile(id={self.id}, username={self.username}, role={self.role})>"
