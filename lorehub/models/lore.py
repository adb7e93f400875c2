"""
Lore entry model and the character-lore join table
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from lorehub.core.database import Base, UUID, JSON


class LoreEntry(Base):
    """Lore entry model"""
    __tablename__ = "lore_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    series_id = Column(Integer, ForeignKey("series.id"), nullable=True, index=True)
    tags = Column(JSON, nullable=False, default=list)
    sources = Column(JSON, nullable=False, default=list)
    creator_id = Column(UUID(), ForeignKey("profiles.id"), nullable=False, index=True)
    is_approved = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    series = relationship("Series")
    creator = relationship("Profile", back_populates="lore_entries")
    character_links = relationship("CharacterLoreEntry", back_populates="lore_entry", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="lore_entry", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<LoreEntry(id={self.id}, title={self.title}, approved={self.is_approved})>"


class CharacterLoreEntry(Base):
    __tablename__ = "character_lore_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    lore_entry_id = Column(Integer, ForeignKey("lore_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('character_id', 'lore_entry_id', name='uq_character_lore_entry'),
    )

    character = relationship("Character", back_populates="lore_links")
    lore_entry = relationship("LoreEntry", back_populates="character_links")
