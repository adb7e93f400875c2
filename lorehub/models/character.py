"""
Character and relationship-edge models
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from lorehub.core.database import Base, UUID


class Character(Base):
    """Character model"""
    __tablename__ = "characters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    alias = Column(String(100))
    description = Column(Text)
    first_appearance = Column(String(200))
    portrait_url = Column(String(500))
    sprite_url = Column(String(500))

    # Classification flags (independent, not mutually exclusive)
    is_robot_master = Column(Boolean, nullable=False, default=False)
    is_maverick = Column(Boolean, nullable=False, default=False)
    is_human = Column(Boolean, nullable=False, default=False)
    is_reploid = Column(Boolean, nullable=False, default=False)

    series_id = Column(Integer, ForeignKey("series.id"), nullable=False, index=True)
    created_by = Column(UUID(), ForeignKey("profiles.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    series = relationship("Series")
    lore_links = relationship("CharacterLoreEntry", back_populates="character", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Character(id={self.id}, name={self.name})>"


class Relationship(Base):
    """Directed, typed edge between two characters"""
    __tablename__ = "relationships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    target_character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    relationship_type = Column(String(50), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # The same directed fact cannot be stored twice
    __table_args__ = (
        UniqueConstraint('source_character_id', 'target_character_id', 'relationship_type',
                         name='uq_relationship_source_target_type'),
    )

    source_character = relationship("Character", foreign_keys=[source_character_id])
    target_character = relationship("Character", foreign_keys=[target_character_id])

    def __repr__(self):
        return (f"<Relationship(id={self.id}, {self.source_character_id} -{self.relationship_type}-> "
                f"{self.target_character_id})>")
