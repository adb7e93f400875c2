"""
Comment model
"""

from sqlalchemy import Column, Text, Integer, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship

from lorehub.core.database import Base, UUID


class Comment(Base):
    """Comment on a lore entry or a fan theory (exactly one of them)"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    user_id = Column(UUID(), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    lore_entry_id = Column(Integer, ForeignKey("lore_entries.id", ondelete="CASCADE"), nullable=True, index=True)
    theory_id = Column(Integer, ForeignKey("fan_theories.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "(lore_entry_id IS NULL AND theory_id IS NOT NULL) OR (lore_entry_id IS NOT NULL AND theory_id IS NULL)",
            name="single_parent",
        ),
    )

    user = relationship("Profile", back_populates="comments")
    lore_entry = relationship("LoreEntry", back_populates="comments")
    theory = relationship("FanTheory", back_populates="comments")

    def __repr__(self):
        return f"<Comment(id={self.id}, lore_entry_id={self.lore_entry_id}, theory_id={self.theory_id})>"
