"""
Series model
"""

from sqlalchemy import Column, Integer, String, Text

from lorehub.core.database import Base


class Series(Base):
    """A game series of the franchise; drives display colors"""
    __tablename__ = "series"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    start_year = Column(String(10))
    end_year = Column(String(10))
    color_code = Column(String(7), nullable=False, default="#888888")

    def __repr__(self):
        return f"<Series(id={self.id}, name={self.name})>"
