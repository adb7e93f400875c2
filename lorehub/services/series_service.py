"""
Series service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from lorehub.models import Series
from lorehub.services import repository


DEFAULT_SERIES = [
    # (name, color_code, start_year, end_year)
    ("Classic", "#0088FF", "1987", None),
    ("X", "#00AA88", "1993", None),
    ("Zero", "#CC0000", "2002", "2005"),
    ("ZX", "#FF9900", "2006", "2007"),
    ("Legends", "#6600CC", "1997", "2000"),
    ("Battle Network", "#0044CC", "2001", "2005"),
    ("Star Force", "#9900FF", "2006", "2008"),
]


async def ensure_seed_series(db: AsyncSession) -> None:
    # Seed the franchise series when the table is empty
    if await repository.count_series(db) > 0:
        return
    async with repository.transaction(db):
        for name, color, start, end in DEFAULT_SERIES:
            db.add(Series(name=name, color_code=color, start_year=start, end_year=end))


async def list_series(db: AsyncSession) -> List[Series]:
    await ensure_seed_series(db)
    return await repository.list_series(db)
