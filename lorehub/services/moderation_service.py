"""
Approval gate for user-submitted lore entries and fan theories.

Content starts Pending (``is_approved=False``) and moves to Approved exactly
once; there is no way back. Until then only its creator can see it.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging
import uuid

from lorehub.core.errors import NotFoundError
from lorehub.models import FanTheory, LoreEntry
from lorehub.services import repository

logger = logging.getLogger(__name__)


def is_visible_to(row, viewer_id: Optional[uuid.UUID]) -> bool:
    """Approved content is public; pending content is visible to its creator only"""
    if row.is_approved:
        return True
    return viewer_id is not None and row.creator_id == viewer_id


async def approve_lore_entry(db: AsyncSession, lore_entry_id: int, moderator_id: uuid.UUID) -> LoreEntry:
    entry = await repository.get_lore_entry(db, lore_entry_id)
    if entry is None:
        raise NotFoundError("Lore entry not found.")
    if entry.is_approved:
        return entry

    async with repository.transaction(db):
        entry.is_approved = True
    logger.info(f"Lore entry {lore_entry_id} approved by {moderator_id}")
    return await repository.get_lore_entry(db, lore_entry_id)


async def approve_theory(db: AsyncSession, theory_id: int, moderator_id: uuid.UUID) -> FanTheory:
    theory = await repository.get_theory(db, theory_id)
    if theory is None:
        raise NotFoundError("Theory not found.")
    if theory.is_approved:
        return theory

    async with repository.transaction(db):
        theory.is_approved = True
    logger.info(f"Theory {theory_id} approved by {moderator_id}")
    return await repository.get_theory(db, theory_id)


async def list_pending(db: AsyncSession):
    """Lore entries and theories waiting for review"""
    lore_entries = [e for e in await repository.list_lore_entries(db, approved_only=False) if not e.is_approved]
    theories = [t for t in await repository.list_theories(db, approved_only=False) if not t.is_approved]
    return lore_entries, theories
