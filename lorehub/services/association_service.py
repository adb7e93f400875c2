"""
Character <-> lore entry association index
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Tuple
import logging
import uuid

from lorehub.core.errors import ConflictError, NotFoundError
from lorehub.models import Character, CharacterLoreEntry, LoreEntry
from lorehub.services import repository
from lorehub.services.moderation_service import is_visible_to

logger = logging.getLogger(__name__)


def _unique_by_id(rows):
    seen = set()
    unique = []
    for row in rows:
        if row.id in seen:
            continue
        seen.add(row.id)
        unique.append(row)
    return unique


async def _require_both(db: AsyncSession, character_id: int, lore_entry_id: int, viewer_id: Optional[uuid.UUID]) -> None:
    if await repository.get_character(db, character_id) is None:
        raise NotFoundError("Character not found.")
    entry = await repository.get_lore_entry(db, lore_entry_id)
    if entry is None or (viewer_id is not None and not is_visible_to(entry, viewer_id)):
        raise NotFoundError("Lore entry not found.")


async def associate(
    db: AsyncSession,
    character_id: int,
    lore_entry_id: int,
    viewer_id: Optional[uuid.UUID] = None,
) -> Tuple[CharacterLoreEntry, bool]:
    """Link a character and a lore entry.

    Idempotent: returns ``(link, already_linked)``. Two concurrent calls for the
    same pair both end with the single stored link. With ``viewer_id`` the lore
    entry must also be visible to that user, so a pending entry can only be
    linked by its creator.
    """
    await _require_both(db, character_id, lore_entry_id, viewer_id)

    link = await repository.get_association(db, character_id, lore_entry_id)
    if link is not None:
        return link, True

    try:
        async with repository.transaction(db, "This character is already linked to the lore entry."):
            link = await repository.add(db, CharacterLoreEntry(character_id=character_id, lore_entry_id=lore_entry_id))
    except ConflictError:
        # Another request inserted the pair between the check and the insert
        link = await repository.get_association(db, character_id, lore_entry_id)
        if link is None:
            raise
        return link, True

    await db.refresh(link)
    logger.info(f"Linked character {character_id} to lore entry {lore_entry_id}")
    return link, False


async def dissociate(db: AsyncSession, character_id: int, lore_entry_id: int) -> None:
    link = await repository.get_association(db, character_id, lore_entry_id)
    if link is None:
        raise NotFoundError("Association not found.")
    async with repository.transaction(db):
        await repository.remove(db, link)
    logger.info(f"Unlinked character {character_id} from lore entry {lore_entry_id}")


async def characters_for_lore_entry(db: AsyncSession, lore_entry_id: int) -> List[Character]:
    return _unique_by_id(await repository.characters_linked_to(db, lore_entry_id))


async def lore_entries_for_character(db: AsyncSession, character_id: int, approved_only: bool = False) -> List[LoreEntry]:
    return _unique_by_id(await repository.lore_entries_linked_to(db, character_id, approved_only=approved_only))
