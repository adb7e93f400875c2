"""
Lore entry service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging
import uuid

from lorehub.core.errors import ValidationError
from lorehub.models import CharacterLoreEntry, LoreEntry
from lorehub.schemas.lore import LoreEntryCreate
from lorehub.services import repository

logger = logging.getLogger(__name__)

# Closed tag vocabulary
LORE_TAGS = ("Canon", "Disputed", "Theory", "Game Only", "Manga Only")


def normalize_tags(tags: List[str]) -> List[str]:
    """Validate tags against the vocabulary; drops repeats, keeps order"""
    normalized: List[str] = []
    unknown = []
    for tag in tags or []:
        tag = (tag or "").strip()
        if tag not in LORE_TAGS:
            unknown.append(tag)
        elif tag not in normalized:
            normalized.append(tag)
    if unknown:
        raise ValidationError(
            "Unknown lore tag.",
            details={"unknown": unknown, "allowed": list(LORE_TAGS)},
        )
    return normalized


async def create_lore_entry(db: AsyncSession, entry_data: LoreEntryCreate, creator_id: uuid.UUID) -> LoreEntry:
    """Submit a lore entry for review, optionally linked to characters"""
    title = entry_data.title.strip()
    content = entry_data.content.strip()
    if not title or not content:
        raise ValidationError("Title and content are required.")
    tags = normalize_tags(entry_data.tags)
    sources = [s.strip() for s in entry_data.sources if s and s.strip()]

    if entry_data.series_id is not None and await repository.get_series(db, entry_data.series_id) is None:
        raise ValidationError("Unknown series.", details={"series_id": entry_data.series_id})

    character_ids = list(dict.fromkeys(entry_data.character_ids))
    missing = set(character_ids) - await repository.existing_character_ids(db, character_ids)
    if missing:
        raise ValidationError("Unknown characters.", details={"missing_character_ids": sorted(missing)})

    async with repository.transaction(db, "A linked character was removed. Please try again."):
        entry = await repository.add(db, LoreEntry(
            title=title,
            content=content,
            series_id=entry_data.series_id,
            tags=tags,
            sources=sources,
            creator_id=creator_id,
            is_approved=False,
        ))
        for character_id in character_ids:
            await repository.add(db, CharacterLoreEntry(character_id=character_id, lore_entry_id=entry.id))
    logger.info(f"Lore entry {entry.id} submitted by {creator_id} with {len(character_ids)} linked characters")

    return await repository.get_lore_entry(db, entry.id)


async def list_lore_entries(
    db: AsyncSession,
    series_id: Optional[int] = None,
    tag: Optional[str] = None,
) -> List[LoreEntry]:
    """Approved lore entries, newest first"""
    if tag is not None and tag not in LORE_TAGS:
        raise ValidationError("Unknown lore tag.", details={"allowed": list(LORE_TAGS)})
    entries = await repository.list_lore_entries(db, series_id=series_id, approved_only=True)
    if tag is not None:
        entries = [e for e in entries if tag in (e.tags or [])]
    return entries
