"""
Character service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging
import uuid

from lorehub.core.errors import NotFoundError, ValidationError
from lorehub.models import Character
from lorehub.schemas.character import CharacterCreate, CharacterUpdate
from lorehub.services import repository

logger = logging.getLogger(__name__)

# List filter name -> classification flag
KIND_FLAGS = {
    "robot-masters": "is_robot_master",
    "humans": "is_human",
    "reploids": "is_reploid",
    "mavericks": "is_maverick",
}

_REQUIRED_FIELDS = {"name", "series_id", *KIND_FLAGS.values()}


async def _require_series(db: AsyncSession, series_id: int) -> None:
    if await repository.get_series(db, series_id) is None:
        raise ValidationError("Unknown series.", details={"series_id": series_id})


async def create_character(
    db: AsyncSession,
    character_data: CharacterCreate,
    creator_id: Optional[uuid.UUID] = None,
) -> Character:
    """Create a character"""
    await _require_series(db, character_data.series_id)

    async with repository.transaction(db):
        character = await repository.add(db, Character(
            **character_data.model_dump(),
            created_by=creator_id,
        ))
    logger.info(f"Created character {character.id} ({character.name})")
    return await repository.get_character(db, character.id)


async def get_character(db: AsyncSession, character_id: int) -> Character:
    character = await repository.get_character(db, character_id)
    if character is None:
        raise NotFoundError("Character not found.")
    return character


async def update_character(db: AsyncSession, character_id: int, character_data: CharacterUpdate) -> Character:
    """Update a character"""
    character = await get_character(db, character_id)
    update_data = character_data.model_dump(exclude_unset=True)
    if update_data.get("series_id") is not None:
        await _require_series(db, update_data["series_id"])
    if update_data.get("name") is not None and not update_data["name"].strip():
        raise ValidationError("Character name is required.")

    if update_data:
        async with repository.transaction(db):
            for key, value in update_data.items():
                if value is None and key in _REQUIRED_FIELDS:
                    continue
                setattr(character, key, value)
            await db.flush()
    return await repository.get_character(db, character_id)


async def list_characters(
    db: AsyncSession,
    series_id: Optional[int] = None,
    search: Optional[str] = None,
    kind: Optional[str] = None,
) -> List[Character]:
    """List characters, optionally by series, free-text search and kind"""
    flag = None
    if kind:
        flag = KIND_FLAGS.get(kind)
        if flag is None:
            raise ValidationError(
                "Unknown character kind.",
                details={"allowed": sorted(KIND_FLAGS)},
            )
    search = (search or "").strip() or None
    return await repository.list_characters(db, series_id=series_id, search=search, flag=flag)
