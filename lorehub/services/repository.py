"""
Typed read/write access to the entity tables.

Every storage query used by the services is built here. Writes only stage
rows (``add``/``delete`` + flush); committing is the caller's unit of work,
see ``transaction``.
"""

from contextlib import asynccontextmanager
from typing import List, Optional, Sequence
import logging
import uuid

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lorehub.core.errors import ConflictError, LoreHubError, StoreError
from lorehub.models import (
    Character,
    CharacterLoreEntry,
    Comment,
    FanTheory,
    LoreEntry,
    Profile,
    Relationship,
    Series,
    Timeline,
    TimelineEvent,
    Vote,
)

logger = logging.getLogger(__name__)


# === unit of work ===
@asynccontextmanager
async def transaction(db: AsyncSession, conflict_message: str = "The change conflicts with existing data."):
    """Commit on success, roll back and translate database errors otherwise."""
    try:
        yield db
        await db.commit()
    except LoreHubError:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(conflict_message) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database write failed: {e}")
        raise StoreError("The data store is unavailable. Please try again.") from e


async def add(db: AsyncSession, obj):
    db.add(obj)
    await db.flush()
    return obj


async def remove(db: AsyncSession, obj) -> None:
    await db.delete(obj)
    await db.flush()


# === profiles ===
async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> Optional[Profile]:
    return await db.get(Profile, user_id)


async def username_taken(db: AsyncSession, username: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Profile.id).where(func.lower(Profile.username) == username.lower())
    if exclude_id is not None:
        query = query.where(Profile.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


# === series ===
async def list_series(db: AsyncSession) -> List[Series]:
    result = await db.execute(select(Series).order_by(Series.id))
    return list(result.scalars().all())


async def count_series(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Series.id)))).scalar() or 0


async def get_series(db: AsyncSession, series_id: int) -> Optional[Series]:
    return await db.get(Series, series_id)


# === characters ===
async def get_character(db: AsyncSession, character_id: int) -> Optional[Character]:
    result = await db.execute(
        select(Character)
        .options(selectinload(Character.series))
        .where(Character.id == character_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def existing_character_ids(db: AsyncSession, character_ids: Sequence[int]) -> set:
    if not character_ids:
        return set()
    result = await db.execute(select(Character.id).where(Character.id.in_(list(character_ids))))
    return set(result.scalars().all())


async def list_characters(
    db: AsyncSession,
    series_id: Optional[int] = None,
    search: Optional[str] = None,
    flag: Optional[str] = None,
) -> List[Character]:
    query = select(Character).options(selectinload(Character.series))
    if series_id is not None:
        query = query.where(Character.series_id == series_id)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Character.name.ilike(pattern),
                Character.alias.ilike(pattern),
                Character.description.ilike(pattern),
            )
        )
    if flag:
        query = query.where(getattr(Character, flag) == True)  # noqa: E712
    result = await db.execute(query.order_by(Character.name, Character.id))
    return list(result.scalars().all())


# === relationship edges ===
async def get_relationship(db: AsyncSession, edge_id: int) -> Optional[Relationship]:
    return await db.get(Relationship, edge_id)


async def relationships_between(db: AsyncSession, first_id: int, second_id: int, relationship_type: str) -> List[Relationship]:
    """Edges of the given type between two characters, in either direction."""
    result = await db.execute(
        select(Relationship).where(
            and_(
                or_(
                    and_(Relationship.source_character_id == first_id, Relationship.target_character_id == second_id),
                    and_(Relationship.source_character_id == second_id, Relationship.target_character_id == first_id),
                ),
                func.lower(Relationship.relationship_type) == relationship_type.lower(),
            )
        )
    )
    return list(result.scalars().all())


async def relationships_touching(db: AsyncSession, character_id: int) -> List[Relationship]:
    """Every edge where the character is source or target, with both ends loaded."""
    result = await db.execute(
        select(Relationship)
        .options(
            selectinload(Relationship.source_character).selectinload(Character.series),
            selectinload(Relationship.target_character).selectinload(Character.series),
        )
        .where(
            or_(
                Relationship.source_character_id == character_id,
                Relationship.target_character_id == character_id,
            )
        )
        .order_by(Relationship.id)
    )
    return list(result.scalars().all())


# === lore entries ===
async def get_lore_entry(db: AsyncSession, lore_entry_id: int) -> Optional[LoreEntry]:
    result = await db.execute(
        select(LoreEntry)
        .options(selectinload(LoreEntry.series), selectinload(LoreEntry.creator))
        .where(LoreEntry.id == lore_entry_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_lore_entries(
    db: AsyncSession,
    series_id: Optional[int] = None,
    approved_only: bool = True,
    creator_id: Optional[uuid.UUID] = None,
) -> List[LoreEntry]:
    query = select(LoreEntry).options(selectinload(LoreEntry.series))
    if approved_only:
        query = query.where(LoreEntry.is_approved == True)  # noqa: E712
    if series_id is not None:
        query = query.where(LoreEntry.series_id == series_id)
    if creator_id is not None:
        query = query.where(LoreEntry.creator_id == creator_id)
    result = await db.execute(query.order_by(LoreEntry.created_at.desc(), LoreEntry.id.desc()))
    return list(result.scalars().all())


# === character <-> lore associations ===
async def get_association(db: AsyncSession, character_id: int, lore_entry_id: int) -> Optional[CharacterLoreEntry]:
    result = await db.execute(
        select(CharacterLoreEntry)
        .where(
            and_(
                CharacterLoreEntry.character_id == character_id,
                CharacterLoreEntry.lore_entry_id == lore_entry_id,
            )
        )
        .order_by(CharacterLoreEntry.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def characters_linked_to(db: AsyncSession, lore_entry_id: int) -> List[Character]:
    result = await db.execute(
        select(Character)
        .join(CharacterLoreEntry, CharacterLoreEntry.character_id == Character.id)
        .options(selectinload(Character.series))
        .where(CharacterLoreEntry.lore_entry_id == lore_entry_id)
        .order_by(CharacterLoreEntry.id)
    )
    return list(result.scalars().all())


async def lore_entries_linked_to(db: AsyncSession, character_id: int, approved_only: bool = False) -> List[LoreEntry]:
    query = (
        select(LoreEntry)
        .join(CharacterLoreEntry, CharacterLoreEntry.lore_entry_id == LoreEntry.id)
        .options(selectinload(LoreEntry.series))
        .where(CharacterLoreEntry.character_id == character_id)
    )
    if approved_only:
        query = query.where(LoreEntry.is_approved == True)  # noqa: E712
    result = await db.execute(query.order_by(CharacterLoreEntry.id))
    return list(result.scalars().all())


# === fan theories and votes ===
async def get_theory(db: AsyncSession, theory_id: int, for_update: bool = False) -> Optional[FanTheory]:
    query = select(FanTheory).where(FanTheory.id == theory_id).execution_options(populate_existing=True)
    if for_update:
        # Serializes concurrent toggles on the same theory (no-op on SQLite)
        query = query.with_for_update()
    else:
        query = query.options(selectinload(FanTheory.creator))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_theories(
    db: AsyncSession,
    approved_only: bool = True,
    creator_id: Optional[uuid.UUID] = None,
) -> List[FanTheory]:
    query = select(FanTheory)
    if approved_only:
        query = query.where(FanTheory.is_approved == True)  # noqa: E712
    if creator_id is not None:
        query = query.where(FanTheory.creator_id == creator_id)
    result = await db.execute(
        query.order_by(FanTheory.upvotes.desc(), FanTheory.created_at.desc(), FanTheory.id.desc())
    )
    return list(result.scalars().all())


async def get_vote(db: AsyncSession, user_id: uuid.UUID, theory_id: int) -> Optional[Vote]:
    result = await db.execute(
        select(Vote).where(and_(Vote.user_id == user_id, Vote.theory_id == theory_id))
    )
    return result.scalar_one_or_none()


async def count_votes(db: AsyncSession, theory_id: int) -> int:
    result = await db.execute(select(func.count(Vote.id)).where(Vote.theory_id == theory_id))
    return result.scalar() or 0


async def sync_theory_upvotes(db: AsyncSession, theory_id: int) -> int:
    """Rewrite the denormalized counter from the vote rows; returns the new value."""
    vote_count = (
        select(func.count(Vote.id))
        .where(Vote.theory_id == theory_id)
        .scalar_subquery()
    )
    await db.execute(
        update(FanTheory)
        .where(FanTheory.id == theory_id)
        .values(upvotes=vote_count)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(select(FanTheory.upvotes).where(FanTheory.id == theory_id))
    return int(result.scalar() or 0)


# === comments ===
async def list_comments(
    db: AsyncSession,
    lore_entry_id: Optional[int] = None,
    theory_id: Optional[int] = None,
) -> List[Comment]:
    query = select(Comment).options(selectinload(Comment.user))
    if lore_entry_id is not None:
        query = query.where(Comment.lore_entry_id == lore_entry_id)
    if theory_id is not None:
        query = query.where(Comment.theory_id == theory_id)
    result = await db.execute(query.order_by(Comment.created_at.asc(), Comment.id.asc()))
    return list(result.scalars().all())


async def get_comment(db: AsyncSession, comment_id: int) -> Optional[Comment]:
    result = await db.execute(
        select(Comment).options(selectinload(Comment.user)).where(Comment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


# === timelines ===
async def list_timelines(db: AsyncSession, is_official: Optional[bool] = None) -> List[Timeline]:
    query = select(Timeline)
    if is_official is not None:
        query = query.where(Timeline.is_official == is_official)
    result = await db.execute(query.order_by(Timeline.is_official.desc(), Timeline.id))
    return list(result.scalars().all())


async def get_timeline(db: AsyncSession, timeline_id: int) -> Optional[Timeline]:
    return await db.get(Timeline, timeline_id)


async def list_timeline_events(db: AsyncSession, timeline_id: int, series_id: Optional[int] = None) -> List[TimelineEvent]:
    query = (
        select(TimelineEvent)
        .options(selectinload(TimelineEvent.series))
        .where(TimelineEvent.timeline_id == timeline_id)
    )
    if series_id is not None:
        query = query.where(TimelineEvent.series_id == series_id)
    result = await db.execute(query.order_by(TimelineEvent.year, TimelineEvent.id))
    return list(result.scalars().all())


async def get_timeline_event(db: AsyncSession, event_id: int) -> Optional[TimelineEvent]:
    result = await db.execute(
        select(TimelineEvent).options(selectinload(TimelineEvent.series)).where(TimelineEvent.id == event_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

