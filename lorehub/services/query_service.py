"""
Read-only composite views for the detail pages.

Each view loads its pieces through the graph, association and engagement
services and applies the approval gate: pending content resolves only for its
creator and looks like a missing row to everyone else.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from lorehub.core.errors import NotFoundError
from lorehub.schemas import (
    CharacterDetailResponse,
    CharacterResponse,
    CharacterSummary,
    CommentResponse,
    LoreEntryDetailResponse,
    LoreEntryResponse,
    ProfileBrief,
    RelationshipResponse,
    TheoryDetailResponse,
    TheoryResponse,
)
from lorehub.services import association_service, repository
from lorehub.services.engagement_service import CommentParent, comments_for, has_voted
from lorehub.services.moderation_service import is_visible_to
from lorehub.services.relationship_service import edges_for_character


async def get_character_detail(db: AsyncSession, character_id: int) -> CharacterDetailResponse:
    """Character with its edges (both directions) and approved lore entries"""
    character = await repository.get_character(db, character_id)
    if character is None:
        raise NotFoundError("Character not found.")

    relationships = [RelationshipResponse.model_validate(edge) async for edge in edges_for_character(db, character_id)]
    lore_entries = await association_service.lore_entries_for_character(db, character_id, approved_only=True)

    return CharacterDetailResponse(
        character=CharacterResponse.model_validate(character),
        relationships=relationships,
        lore_entries=[LoreEntryResponse.model_validate(e) for e in lore_entries],
    )


async def get_lore_entry_detail(
    db: AsyncSession,
    lore_entry_id: int,
    viewer_id: Optional[uuid.UUID] = None,
) -> LoreEntryDetailResponse:
    entry = await repository.get_lore_entry(db, lore_entry_id)
    if entry is None or not is_visible_to(entry, viewer_id):
        raise NotFoundError("Lore entry not found.")

    characters = await association_service.characters_for_lore_entry(db, lore_entry_id)
    comments = await comments_for(db, CommentParent(lore_entry_id=lore_entry_id))

    return LoreEntryDetailResponse(
        entry=LoreEntryResponse.model_validate(entry),
        creator=ProfileBrief.model_validate(entry.creator) if entry.creator is not None else None,
        related_characters=[CharacterSummary.model_validate(c) for c in characters],
        comments=[CommentResponse.model_validate(c) for c in comments],
    )


async def get_theory_detail(
    db: AsyncSession,
    theory_id: int,
    viewer_id: Optional[uuid.UUID] = None,
) -> TheoryDetailResponse:
    theory = await repository.get_theory(db, theory_id)
    if theory is None or not is_visible_to(theory, viewer_id):
        raise NotFoundError("Theory not found.")

    comments = await comments_for(db, CommentParent(theory_id=theory_id))

    return TheoryDetailResponse(
        theory=TheoryResponse.model_validate(theory),
        creator=ProfileBrief.model_validate(theory.creator) if theory.creator is not None else None,
        comments=[CommentResponse.model_validate(c) for c in comments],
        has_voted=await has_voted(db, viewer_id, theory_id),
    )
