"""
Lore entry API router
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from lorehub.core.config import settings
from lorehub.core.database import get_db
from lorehub.core.rate_limit import rate_limited
from lorehub.core.security import Viewer, get_current_viewer, get_current_viewer_optional, require_moderator
from lorehub.schemas import (
    AssociationCreate,
    AssociationResponse,
    CommentCreate,
    CommentResponse,
    LoreEntryCreate,
    LoreEntryDetailResponse,
    LoreEntryResponse,
)
from lorehub.services import association_service, lore_service, query_service
from lorehub.services.engagement_service import CommentParent, add_comment

router = APIRouter()


@router.get("/", response_model=List[LoreEntryResponse])
async def list_lore_entries(
    series_id: Optional[int] = Query(None),
    tag: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Approved lore entries, newest first"""
    return await lore_service.list_lore_entries(db, series_id=series_id, tag=tag)


@router.get("/tags", response_model=List[str])
async def list_lore_tags():
    return list(lore_service.LORE_TAGS)


@router.post("/", response_model=LoreEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_lore_entry(
    entry_data: LoreEntryCreate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    """Submit a lore entry; it is visible only to its author until approved"""
    return await lore_service.create_lore_entry(db, entry_data, creator_id=viewer.id)


@router.get("/{lore_entry_id}", response_model=LoreEntryDetailResponse)
async def get_lore_entry_detail(
    lore_entry_id: int,
    viewer: Optional[Viewer] = Depends(get_current_viewer_optional),
    db: AsyncSession = Depends(get_db)
):
    return await query_service.get_lore_entry_detail(db, lore_entry_id, viewer_id=viewer.id if viewer else None)


@router.post("/{lore_entry_id}/characters", response_model=AssociationResponse)
async def link_character(
    lore_entry_id: int,
    link_data: AssociationCreate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    link, already_linked = await association_service.associate(
        db, link_data.character_id, lore_entry_id, viewer_id=viewer.id)
    return AssociationResponse(
        link_id=link.id,
        character_id=link.character_id,
        lore_entry_id=link.lore_entry_id,
        already_linked=already_linked,
    )


@router.delete("/{lore_entry_id}/characters/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unlink_character(
    lore_entry_id: int,
    character_id: int,
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    await association_service.dissociate(db, character_id, lore_entry_id)


@router.post("/{lore_entry_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def comment_on_lore_entry(
    lore_entry_id: int,
    comment_data: CommentCreate,
    viewer: Viewer = Depends(rate_limited("comment", settings.COMMENTS_PER_MINUTE)),
    db: AsyncSession = Depends(get_db)
):
    return await add_comment(db, comment_data.content, viewer.id, CommentParent(lore_entry_id=lore_entry_id))
