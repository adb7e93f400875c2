"""
Moderation API router (moderator and admin roles)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lorehub.core.database import get_db
from lorehub.core.security import Viewer, require_moderator
from lorehub.schemas import ContributionsResponse, LoreEntryResponse, TheoryResponse
from lorehub.services import moderation_service

router = APIRouter()


@router.get("/pending", response_model=ContributionsResponse)
async def list_pending(
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    lore_entries, theories = await moderation_service.list_pending(db)
    return {"lore_entries": lore_entries, "theories": theories}


@router.post("/lore/{lore_entry_id}/approve", response_model=LoreEntryResponse)
async def approve_lore_entry(
    lore_entry_id: int,
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    return await moderation_service.approve_lore_entry(db, lore_entry_id, moderator_id=viewer.id)


@router.post("/theories/{theory_id}/approve", response_model=TheoryResponse)
async def approve_theory(
    theory_id: int,
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    return await moderation_service.approve_theory(db, theory_id, moderator_id=viewer.id)
