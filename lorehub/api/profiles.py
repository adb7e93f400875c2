"""
Profile API router
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from lorehub.core.database import get_db
from lorehub.core.security import Viewer, get_current_viewer, get_current_viewer_optional
from lorehub.schemas import ContributionsResponse, ProfileResponse, ProfileUpdate
from lorehub.services import profile_service
from lorehub.services.moderation_service import is_visible_to

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    return await profile_service.get_profile(db, viewer.id)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    return await profile_service.update_profile(db, viewer.id, profile_data)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_profile(db, user_id)


@router.get("/{user_id}/contributions", response_model=ContributionsResponse)
async def get_contributions(
    user_id: uuid.UUID,
    viewer: Optional[Viewer] = Depends(get_current_viewer_optional),
    db: AsyncSession = Depends(get_db)
):
    """Lore entries and theories by the user; pending ones only for the user"""
    await profile_service.get_profile(db, user_id)
    lore_entries, theories = await profile_service.get_user_contributions(db, user_id)
    viewer_id = viewer.id if viewer else None
    return {
        "lore_entries": [e for e in lore_entries if is_visible_to(e, viewer_id)],
        "theories": [t for t in theories if is_visible_to(t, viewer_id)],
    }
