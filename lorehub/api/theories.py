"""
Fan theory API router
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from lorehub.core.config import settings
from lorehub.core.database import get_db
from lorehub.core.rate_limit import rate_limited
from lorehub.core.security import Viewer, get_current_viewer, get_current_viewer_optional
from lorehub.schemas import (
    CommentCreate,
    CommentResponse,
    TheoryCreate,
    TheoryDetailResponse,
    TheoryResponse,
    VoteResponse,
)
from lorehub.services import query_service, theory_service
from lorehub.services.engagement_service import CommentParent, add_comment, toggle_vote

router = APIRouter()


@router.get("/", response_model=List[TheoryResponse])
async def list_theories(db: AsyncSession = Depends(get_db)):
    """Approved theories, most upvoted first"""
    return await theory_service.list_theories(db)


@router.post("/", response_model=TheoryResponse, status_code=status.HTTP_201_CREATED)
async def create_theory(
    theory_data: TheoryCreate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    return await theory_service.create_theory(db, theory_data, creator_id=viewer.id)


@router.get("/{theory_id}", response_model=TheoryDetailResponse)
async def get_theory_detail(
    theory_id: int,
    viewer: Optional[Viewer] = Depends(get_current_viewer_optional),
    db: AsyncSession = Depends(get_db)
):
    return await query_service.get_theory_detail(db, theory_id, viewer_id=viewer.id if viewer else None)


@router.post("/{theory_id}/vote", response_model=VoteResponse)
async def vote_on_theory(
    theory_id: int,
    viewer: Viewer = Depends(rate_limited("vote", settings.VOTES_PER_MINUTE)),
    db: AsyncSession = Depends(get_db)
):
    """Toggle the viewer's upvote"""
    return await toggle_vote(db, viewer.id, theory_id)


@router.post("/{theory_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def comment_on_theory(
    theory_id: int,
    comment_data: CommentCreate,
    viewer: Viewer = Depends(rate_limited("comment", settings.COMMENTS_PER_MINUTE)),
    db: AsyncSession = Depends(get_db)
):
    return await add_comment(db, comment_data.content, viewer.id, CommentParent(theory_id=theory_id))
