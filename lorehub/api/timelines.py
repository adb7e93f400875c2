"""
Timeline API router
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from lorehub.core.database import get_db
from lorehub.core.security import Viewer, get_current_viewer
from lorehub.schemas import (
    TimelineCreate,
    TimelineEventCreate,
    TimelineEventResponse,
    TimelineResponse,
    TimelineYearGroup,
)
from lorehub.services import timeline_service

router = APIRouter()


@router.get("/", response_model=List[TimelineResponse])
async def list_timelines(
    is_official: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    return await timeline_service.list_timelines(db, is_official=is_official)


@router.post("/", response_model=TimelineResponse, status_code=status.HTTP_201_CREATED)
async def create_fan_timeline(
    timeline_data: TimelineCreate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    return await timeline_service.create_fan_timeline(db, timeline_data, creator_id=viewer.id)


@router.get("/{timeline_id}/events", response_model=List[TimelineEventResponse])
async def list_timeline_events(
    timeline_id: int,
    series_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    return await timeline_service.get_timeline_events(db, timeline_id, series_id=series_id)


@router.get("/{timeline_id}/years", response_model=List[TimelineYearGroup])
async def list_timeline_years(
    timeline_id: int,
    series_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Events grouped by in-universe year"""
    events = await timeline_service.get_timeline_events(db, timeline_id, series_id=series_id)
    return timeline_service.group_events_by_year(events)


@router.post("/{timeline_id}/events", response_model=TimelineEventResponse, status_code=status.HTTP_201_CREATED)
async def add_timeline_event(
    timeline_id: int,
    event_data: TimelineEventCreate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    timeline = await timeline_service.get_timeline(db, timeline_id)
    if not timeline_service.can_edit_timeline(timeline, viewer.id, viewer.is_moderator):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You cannot add events to this timeline."
        )
    return await timeline_service.add_timeline_event(db, timeline_id, event_data)
