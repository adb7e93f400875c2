"""
Timeline service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Iterable, List, Optional, Tuple
import logging
import re
import uuid

from lorehub.core.errors import NotFoundError, ValidationError
from lorehub.models import Timeline, TimelineEvent
from lorehub.schemas.timeline import TimelineCreate, TimelineEventCreate
from lorehub.services import repository

logger = logging.getLogger(__name__)

# "2010", "20XX", "21xx"
_NUMERIC_YEAR = re.compile(r"^(\d+)([Xx]*)$")


def _numeric_year(year: str) -> Optional[int]:
    match = _NUMERIC_YEAR.match(year.strip())
    if match is None:
        return None
    digits, wildcards = match.groups()
    return int(digits + "0" * len(wildcards))


def year_sort_key(year: str) -> Tuple[int, int, str]:
    """Numeric years first, in numeric order; any other label after them by text"""
    value = _numeric_year(year)
    if value is None:
        return (1, 0, year)
    return (0, value, year)


def group_events_by_year(events: Iterable[TimelineEvent]) -> List[Dict]:
    """Group events by year; events keep their order within a year"""
    groups: Dict[str, List[TimelineEvent]] = {}
    for event in events:
        groups.setdefault(event.year, []).append(event)
    years = sorted(groups, key=year_sort_key)
    return [{"year": year, "events": groups[year]} for year in years]


def can_edit_timeline(timeline: Timeline, viewer_id: uuid.UUID, is_moderator: bool) -> bool:
    if timeline.is_official:
        return is_moderator
    return timeline.creator_id == viewer_id


async def list_timelines(db: AsyncSession, is_official: Optional[bool] = None) -> List[Timeline]:
    return await repository.list_timelines(db, is_official=is_official)


async def get_timeline(db: AsyncSession, timeline_id: int) -> Timeline:
    timeline = await repository.get_timeline(db, timeline_id)
    if timeline is None:
        raise NotFoundError("Timeline not found.")
    return timeline


async def create_fan_timeline(db: AsyncSession, timeline_data: TimelineCreate, creator_id: uuid.UUID) -> Timeline:
    title = timeline_data.title.strip()
    if not title:
        raise ValidationError("Timeline title is required.")
    async with repository.transaction(db):
        timeline = await repository.add(db, Timeline(
            title=title,
            description=timeline_data.description,
            is_official=False,
            creator_id=creator_id,
        ))
    await db.refresh(timeline)
    logger.info(f"Fan timeline {timeline.id} created by {creator_id}")
    return timeline


async def add_timeline_event(db: AsyncSession, timeline_id: int, event_data: TimelineEventCreate) -> TimelineEvent:
    """Append an event; callers check edit rights with ``can_edit_timeline``"""
    await get_timeline(db, timeline_id)
    year = event_data.year.strip()
    if not year:
        raise ValidationError("Event year is required.")
    if event_data.series_id is not None and await repository.get_series(db, event_data.series_id) is None:
        raise ValidationError("Unknown series.", details={"series_id": event_data.series_id})

    async with repository.transaction(db):
        event = await repository.add(db, TimelineEvent(
            timeline_id=timeline_id,
            title=event_data.title.strip(),
            description=event_data.description,
            year=year,
            series_id=event_data.series_id,
            importance=event_data.importance,
        ))
    return await repository.get_timeline_event(db, event.id)


async def get_timeline_events(db: AsyncSession, timeline_id: int, series_id: Optional[int] = None) -> List[TimelineEvent]:
    await get_timeline(db, timeline_id)
    events = await repository.list_timeline_events(db, timeline_id, series_id=series_id)
    return sorted(events, key=lambda event: year_sort_key(event.year))
