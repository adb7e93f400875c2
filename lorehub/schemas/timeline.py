"""
Timeline schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional
import uuid

from .series import SeriesBrief


class TimelineCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class TimelineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    is_official: bool
    creator_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None


class TimelineEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    year: str = Field(..., min_length=1, max_length=20)
    series_id: Optional[int] = None
    importance: int = Field(1, ge=1, le=5)


class TimelineEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timeline_id: int
    title: str
    description: Optional[str] = None
    year: str
    series_id: Optional[int] = None
    series: Optional[SeriesBrief] = None
    importance: int


class TimelineYearGroup(BaseModel):
    year: str
    events: List[TimelineEventResponse] = Field(default_factory=list)
