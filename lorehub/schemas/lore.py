"""
Lore entry schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional
import uuid

from .series import SeriesBrief
from .profile import ProfileBrief
from .comment import CommentResponse


class LoreEntryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    series_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    character_ids: List[int] = Field(default_factory=list)


class LoreEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    series_id: Optional[int] = None
    series: Optional[SeriesBrief] = None
    tags: List[str] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)
    creator_id: uuid.UUID
    is_approved: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoreEntryDetailResponse(BaseModel):
    entry: LoreEntryResponse
    creator: Optional[ProfileBrief] = None
    related_characters: List["CharacterSummary"] = Field(default_factory=list)
    comments: List[CommentResponse] = Field(default_factory=list)


class AssociationCreate(BaseModel):
    character_id: int


class AssociationResponse(BaseModel):
    link_id: int
    character_id: int
    lore_entry_id: int
    already_linked: bool = False


from .character import CharacterSummary  # noqa: E402

LoreEntryDetailResponse.model_rebuild()
