"""
Character and relationship schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Literal, Optional
import uuid

from .series import SeriesBrief

CharacterKind = Literal["robot-masters", "humans", "reploids", "mavericks"]
Direction = Literal["incoming", "outgoing"]


class CharacterBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    alias: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    first_appearance: Optional[str] = Field(None, max_length=200)
    portrait_url: Optional[str] = Field(None, max_length=500)
    sprite_url: Optional[str] = Field(None, max_length=500)
    is_robot_master: bool = False
    is_maverick: bool = False
    is_human: bool = False
    is_reploid: bool = False


class CharacterCreate(CharacterBase):
    series_id: int


class CharacterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    alias: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    first_appearance: Optional[str] = Field(None, max_length=200)
    portrait_url: Optional[str] = Field(None, max_length=500)
    sprite_url: Optional[str] = Field(None, max_length=500)
    is_robot_master: Optional[bool] = None
    is_maverick: Optional[bool] = None
    is_human: Optional[bool] = None
    is_reploid: Optional[bool] = None
    series_id: Optional[int] = None


class CharacterSummary(BaseModel):
    """Other end of an edge, or a character listed on a lore entry"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    portrait_url: Optional[str] = None
    series_id: int
    series: Optional[SeriesBrief] = None


class CharacterResponse(CharacterBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    series_id: int
    series: Optional[SeriesBrief] = None
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RelationshipCreate(BaseModel):
    target_character_id: int
    relationship_type: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    allow_reciprocal: bool = False


class RelationshipResponse(BaseModel):
    """An edge seen from one character"""
    model_config = ConfigDict(from_attributes=True)

    edge_id: int
    other_character_id: int
    other_character: Optional[CharacterSummary] = None
    relationship_type: str
    description: Optional[str] = None
    direction: Direction


class RelationshipCreated(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source_character_id: int
    target_character_id: int
    relationship_type: str
    description: Optional[str] = None


class CharacterDetailResponse(BaseModel):
    character: CharacterResponse
    relationships: List[RelationshipResponse] = Field(default_factory=list)
    lore_entries: List["LoreEntryResponse"] = Field(default_factory=list)


from .lore import LoreEntryResponse  # noqa: E402

CharacterDetailResponse.model_rebuild()
