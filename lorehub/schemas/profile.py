"""
Profile schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional
import uuid


class ProfileBrief(BaseModel):
    """Author info embedded in comments and content"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    avatar_url: Optional[str] = None


class ProfileResponse(ProfileBrief):
    bio: Optional[str] = None
    role: str = "user"
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=2, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)


class ContributionsResponse(BaseModel):
    lore_entries: List["LoreEntryResponse"] = Field(default_factory=list)
    theories: List["TheoryResponse"] = Field(default_factory=list)


from .lore import LoreEntryResponse  # noqa: E402
from .theory import TheoryResponse  # noqa: E402

ContributionsResponse.model_rebuild()
