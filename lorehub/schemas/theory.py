"""
Fan theory schemas
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional
import uuid

from .profile import ProfileBrief
from .comment import CommentResponse


class TheoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    branching_point: str = Field(..., min_length=1)
    alternate_timeline: str = Field(..., min_length=1)


class TheoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    branching_point: str
    alternate_timeline: str
    creator_id: uuid.UUID
    is_approved: bool
    upvotes: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TheoryDetailResponse(BaseModel):
    theory: TheoryResponse
    creator: Optional[ProfileBrief] = None
    comments: List[CommentResponse] = Field(default_factory=list)
    has_voted: bool = False


class VoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    upvoted: bool
    upvotes: int
