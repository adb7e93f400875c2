"""
Comment schemas
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional
import uuid
import re

from .profile import ProfileBrief


def _sanitize_comment(value: str) -> str:
    text = re.sub(r'<[^>]*>', '', str(value)).strip()
    if not text:
        raise ValueError('Comment cannot be empty.')
    if len(text) > 1000:
        raise ValueError('Comments are limited to 1000 characters.')
    return text


class CommentCreate(BaseModel):
    """Comment body posted to a lore entry or a theory"""
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator('content', mode='before')
    @classmethod
    def sanitize_content(cls, v):
        return _sanitize_comment(v)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    user_id: uuid.UUID
    lore_entry_id: Optional[int] = None
    theory_id: Optional[int] = None
    created_at: Optional[datetime] = None
    user: Optional[ProfileBrief] = None
