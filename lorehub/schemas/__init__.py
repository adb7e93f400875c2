"""
Pydantic schema package
"""

from .series import SeriesBrief, SeriesResponse
from .profile import ProfileBrief, ProfileResponse, ProfileUpdate, ContributionsResponse
from .comment import CommentCreate, CommentResponse
from .character import (
    CharacterCreate,
    CharacterUpdate,
    CharacterSummary,
    CharacterResponse,
    CharacterDetailResponse,
    RelationshipCreate,
    RelationshipCreated,
    RelationshipResponse,
)
from .lore import (
    LoreEntryCreate,
    LoreEntryResponse,
    LoreEntryDetailResponse,
    AssociationCreate,
    AssociationResponse,
)
from .theory import TheoryCreate, TheoryResponse, TheoryDetailResponse, VoteResponse
from .timeline import (
    TimelineCreate,
    TimelineResponse,
    TimelineEventCreate,
    TimelineEventResponse,
    TimelineYearGroup,
)
