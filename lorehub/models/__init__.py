"""
Model package
"""

from .profile import Profile
from .series import Series
from .character import Character, Relationship
from .lore import LoreEntry, CharacterLoreEntry
from .theory import FanTheory, Vote
from .comment import Comment
from .timeline import Timeline, TimelineEvent

__all__ = [
    "Profile",
    "Series",
    "Character",
    "Relationship",
    "LoreEntry",
    "CharacterLoreEntry",
    "FanTheory",
    "Vote",
    "Comment",
    "Timeline",
    "TimelineEvent",
]
