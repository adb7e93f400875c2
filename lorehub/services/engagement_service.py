"""
Comments and theory votes
"""

from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging
import uuid

from lorehub.core.errors import NotFoundError, ValidationError
from lorehub.models import Comment, Vote
from lorehub.services import repository
from lorehub.services.moderation_service import is_visible_to

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommentParent:
    """Target of a comment: exactly one of the two ids is set"""
    lore_entry_id: Optional[int] = None
    theory_id: Optional[int] = None

    def validate(self) -> None:
        if (self.lore_entry_id is None) == (self.theory_id is None):
            raise ValidationError("A comment needs exactly one parent: a lore entry or a theory.")


@dataclass(frozen=True)
class VoteResult:
    upvoted: bool
    upvotes: int


async def _require_visible_parent(db: AsyncSession, parent: CommentParent, viewer_id: Optional[uuid.UUID]) -> None:
    if parent.lore_entry_id is not None:
        row = await repository.get_lore_entry(db, parent.lore_entry_id)
        label = "Lore entry"
    else:
        row = await repository.get_theory(db, parent.theory_id)
        label = "Theory"
    if row is None or not is_visible_to(row, viewer_id):
        raise NotFoundError(f"{label} not found.")


async def add_comment(db: AsyncSession, content: str, user_id: uuid.UUID, parent: CommentParent) -> Comment:
    """Append a comment to a lore entry or a theory"""
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty.")
    parent.validate()
    await _require_visible_parent(db, parent, user_id)

    async with repository.transaction(db):
        comment = await repository.add(db, Comment(
            content=content,
            user_id=user_id,
            lore_entry_id=parent.lore_entry_id,
            theory_id=parent.theory_id,
        ))
    logger.info(f"Comment {comment.id} added by {user_id}")
    return await repository.get_comment(db, comment.id)


async def comments_for(db: AsyncSession, parent: CommentParent) -> List[Comment]:
    """Comments oldest-first, with their authors"""
    parent.validate()
    return await repository.list_comments(db, lore_entry_id=parent.lore_entry_id, theory_id=parent.theory_id)


async def toggle_vote(db: AsyncSession, user_id: uuid.UUID, theory_id: int) -> VoteResult:
    """Flip the user's vote on a theory.

    The vote row and the theory's ``upvotes`` counter change in one
    transaction, the counter being recounted from the vote rows rather than
    incremented, so ``upvotes == count(votes)`` holds after every call. A
    concurrent double-insert of the same vote surfaces as ``ConflictError``.
    A pending theory can only be voted on by its creator.
    """
    async with repository.transaction(db, "Your vote is already being processed. Please try again."):
        theory = await repository.get_theory(db, theory_id, for_update=True)
        if theory is None or not is_visible_to(theory, user_id):
            raise NotFoundError("Theory not found.")

        vote = await repository.get_vote(db, user_id, theory_id)
        if vote is not None:
            await repository.remove(db, vote)
            upvoted = False
        else:
            await repository.add(db, Vote(user_id=user_id, theory_id=theory_id))
            upvoted = True

        upvotes = await repository.sync_theory_upvotes(db, theory_id)

    logger.info(f"User {user_id} {'upvoted' if upvoted else 'withdrew vote on'} theory {theory_id} ({upvotes})")
    return VoteResult(upvoted=upvoted, upvotes=upvotes)


async def has_voted(db: AsyncSession, user_id: Optional[uuid.UUID], theory_id: int) -> bool:
    if user_id is None:
        return False
    return await repository.get_vote(db, user_id, theory_id) is not None
