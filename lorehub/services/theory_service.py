"""
Fan theory ("what if") service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging
import uuid

from lorehub.core.errors import ValidationError
from lorehub.models import FanTheory
from lorehub.schemas.theory import TheoryCreate
from lorehub.services import repository

logger = logging.getLogger(__name__)


async def create_theory(db: AsyncSession, theory_data: TheoryCreate, creator_id: uuid.UUID) -> FanTheory:
    """Submit a theory; it stays pending until a moderator approves it"""
    fields = {key: value.strip() for key, value in theory_data.model_dump().items()}
    empty = [key for key, value in fields.items() if not value]
    if empty:
        raise ValidationError("All theory fields are required.", details={"empty": empty})

    async with repository.transaction(db):
        theory = await repository.add(db, FanTheory(
            **fields,
            creator_id=creator_id,
            is_approved=False,
            upvotes=0,
        ))
    logger.info(f"Theory {theory.id} submitted by {creator_id}")
    return await repository.get_theory(db, theory.id)


async def list_theories(db: AsyncSession) -> List[FanTheory]:
    """Approved theories, most upvoted first"""
    return await repository.list_theories(db, approved_only=True)
