"""
Relationship graph between characters
"""

from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncIterator, Dict, Iterable, List, Optional
import logging

from lorehub.core.errors import ConflictError, NotFoundError, ValidationError
from lorehub.models import Character, Relationship
from lorehub.services import repository

logger = logging.getLogger(__name__)


@dataclass
class EdgeView:
    """An edge as seen from one of its endpoints"""
    edge_id: int
    other_character_id: int
    other_character: Optional[Character]
    relationship_type: str
    description: Optional[str]
    direction: str  # "outgoing" | "incoming"


async def add_edge(
    db: AsyncSession,
    source_id: int,
    target_id: int,
    relationship_type: str,
    description: Optional[str] = None,
    allow_reciprocal: bool = False,
) -> Relationship:
    """Store a directed, typed edge from source to target.

    The same (source, target, type) can never be stored twice. The inverse
    edge (target -> source, same type) is refused too unless
    ``allow_reciprocal`` is set, so "A ally B" is not silently doubled by
    "B ally A". Types compare case-insensitively.
    """
    relationship_type = (relationship_type or "").strip()
    if not relationship_type:
        raise ValidationError("Relationship type is required.")
    if source_id == target_id:
        raise ValidationError("A character cannot have a relationship with itself.")

    missing = {source_id, target_id} - await repository.existing_character_ids(db, [source_id, target_id])
    if missing:
        raise ValidationError(
            "Both characters must exist.",
            details={"missing_character_ids": sorted(missing)},
        )

    for existing in await repository.relationships_between(db, source_id, target_id, relationship_type):
        if existing.source_character_id == source_id:
            raise ConflictError("This relationship already exists.")
        if not allow_reciprocal:
            raise ConflictError(
                "The reverse relationship already exists; "
                "pass allow_reciprocal to store both directions."
            )

    description = (description or "").strip() or None
    async with repository.transaction(db, "This relationship already exists."):
        edge = await repository.add(db, Relationship(
            source_character_id=source_id,
            target_character_id=target_id,
            relationship_type=relationship_type,
            description=description,
        ))
    await db.refresh(edge)
    logger.info(f"Added edge {edge.id}: {source_id} -{relationship_type}-> {target_id}")
    return edge


async def edges_for_character(db: AsyncSession, character_id: int) -> AsyncIterator[EdgeView]:
    """Yield every edge touching the character, oriented from its side"""
    for edge in await repository.relationships_touching(db, character_id):
        if edge.source_character_id == character_id:
            other_id, other, direction = edge.target_character_id, edge.target_character, "outgoing"
        else:
            other_id, other, direction = edge.source_character_id, edge.source_character, "incoming"
        yield EdgeView(
            edge_id=edge.id,
            other_character_id=other_id,
            other_character=other,
            relationship_type=edge.relationship_type,
            description=edge.description,
            direction=direction,
        )


async def remove_edge(db: AsyncSession, edge_id: int) -> None:
    edge = await repository.get_relationship(db, edge_id)
    if edge is None:
        raise NotFoundError("Relationship not found.")
    async with repository.transaction(db):
        await repository.remove(db, edge)
    logger.info(f"Removed edge {edge_id}")


def group_edges_by_type(edges: Iterable[EdgeView]) -> Dict[str, List[EdgeView]]:
    """Group edges by relationship type, keeping first-seen type order"""
    groups: Dict[str, List[EdgeView]] = {}
    for edge in edges:
        groups.setdefault(edge.relationship_type, []).append(edge)
    return groups
