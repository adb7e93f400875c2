"""
Character API router: characters, their relationship edges and lore links
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List, Optional

from lorehub.core.database import get_db
from lorehub.core.security import Viewer, get_current_viewer, require_moderator
from lorehub.schemas import (
    CharacterCreate,
    CharacterDetailResponse,
    CharacterResponse,
    CharacterUpdate,
    LoreEntryResponse,
    RelationshipCreate,
    RelationshipCreated,
    RelationshipResponse,
)
from lorehub.schemas.character import CharacterKind
from lorehub.services import association_service, character_service, query_service, relationship_service

router = APIRouter()


@router.get("/", response_model=List[CharacterResponse])
async def list_characters(
    series_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    kind: Optional[CharacterKind] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Characters, filtered by series, search text and kind"""
    return await character_service.list_characters(db, series_id=series_id, search=search, kind=kind)


@router.post("/", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def create_character(
    character_data: CharacterCreate,
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    return await character_service.create_character(db, character_data, creator_id=viewer.id)


@router.get("/{character_id}", response_model=CharacterDetailResponse)
async def get_character_detail(character_id: int, db: AsyncSession = Depends(get_db)):
    """Character page: the character, its edges and approved lore entries"""
    return await query_service.get_character_detail(db, character_id)


@router.put("/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: int,
    character_data: CharacterUpdate,
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    return await character_service.update_character(db, character_id, character_data)


# === relationship edges ===
@router.get("/{character_id}/relationships", response_model=List[RelationshipResponse])
async def list_relationships(character_id: int, db: AsyncSession = Depends(get_db)):
    await character_service.get_character(db, character_id)
    return [RelationshipResponse.model_validate(edge)
            async for edge in relationship_service.edges_for_character(db, character_id)]


@router.get("/{character_id}/relationships/grouped", response_model=Dict[str, List[RelationshipResponse]])
async def list_relationships_grouped(character_id: int, db: AsyncSession = Depends(get_db)):
    """Edges grouped by relationship type"""
    await character_service.get_character(db, character_id)
    edges = [edge async for edge in relationship_service.edges_for_character(db, character_id)]
    return {
        relationship_type: [RelationshipResponse.model_validate(e) for e in group]
        for relationship_type, group in relationship_service.group_edges_by_type(edges).items()
    }


@router.post("/{character_id}/relationships", response_model=RelationshipCreated, status_code=status.HTTP_201_CREATED)
async def add_relationship(
    character_id: int,
    edge_data: RelationshipCreate,
    viewer: Viewer = Depends(get_current_viewer),
    db: AsyncSession = Depends(get_db)
):
    return await relationship_service.add_edge(
        db,
        character_id,
        edge_data.target_character_id,
        edge_data.relationship_type,
        description=edge_data.description,
        allow_reciprocal=edge_data.allow_reciprocal,
    )


@router.delete("/relationships/{edge_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_relationship(
    edge_id: int,
    viewer: Viewer = Depends(require_moderator),
    db: AsyncSession = Depends(get_db)
):
    await relationship_service.remove_edge(db, edge_id)


# === lore links ===
@router.get("/{character_id}/lore", response_model=List[LoreEntryResponse])
async def list_character_lore(character_id: int, db: AsyncSession = Depends(get_db)):
    await character_service.get_character(db, character_id)
    return await association_service.lore_entries_for_character(db, character_id, approved_only=True)
