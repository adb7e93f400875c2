from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from lorehub.core.database import get_db
from lorehub.schemas import SeriesResponse
from lorehub.services import series_service

router = APIRouter()


@router.get("/", response_model=List[SeriesResponse])
async def list_series(db: AsyncSession = Depends(get_db)):
    # Seeds the franchise series on an empty database
    return await series_service.list_series(db)
