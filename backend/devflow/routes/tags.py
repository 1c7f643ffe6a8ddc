"""DevFlow Backend: Tag Route Handlers (GET /api/tags)"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.database import get_db_session
from devflow.schemas.tag import TagResponse
from devflow.services.tag_service import tag_service

router = APIRouter(prefix="/api", tags=["Tags"])


@router.get("/tags", response_model=List[TagResponse], summary="Popular tags")
async def list_tags(
    limit: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_db_session),
) -> List[TagResponse]:
    tags = await tag_service.list_tags(db=db, limit=limit)
    return [TagResponse.model_validate(tag) for tag in tags]
