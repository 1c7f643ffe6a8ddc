"""
DevFlow Backend: Collection Route Handlers
===========================================

Routes:
    POST /api/collections/toggle   save or unsave a question (signed in)
    GET  /api/collections          the caller's saved questions (signed in)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.database import get_db_session
from devflow.dependencies import require_session
from devflow.schemas.collection import BookmarkRequest, BookmarkResponse, CollectionResponse
from devflow.schemas.session import Session
from devflow.services.collection_service import collection_service

router = APIRouter(prefix="/api", tags=["Collections"])


@router.post("/collections/toggle", response_model=BookmarkResponse, summary="Toggle a bookmark")
async def toggle_bookmark(
    payload: BookmarkRequest,
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> BookmarkResponse:
    return await collection_service.toggle_bookmark(
        db=db, author=session.user.id, question_id=payload.question_id
    )


@router.get("/collections", response_model=List[CollectionResponse], summary="Saved questions")
async def list_saved(
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> List[CollectionResponse]:
    saved = await collection_service.list_saved(db=db, author=session.user.id)
    return [CollectionResponse.model_validate(item) for item in saved]
