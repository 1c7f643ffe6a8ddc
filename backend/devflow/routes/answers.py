"""
DevFlow Backend: Answer Route Handlers
=======================================

Routes:
    POST /api/questions/{id}/answers  post an answer (signed in)
    GET  /api/questions/{id}/answers  answers of a question
    POST /api/answers/{id}/vote       up/down vote (signed in)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.database import get_db_session
from devflow.dependencies import require_session
from devflow.schemas.answer import AnswerCreate, AnswerListResponse, AnswerResponse
from devflow.schemas.common import ErrorResponse
from devflow.schemas.question import VoteRequest
from devflow.schemas.session import Session
from devflow.services.answer_service import answer_service

router = APIRouter(prefix="/api", tags=["Answers"])


@router.post(
    "/questions/{question_id}/answers",
    status_code=201,
    response_model=AnswerResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Answer a question",
)
async def post_answer(
    question_id: UUID,
    payload: AnswerCreate,
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    answer = await answer_service.post_answer(
        db=db, author=session.user.id, question_id=question_id, text=payload.answer
    )
    return AnswerResponse.model_validate(answer)


@router.get(
    "/questions/{question_id}/answers",
    response_model=AnswerListResponse,
    summary="List answers of a question",
)
async def list_answers(
    question_id: UUID,
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerListResponse:
    return await answer_service.list_answers(db=db, question_id=question_id, limit=limit)


@router.post(
    "/answers/{answer_id}/vote",
    response_model=AnswerResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Answer not found", "model": ErrorResponse},
    },
    summary="Vote on an answer",
)
async def vote_answer(
    answer_id: UUID,
    payload: VoteRequest,
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerResponse:
    answer = await answer_service.vote_answer(
        db=db, answer_id=answer_id, vote_type=payload.vote_type, change=payload.change
    )
    return AnswerResponse.model_validate(answer)
