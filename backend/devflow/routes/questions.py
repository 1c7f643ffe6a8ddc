"""
DevFlow Backend: Question Route Handlers
=========================================

Routes:
    POST /api/questions               ask a question (signed in)
    GET  /api/questions               newest first, paginated
    GET  /api/questions/{id}          one question; counts a view
    POST /api/questions/{id}/vote     up/down vote (signed in)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.database import get_db_session
from devflow.dependencies import require_session
from devflow.schemas.common import ErrorResponse
from devflow.schemas.question import (
    QuestionCreate,
    QuestionListResponse,
    QuestionResponse,
    VoteRequest,
)
from devflow.schemas.session import Session
from devflow.services.question_service import question_service

router = APIRouter(prefix="/api", tags=["Questions"])


@router.post(
    "/questions",
    status_code=201,
    response_model=QuestionResponse,
    responses={
        400: {"description": "Invalid question", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
    },
    summary="Ask a question",
)
async def ask_question(
    payload: QuestionCreate,
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    question = await question_service.ask_question(
        db=db,
        author=session.user.id,
        title=payload.title,
        content=payload.content,
        tag_names=payload.tags,
    )
    return QuestionResponse.model_validate(question)


@router.get(
    "/questions",
    response_model=QuestionListResponse,
    summary="List questions, newest first",
)
async def list_questions(
    response: Response,
    limit: int = Query(default=20, ge=1, le=100),
    skip: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionListResponse:
    result = await question_service.list_questions(db=db, limit=limit, skip=skip)
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/questions/{question_id}",
    response_model=QuestionResponse,
    responses={404: {"description": "Question not found", "model": ErrorResponse}},
    summary="Get a question (counts as a view)",
)
async def get_question(
    question_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    question = await question_service.get_question(db=db, question_id=question_id)
    return QuestionResponse.model_validate(question)


@router.post(
    "/questions/{question_id}/vote",
    response_model=QuestionResponse,
    responses={
        400: {"description": "Counter would drop below zero", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Question not found", "model": ErrorResponse},
    },
    summary="Vote on a question",
)
async def vote_question(
    question_id: UUID,
    payload: VoteRequest,
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionResponse:
    question = await question_service.vote_question(
        db=db,
        question_id=question_id,
        vote_type=payload.vote_type,
        change=payload.change,
    )
    return QuestionResponse.model_validate(question)
