"""
DevFlow Backend: Answer Service
================================

What:  Posting, listing and voting on answers.

References are not enforced: an answer naming a question that does not
exist is still stored. The question's `answers` counter is only bumped
when the question is found.
"""

import logging
import uuid

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.exceptions import NotFoundError
from devflow.models import Answer, Question
from devflow.schemas.answer import AnswerListResponse, AnswerResponse
from devflow.services.errors import database_errors
from devflow.services.question_service import VOTE_FIELDS

logger = logging.getLogger(__name__)


class AnswerService:

    async def post_answer(
        self, db: AsyncSession, author: uuid.UUID, question_id: uuid.UUID, text: str
    ) -> BaseModel:
        with database_errors("save the answer", question_id=str(question_id)):
            answer = await Answer.create(
                db, {"author": author, "question": question_id, "answer": text}
            )
            question = await Question.increment(db, question_id, answers=1)

        if question is None:
            logger.warning("Answer %s references unknown question %s", answer.id, question_id)
        else:
            logger.info("Answer %s posted on question %s", answer.id, question_id)
        return answer

    async def list_answers(
        self, db: AsyncSession, question_id: uuid.UUID, limit: int = 50
    ) -> AnswerListResponse:
        """Answers for one question, oldest first (reading order of a thread)."""
        filters = {"question": question_id}
        with database_errors("retrieve answers", question_id=str(question_id)):
            answers = await Answer.find(db, filters, sort=[("created_at", 1)], limit=limit)
            total_count = await Answer.count(db, filters)

        return AnswerListResponse(
            answers=[AnswerResponse.model_validate(a) for a in answers],
            total_count=total_count,
        )

    async def vote_answer(
        self, db: AsyncSession, answer_id: uuid.UUID, vote_type: str, change: int = 1
    ) -> BaseModel:
        field = VOTE_FIELDS[vote_type]
        with database_errors("record the vote", answer_id=str(answer_id)):
            answer = await Answer.increment(db, answer_id, **{field: change})

        if answer is None:
            raise NotFoundError(resource="answer", resource_id=str(answer_id))
        return answer


answer_service = AnswerService()
