"""
DevFlow Backend: Question Service
==================================

What:  Asking, reading, listing and voting on questions.
How:   Composes the Question and Tag models. Counters (views, votes, tag
       question counts) are changed with atomic increments, never with
       read-modify-write.

Workflow (ask_question):
    1. Resolve each tag name to a Tag document, creating missing ones
    2. Create the Question with the tag ids
    3. Increment `questions` on every tag used
"""

import logging
import uuid
from typing import List

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.exceptions import NotFoundError
from devflow.models import Question, Tag
from devflow.schemas.question import QuestionListResponse, QuestionResponse
from devflow.services.errors import database_errors
from devflow.services.tag_service import normalize_tag_name, tag_service

logger = logging.getLogger(__name__)

VOTE_FIELDS = {"upvote": "upvotes", "downvote": "downvotes"}


class QuestionService:

    async def ask_question(
        self,
        db: AsyncSession,
        author: uuid.UUID,
        title: str,
        content: str,
        tag_names: List[str],
    ) -> BaseModel:
        # Duplicate names collapse to one tag, first occurrence wins the order
        names = list(dict.fromkeys(normalize_tag_name(name) for name in tag_names))
        tag_ids = []
        for name in names:
            tag = await tag_service.get_or_create(db, name)
            tag_ids.append(tag.id)

        with database_errors("save the question"):
            question = await Question.create(
                db,
                {"title": title, "content": content, "author": author, "tags": tag_ids},
            )
            for tag_id in tag_ids:
                await Tag.increment(db, tag_id, questions=1)

        logger.info("Question %s asked by %s with tags %s", question.id, author, names)
        return question

    async def get_question(
        self, db: AsyncSession, question_id: uuid.UUID, count_view: bool = True
    ) -> BaseModel:
        """
        Fetch one question; by default the read also counts as a view.

        Raises:
            NotFoundError: no question has this id (→ 404)
        """
        with database_errors("retrieve the question", question_id=str(question_id)):
            if count_view:
                question = await Question.increment(db, question_id, views=1)
            else:
                question = await Question.find_by_id(db, question_id)

        if question is None:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        return question

    async def list_questions(
        self, db: AsyncSession, limit: int = 20, skip: int = 0
    ) -> QuestionListResponse:
        """Newest first. Fetches one extra row to compute has_more."""
        with database_errors("retrieve questions"):
            questions = await Question.find(
                db, sort=[("created_at", -1)], limit=limit + 1, skip=skip
            )
            total_count = await Question.count(db)

        has_more = len(questions) > limit
        return QuestionListResponse(
            questions=[QuestionResponse.model_validate(q) for q in questions[:limit]],
            total_count=total_count,
            has_more=has_more,
        )

    async def vote_question(
        self, db: AsyncSession, question_id: uuid.UUID, vote_type: str, change: int = 1
    ) -> BaseModel:
        field = VOTE_FIELDS[vote_type]
        with database_errors("record the vote", question_id=str(question_id)):
            question = await Question.increment(db, question_id, **{field: change})

        if question is None:
            raise NotFoundError(resource="question", resource_id=str(question_id))
        logger.info("Question %s %s %+d", question_id, field, change)
        return question


question_service = QuestionService()
