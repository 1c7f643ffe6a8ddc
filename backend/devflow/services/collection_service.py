"""
DevFlow Backend: Collection Service
====================================

What:  Bookmarking questions. A bookmark is one Collection document per
       (author, question) pair; toggling removes it again.
"""

import logging
import uuid
from typing import List

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.models import Collection
from devflow.schemas.collection import BookmarkResponse
from devflow.services.errors import database_errors

logger = logging.getLogger(__name__)


class CollectionService:

    async def toggle_bookmark(
        self, db: AsyncSession, author: uuid.UUID, question_id: uuid.UUID
    ) -> BookmarkResponse:
        with database_errors("update the collection", question_id=str(question_id)):
            existing = await Collection.find_one(db, {"author": author, "questions": question_id})
            if existing is not None:
                await Collection.delete_by_id(db, existing.id)
                saved = False
            else:
                await Collection.create(db, {"author": author, "questions": question_id})
                saved = True

        logger.info("Question %s %s collection of %s", question_id, "added to" if saved else "removed from", author)
        return BookmarkResponse(question_id=question_id, saved=saved)

    async def list_saved(self, db: AsyncSession, author: uuid.UUID) -> List[BaseModel]:
        """Most recently saved first."""
        with database_errors("retrieve the collection"):
            return await Collection.find(db, {"author": author}, sort=[("created_at", -1)])


collection_service = CollectionService()
