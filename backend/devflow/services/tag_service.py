"""
DevFlow Backend: Tag Service
=============================

What:  Tag lookup/creation and the popular-tags listing.
Why:   Tag names are unique at the storage layer; normalising them here
       ("Python " and "python" are the same tag) keeps that index meaningful.
"""

import logging
from typing import List

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.models import Tag
from devflow.services.errors import database_errors

logger = logging.getLogger(__name__)


def normalize_tag_name(name: str) -> str:
    return name.strip().lower()


class TagService:
    """Stateless; every method receives the request's session."""

    async def get_or_create(self, db: AsyncSession, name: str) -> BaseModel:
        """
        Returns the tag called `name`, creating it with a zero count if needed.

        Safe against a concurrent request creating the same tag.
        """
        name = normalize_tag_name(name)
        with database_errors("save the tag", tag=name):
            tag = await Tag.get_or_create(db, {"name": name})
        logger.debug("Resolved tag '%s' -> %s", name, tag.id)
        return tag

    async def list_tags(self, db: AsyncSession, limit: int = 20) -> List[BaseModel]:
        """Most used tags first, ties broken by name."""
        with database_errors("retrieve tags"):
            return await Tag.find(db, sort=[("questions", -1), ("name", 1)], limit=limit)


tag_service = TagService()
