"""
DevFlow Backend: Question & Vote API Schemas
=============================================

Request bodies are validated here before the document schema sees them;
response models read straight from stored documents.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class QuestionCreate(BaseModel):
    title: str = Field(min_length=5, max_length=130)
    content: str = Field(min_length=1)
    tags: List[str] = Field(
        min_length=1,
        max_length=5,
        description="Tag names; unknown tags are created",
    )

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Drops blank names; each tag must be 1-30 characters."""
        names = [name.strip() for name in v if name.strip()]
        if not names:
            raise ValueError("At least one non-empty tag is required")
        too_long = [name for name in names if len(name) > 30]
        if too_long:
            raise ValueError(f"Tag names must be at most 30 characters: {too_long}")
        return names


class QuestionResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    author: uuid.UUID
    answers: int
    tags: List[uuid.UUID]
    views: int
    upvotes: int
    downvotes: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class QuestionListResponse(BaseModel):
    questions: List[QuestionResponse]
    total_count: int
    has_more: bool


class VoteRequest(BaseModel):
    """
    vote_type picks the counter; change=-1 withdraws a previous vote.

    Votes are plain counters on the document: no per-user vote record is
    kept, so repeated votes accumulate and a withdrawal is not tied to the
    voter. The only guard is that a counter never drops below zero.
    """
    vote_type: Literal["upvote", "downvote"]
    change: Literal[1, -1] = 1
