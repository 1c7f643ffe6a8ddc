"""DevFlow Backend: Answer API Schemas"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AnswerCreate(BaseModel):
    answer: str = Field(min_length=1)


class AnswerResponse(BaseModel):
    id: uuid.UUID
    author: uuid.UUID
    question: uuid.UUID
    answer: str
    upvotes: int
    downvotes: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AnswerListResponse(BaseModel):
    answers: List[AnswerResponse]
    total_count: int
