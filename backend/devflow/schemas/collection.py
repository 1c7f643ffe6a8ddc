"""DevFlow Backend: Collection (bookmark) API Schemas"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class BookmarkRequest(BaseModel):
    question_id: uuid.UUID


class BookmarkResponse(BaseModel):
    question_id: uuid.UUID
    saved: bool


class CollectionResponse(BaseModel):
    id: uuid.UUID
    author: uuid.UUID
    questions: uuid.UUID
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
