"""DevFlow Backend: Tag API Schemas"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TagResponse(BaseModel):
    id: uuid.UUID
    name: str
    questions: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
