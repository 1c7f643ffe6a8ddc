"""
DevFlow Backend: Session Schemas
=================================

What:  The authenticated identity attached to a request.
Who:   Produced by SessionProvider implementations; consumed by the page
       renderer and by routes that need an author id.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SessionUser(BaseModel):
    id: uuid.UUID = Field(description="User id, used as author on every write")
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class Session(BaseModel):
    """Current request's identity and when the underlying token expires."""

    user: SessionUser
    expires: datetime
