"""
DevFlow Backend: Account API Schemas

AccountResponse never includes the password hash.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

CREDENTIALS_PROVIDER = "credentials"


class AccountLink(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    image: Optional[str] = None
    provider: str = Field(min_length=1)
    provider_account_id: str = Field(min_length=1)
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)

    @model_validator(mode="after")
    def password_only_for_credentials(self) -> "AccountLink":
        """OAuth providers never carry a password; credentials always do."""
        if self.provider == CREDENTIALS_PROVIDER and not self.password:
            raise ValueError("A password is required for the credentials provider")
        if self.provider != CREDENTIALS_PROVIDER and self.password:
            raise ValueError(f"Provider '{self.provider}' does not take a password")
        return self


class AccountResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    image: Optional[str] = None
    provider: str
    provider_account_id: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
