"""
Account: link between a user and an external (or credentials) auth provider.

`provider` + `provider_account_id` identify the link; `password` is only set
for the credentials provider and always holds a bcrypt hash.
"""

from typing import Optional

from pydantic import Field

from devflow.models.document import DocumentSchema, Ref
from devflow.models.registry import models


class AccountSchema(DocumentSchema):
    __unique_together__ = (("provider", "provider_account_id"),)

    user_id: Ref("User")
    name: str
    image: Optional[str] = None
    password: Optional[str] = None
    provider: str
    provider_account_id: str = Field(description="Account id at the provider")


Account = models.get_or_compile("Account", AccountSchema)
