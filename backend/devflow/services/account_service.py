"""
DevFlow Backend: Account Service
=================================

What:  Links a user to an auth provider account.
How:   (provider, provider_account_id) identifies a link and is unique in
       storage. The owner linking the same pair again gets the stored account
       back (credentials links must repeat the right password); any other
       user is refused. Credentials-provider passwords are hashed with bcrypt
       before they reach the database.
"""

import logging
import uuid
from typing import Tuple

import bcrypt
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.exceptions import AuthenticationError, DuplicateKeyError, ValidationError
from devflow.models import Account
from devflow.schemas.account import CREDENTIALS_PROVIDER, AccountLink
from devflow.services.errors import database_errors

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(
            message=f"Password must be at most {BCRYPT_MAX_BYTES} bytes",
            field="password",
        )
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


class AccountService:

    async def link_account(
        self, db: AsyncSession, user_id: uuid.UUID, link: AccountLink
    ) -> Tuple[BaseModel, bool]:
        """
        Returns (account, created).

        created is False when the caller had already linked this provider
        account; the stored document is returned unchanged.

        Raises:
            DuplicateKeyError: the provider account belongs to another user (→ 409)
            AuthenticationError: credentials relink with the wrong password (→ 401)
        """
        with database_errors("link the account", provider=link.provider):
            existing = await Account.find_one(
                db,
                {"provider": link.provider, "provider_account_id": link.provider_account_id},
            )
            if existing is not None:
                self._check_relink(existing, user_id, link)
                return existing, False

            data = link.model_dump()
            data["user_id"] = user_id
            if link.password:
                data["password"] = hash_password(link.password)
            account = await Account.create(db, data)

        logger.info("Linked %s account for user %s", link.provider, user_id)
        return account, True

    def _check_relink(self, existing: BaseModel, user_id: uuid.UUID, link: AccountLink) -> None:
        if existing.user_id != user_id:
            logger.warning(
                "User %s tried to link %s account owned by user %s",
                user_id,
                link.provider,
                existing.user_id,
            )
            raise DuplicateKeyError(
                "Account",
                context={"provider": link.provider},
                message="This provider account is already linked to another user",
            )
        if link.provider == CREDENTIALS_PROVIDER and not self.verify_password(existing, link.password or ""):
            raise AuthenticationError(message="Invalid credentials")

    @staticmethod
    def verify_password(account: BaseModel, password: str) -> bool:
        """False for accounts without a stored password (OAuth links)."""
        if not account.password:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), account.password.encode("utf-8"))


account_service = AccountService()
