"""
DevFlow Backend: JWT Session Provider
======================================

What:  Reads the session token issued by the auth service and turns it into a
       Session.
How:   The token travels in the session cookie (browser pages) or in an
       `Authorization: Bearer` header (API clients). It is an HS256 JWT signed
       with AUTH_SECRET carrying the standard claims:

           sub      user id (UUID)
           name     display name            (optional)
           email    e-mail address          (optional)
           picture  avatar URL              (optional)
           exp      expiry, seconds since epoch

Error Handling:
    Every failure (no token, bad signature, expired, malformed claims) is
    logged and mapped to None: an unauthenticated request is not an error.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from pydantic import ValidationError as SchemaValidationError
from starlette.requests import Request

from devflow.config import settings
from devflow.schemas.session import Session, SessionUser
from devflow.services.session_base import SessionProvider

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class JWTSessionProvider(SessionProvider):
    """
    Session provider backed by signed JWTs.

    Constructor arguments default to the application settings; tests pass
    their own to avoid touching global configuration.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        cookie_name: Optional[str] = None,
        max_age: Optional[int] = None,
    ):
        self.secret = secret if secret is not None else settings.auth_secret
        self.algorithm = algorithm or settings.auth_algorithm
        self.cookie_name = cookie_name or settings.session_cookie_name
        self.max_age = max_age or settings.session_max_age

    def _extract_token(self, request: Request) -> Optional[str]:
        token = request.cookies.get(self.cookie_name)
        if token:
            return token
        header = request.headers.get("Authorization", "")
        if header.startswith(BEARER_PREFIX):
            return header[len(BEARER_PREFIX):].strip() or None
        return None

    async def get_session(self, request: Request) -> Optional[Session]:
        token = self._extract_token(request)
        if token is None:
            return None

        if not self.secret:
            logger.warning("Session token present but AUTH_SECRET is not configured")
            return None

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Session token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected session token: %s", str(e))
            return None

        try:
            return Session(
                user=SessionUser(
                    id=claims["sub"],
                    name=claims.get("name"),
                    email=claims.get("email"),
                    image=claims.get("picture"),
                ),
                expires=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            )
        except SchemaValidationError as e:
            logger.warning("Session token carries invalid claims: %s", e.errors()[0]["msg"])
            return None

    def issue_token(self, user: SessionUser, expires_in: Optional[int] = None) -> str:
        """
        Mint a token this provider accepts.

        The auth service normally does this; the backend uses it for tooling
        and tests.
        """
        expires = datetime.now(timezone.utc) + timedelta(seconds=expires_in or self.max_age)
        claims: Dict[str, Any] = {"sub": str(user.id), "exp": expires}
        if user.name:
            claims["name"] = user.name
        if user.email:
            claims["email"] = user.email
        if user.image:
            claims["picture"] = user.image
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)


# ── Singleton Instance ────────────────────────────────────────────────────
session_service = JWTSessionProvider()
