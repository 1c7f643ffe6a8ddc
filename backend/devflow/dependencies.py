"""
DevFlow Backend: Request Dependencies
======================================

What:  FastAPI dependencies exposing the current session to route handlers.
How:   `get_current_session` resolves the session (or None) once per request;
       `require_session` builds on it for routes that write on behalf of a
       user.
"""

from typing import Optional

from fastapi import Depends, Request

from devflow.exceptions import AuthenticationError
from devflow.schemas.session import Session
from devflow.services.session_service import session_service


async def get_current_session(request: Request) -> Optional[Session]:
    return await session_service.get_session(request)


async def require_session(
    session: Optional[Session] = Depends(get_current_session),
) -> Session:
    if session is None:
        raise AuthenticationError()
    return session
