"""
DevFlow Backend: Abstract Session Provider Interface
=====================================================

What:  Abstract base class defining the contract for reading the current
       request's authenticated identity.
Why:   Sign-in itself is owned by an external auth service; this backend only
       needs to answer "who is making this request?". Keeping that behind an
       interface lets the token format change without touching routes.
How:   Concrete implementations inherit from SessionProvider and implement
       get_session().
Who:   Called by the request dependencies in devflow/dependencies.py.
"""

from abc import ABC, abstractmethod
from typing import Optional

from starlette.requests import Request

from devflow.schemas.session import Session


class SessionProvider(ABC):
    """
    Abstract interface for resolving a request's session.

    Contract:
        - get_session() never raises for bad credentials; an unauthenticated
          request yields None
        - Reading cookies/headers is the only side effect

    Implementations:
        - JWTSessionProvider: signed HS256 token in a cookie or bearer header
    """

    @abstractmethod
    async def get_session(self, request: Request) -> Optional[Session]:
        """
        Resolve the identity of the request's caller.

        Returns:
            Session when the request carries valid credentials, else None.
        """
        ...
