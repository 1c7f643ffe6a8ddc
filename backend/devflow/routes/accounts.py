"""
DevFlow Backend: Account Route Handlers
========================================

POST /api/accounts links the signed-in user to a provider account. Returns
201 for a new link, 200 when the caller already owned it and 409 when it
belongs to someone else.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devflow.database import get_db_session
from devflow.dependencies import require_session
from devflow.schemas.account import AccountLink, AccountResponse
from devflow.schemas.common import ErrorResponse
from devflow.schemas.session import Session
from devflow.services.account_service import account_service

router = APIRouter(prefix="/api", tags=["Accounts"])


@router.post(
    "/accounts",
    status_code=201,
    response_model=AccountResponse,
    responses={
        200: {"description": "Account was already linked", "model": AccountResponse},
        401: {"description": "Not signed in, or wrong password on a relink", "model": ErrorResponse},
        409: {"description": "Provider account belongs to another user", "model": ErrorResponse},
    },
    summary="Link an auth provider account",
)
async def link_account(
    payload: AccountLink,
    response: Response,
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> AccountResponse:
    account, created = await account_service.link_account(
        db=db, user_id=session.user.id, link=payload
    )
    if not created:
        response.status_code = 200
    return AccountResponse.model_validate(account)
