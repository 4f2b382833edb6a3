"""
Authentication dependencies for FastAPI routes.

Clients authenticate with a signed API key in the `apiKey` header. Every
failed check raises a fresh, identical bare 401 so callers cannot tell which check
failed.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.database.db import get_db_session
from league_api.services import account_service, token_service

API_KEY_HEADER = "apiKey"


def unauthorized() -> HTTPException:
    """Bare 401. Built per raise so no traceback is carried between requests."""
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def get_current_account(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """
    Dependency to get the active account that owns the request's API key.

    Args:
        request: Incoming request
        session: Database session

    Returns:
        Account dictionary, loaded fresh for this request

    Raises:
        HTTPException: 401 if the key is missing, tampered or unknown, or the account is inactive
    """
    api_key: Optional[str] = request.headers.get(API_KEY_HEADER)
    if not api_key or not token_service.verify_token(api_key):
        raise unauthorized()

    account = await account_service.get_account_by_api_key(session, api_key)
    if account is None or not account["is_active"]:
        raise unauthorized()

    return account


async def require_admin(account: dict = Depends(get_current_account)) -> dict:
    """
    Dependency that additionally requires the account to be the admin.

    Raises:
        HTTPException: 401 on any failed check
    """
    if not account["is_admin"]:
        raise unauthorized()
    return account
