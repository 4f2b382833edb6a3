"""Account route handlers: creation, verification, login and logout."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import get_current_account
from league_api.api.routes import (
    CREDENTIALS_RATE_LIMIT,
    STORE_UNAVAILABLE,
    SUCCESSFUL,
    bad_request,
    limiter,
    unauthorized,
)
from league_api.database.db import get_db_session
from league_api.models.schemas import AccountCreate, LoginRequest
from league_api.services import account_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/accounts", status_code=201)
@limiter.limit(CREDENTIALS_RATE_LIMIT)
async def create_account(
    request: Request, payload: AccountCreate, session: AsyncSession = Depends(get_db_session)
):
    """
    Create an account.

    The first account ever created is the active admin; all later accounts
    are created inactive until verified.
    """
    try:
        await account_service.create_account(session, payload)
        return SUCCESSFUL
    except ValueError as e:
        # Underage, unparseable date of birth or password policy
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError as e:
        raise bad_request(e)


@router.post("/api/accounts/login")
@limiter.limit(CREDENTIALS_RATE_LIMIT)
async def login(
    request: Request, payload: LoginRequest, session: AsyncSession = Depends(get_db_session)
):
    """Exchange email and password for a fresh API key."""
    api_key = await account_service.login(session, payload.email, payload.password)
    if api_key is None:
        raise unauthorized()
    return {"status": "successful", "apikey": api_key}


@router.post("/api/accounts/logout")
async def logout(
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """Clear the caller's API key."""
    try:
        await account_service.unset_api_key(session, account["id"])
    except STORE_UNAVAILABLE:
        raise
    except Exception as e:
        logger.error(f"Error logging out: {e}")
        raise HTTPException(status_code=500)
    return {}


@router.post("/api/accounts/{account_id}/verify")
@limiter.limit(CREDENTIALS_RATE_LIMIT)
async def verify_account(
    request: Request, account_id: str, session: AsyncSession = Depends(get_db_session)
):
    """Activate an inactive account from its signed id and return its first API key."""
    api_key = await account_service.activate_account(session, account_id)
    if api_key is None:
        raise unauthorized()
    return {"status": "successful", "apikey": api_key}
