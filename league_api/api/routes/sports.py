"""Sport route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import get_current_account
from league_api.api.routes import STORE_UNAVAILABLE
from league_api.database.db import get_db_session
from league_api.services import data_service
from league_api.utils.errors import handle_error

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/sports")
async def list_sports(
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """List the seeded sports as [{id, name}]."""
    try:
        sports = await data_service.list_sports(session)
    except STORE_UNAVAILABLE:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=handle_error(e))
    if not sports:
        raise HTTPException(status_code=404)
    return sports
