"""Position route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import get_current_account, require_admin
from league_api.api.routes import SUCCESSFUL, bad_request
from league_api.database.db import get_db_session
from league_api.models.schemas import PositionCreation
from league_api.services import data_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/positions", status_code=201)
async def create_positions(
    payload: PositionCreation,
    account: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create the league's positions. The collection can only be created once."""
    if not payload.positions:
        raise HTTPException(status_code=400)
    try:
        await data_service.create_positions(session, payload.positions)
        return SUCCESSFUL
    except data_service.SingletonExistsError:
        logger.info("Rejected positions creation: positions already exist")
        raise HTTPException(status_code=400)
    except IntegrityError as e:
        raise bad_request(e)


@router.get("/api/positions")
async def list_positions(
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """List positions as [{id, name}]."""
    positions = await data_service.list_positions(session)
    if not positions:
        raise HTTPException(status_code=404)
    return positions
