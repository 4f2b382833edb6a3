"""League route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import require_admin
from league_api.api.routes import bad_request, unauthorized
from league_api.database.db import get_db_session
from league_api.models.schemas import LeagueCreate
from league_api.services import data_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/leagues", status_code=201)
async def create_league(
    payload: LeagueCreate,
    account: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create the league. Only one league may ever exist."""
    try:
        await data_service.create_league(session, payload.name, payload.sport_id, account["id"])
        return {"message": "successful"}
    except data_service.SingletonExistsError:
        logger.info("Rejected league creation: league already exists")
        raise unauthorized()
    except data_service.InvalidSportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError as e:
        raise bad_request(e)
