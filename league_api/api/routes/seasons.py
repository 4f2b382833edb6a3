"""Season route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import require_admin
from league_api.api.routes import STORE_UNAVAILABLE, SUCCESSFUL, bad_request
from league_api.database.db import get_db_session
from league_api.models.schemas import SeasonCreate, SeasonUpdate
from league_api.services import data_service
from league_api.utils.errors import handle_error

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/seasons", status_code=201)
async def create_season(
    payload: SeasonCreate,
    account: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a season. Play and registration windows must not end before they start."""
    try:
        await data_service.create_season(
            session,
            name=payload.name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            registration_opens=payload.registration_opens,
            registration_closes=payload.registration_closes,
        )
        return SUCCESSFUL
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError as e:
        raise bad_request(e)


@router.get("/api/seasons")
async def list_seasons(session: AsyncSession = Depends(get_db_session)):
    """List all seasons."""
    try:
        seasons = await data_service.list_seasons(session)
    except STORE_UNAVAILABLE:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=handle_error(e))
    if not seasons:
        raise HTTPException(status_code=404)
    return seasons


@router.get("/api/seasons/{season_id}")
async def get_season(season_id: str, session: AsyncSession = Depends(get_db_session)):
    """Get a season by signed id."""
    season = await data_service.get_season(session, season_id)
    if season is None:
        raise HTTPException(status_code=404)
    return season


@router.patch("/api/seasons/{season_id}")
async def update_season(
    season_id: str,
    payload: SeasonUpdate,
    account: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Partially update a season.

    Omitted fields keep their stored values; the merged season's dates are
    validated before saving.
    """
    try:
        updated = await data_service.update_season(session, season_id, payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError as e:
        raise bad_request(e)
    if not updated:
        raise HTTPException(status_code=404)
    return SUCCESSFUL
