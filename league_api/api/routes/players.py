"""Player route handlers: creation, lookup, deletion and registration."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import get_current_account
from league_api.api.routes import SUCCESSFUL, bad_request
from league_api.database.db import get_db_session
from league_api.models.schemas import PlayerCreation, PlayerRegistration
from league_api.services import player_service
from league_api.utils.errors import handle_error

logger = logging.getLogger(__name__)
router = APIRouter()

NO_PLAYERS_DETAIL = "payload contains no players"


@router.post("/api/players", status_code=201)
async def create_players(
    payload: PlayerCreation,
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a batch of players owned by the caller. Any invalid player aborts the batch."""
    if not payload.players:
        raise HTTPException(status_code=400, detail=NO_PLAYERS_DETAIL)
    try:
        await player_service.create_players(session, account["id"], payload.players)
        return SUCCESSFUL
    except player_service.PositionsUnavailableError as e:
        logger.error(f"Could not read positions: {e}")
        raise HTTPException(status_code=500)
    except player_service.InvalidPositionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ValidationError, IntegrityError) as e:
        raise bad_request(e)


@router.get("/api/players")
async def list_players(account: dict = Depends(get_current_account)):
    """List the caller's players as signed ids."""
    if not account["player_ids"]:
        raise HTTPException(status_code=404)
    return {"players": player_service.signed_player_ids(account)}


@router.post("/api/players/register")
async def register_players(
    payload: PlayerRegistration,
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """Register the caller's players under the account's registration code."""
    if not payload.players:
        raise HTTPException(status_code=400, detail=NO_PLAYERS_DETAIL)
    try:
        await player_service.register_players(session, account["id"], payload.players)
        return SUCCESSFUL
    except player_service.PlayerNotFoundError:
        raise HTTPException(status_code=404)
    except IntegrityError as e:
        raise HTTPException(status_code=500, detail=handle_error(e))


@router.get("/api/players/{player_id}")
async def get_player(
    player_id: str,
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """Get one of the caller's players by signed id."""
    player = await player_service.get_player(session, account, player_id)
    if player is None:
        raise HTTPException(status_code=404)
    return player


@router.delete("/api/players/{player_id}", status_code=204)
async def delete_player(
    player_id: str,
    account: dict = Depends(get_current_account),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete one of the caller's players. Unknown ids are ignored."""
    await player_service.delete_player(session, account["id"], player_id)
    return Response(status_code=204)
