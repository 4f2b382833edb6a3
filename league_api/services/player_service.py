"""
Player service layer: batch creation, ownership checks and registration.

An account owns its players through Account.player_ids. Every write that
changes that list re-reads the account row FOR UPDATE inside its
transaction, so concurrent requests for the same account apply in turn.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.database.models import Account, Player, Registration
from league_api.models.schemas import PlayerCreate
from league_api.services import data_service, token_service

logger = logging.getLogger(__name__)


class PositionsUnavailableError(Exception):
    """Raised when the positions collection cannot be read."""


class InvalidPositionError(ValueError):
    """Raised when a player names a position that does not exist."""


class PlayerNotFoundError(LookupError):
    """Raised when a player id is tampered, unknown or owned by another account."""


def _player_to_dict(player: Player) -> Dict:
    return {
        "id": token_service.return_signed_token(player.id),
        "firstName": player.first_name,
        "lastName": player.last_name,
        "dateOfBirth": player.date_of_birth,
        "position": player.position,
        "team": player.team,
        "division": player.division,
        "isRegistered": player.is_registered,
    }


def signed_player_ids(account: Dict) -> List[str]:
    """The account's player ids in their signed form."""
    return [token_service.return_signed_token(player_id) for player_id in account["player_ids"]]


def _owned_player_id(account_player_ids: List[str], signed_player_id: str) -> Optional[str]:
    """Stored id for a signed player id if it verifies and the account owns it."""
    if not token_service.verify_token(signed_player_id):
        return None
    player_id = token_service.strip_checksum(signed_player_id)
    return player_id if player_id in account_player_ids else None


async def _lock_account(session: AsyncSession, account_id: str) -> Account:
    result = await session.execute(
        select(Account)
        .where(Account.id == account_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_players(
    session: AsyncSession, account_id: str, players: List[Dict[str, Any]]
) -> List[str]:
    """
    Create a batch of players for an account in a single transaction.

    Positions are read once when the transaction starts. Each player is
    validated inside the transaction; the first failure rolls back every
    insert from the batch and leaves the account's player list unchanged.

    Args:
        session: Database session
        account_id: Stored id of the owning account
        players: Raw player objects from the request

    Returns:
        Signed ids of the created players

    Raises:
        PositionsUnavailableError: If positions cannot be read
        ValidationError: If a player is missing required fields
        InvalidPositionError: If a player's position does not exist
    """
    try:
        position_names = set(await data_service.get_position_names(session))
    except SQLAlchemyError as e:
        await session.rollback()
        raise PositionsUnavailableError(str(e)) from e

    created = []
    try:
        account = await _lock_account(session, account_id)
        player_ids = list(account.player_ids or [])
        for raw_player in players:
            player = PlayerCreate.model_validate(raw_player)
            if player.position not in position_names:
                raise InvalidPositionError("invalid position")
            signed_id = token_service.signed_token(token_service.PLAYER_ID_LENGTH)
            stored_id = token_service.strip_checksum(signed_id)
            session.add(
                Player(
                    id=stored_id,
                    first_name=player.first_name,
                    last_name=player.last_name,
                    date_of_birth=player.date_of_birth,
                    position=player.position,
                    team=player.team,
                    division=player.division,
                    is_registered=False,
                )
            )
            player_ids.append(stored_id)
            created.append(signed_id)
        account.player_ids = player_ids
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Created {len(created)} players")
    return created


async def get_player(session: AsyncSession, account: Dict, signed_player_id: str) -> Optional[Dict]:
    """
    Get one of the account's players.

    Returns:
        Player dict, or None if the id is tampered, unknown or not owned
    """
    player_id = _owned_player_id(account["player_ids"], signed_player_id)
    if player_id is None:
        return None
    result = await session.execute(select(Player).where(Player.id == player_id))
    player = result.scalar_one_or_none()
    return _player_to_dict(player) if player else None


async def delete_player(session: AsyncSession, account_id: str, signed_player_id: str) -> bool:
    """
    Delete one of the account's players and drop it from the account's list.

    Returns:
        True if a player was deleted, False if there was nothing to delete
    """
    if not token_service.verify_token(signed_player_id):
        return False
    player_id = token_service.strip_checksum(signed_player_id)
    try:
        account = await _lock_account(session, account_id)
        player_ids = list(account.player_ids or [])
        if player_id not in player_ids:
            await session.rollback()
            return False
        await session.execute(delete(Player).where(Player.id == player_id))
        account.player_ids = [pid for pid in player_ids if pid != player_id]
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info("Deleted player")
    return True


async def register_players(
    session: AsyncSession, account_id: str, signed_player_ids: List[str]
) -> str:
    """
    Register players under the account's registration code.

    The first call mints a registration code and creates its Registration
    row; later calls reuse the code and add new players to the same row.
    Registering a player twice leaves it in the row once.

    Args:
        session: Database session
        account_id: Stored id of the owning account
        signed_player_ids: Signed ids of players to register

    Returns:
        Signed registration code

    Raises:
        PlayerNotFoundError: If any id is tampered, unknown or not owned
    """
    try:
        account = await _lock_account(session, account_id)
        owned = list(account.player_ids or [])
        player_ids = []
        for signed_player_id in signed_player_ids:
            player_id = _owned_player_id(owned, signed_player_id)
            if player_id is None:
                raise PlayerNotFoundError(signed_player_id)
            if player_id not in player_ids:
                player_ids.append(player_id)

        if account.registration_code:
            code = token_service.return_signed_token(account.registration_code)
        else:
            code = token_service.signed_token(token_service.REGISTRATION_CODE_LENGTH)
            account.registration_code = token_service.strip_checksum(code)
        stored_code = token_service.strip_checksum(code)

        result = await session.execute(select(Player).where(Player.id.in_(player_ids)))
        for player in result.scalars().all():
            player.is_registered = True

        result = await session.execute(
            select(Registration).where(Registration.id == stored_code).with_for_update()
        )
        registration = result.scalar_one_or_none()
        if registration is None:
            session.add(
                Registration(id=stored_code, player_ids=player_ids, amount_due=0, amount_paid=0)
            )
        else:
            registered = list(registration.player_ids or [])
            registration.player_ids = registered + [
                pid for pid in player_ids if pid not in registered
            ]
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Registered {len(player_ids)} players")
    return code


async def get_registration(session: AsyncSession, stored_code: str) -> Optional[Dict]:
    result = await session.execute(select(Registration).where(Registration.id == stored_code))
    registration = result.scalar_one_or_none()
    if registration is None:
        return None
    return {
        "id": token_service.return_signed_token(registration.id),
        "player_ids": list(registration.player_ids or []),
        "amount_due": registration.amount_due,
        "amount_paid": registration.amount_paid,
    }
