"""
Data service layer for leagues, positions, sports and seasons.

League and the positions collection are singletons: each may be created
once. The existence check is repeated inside the inserting transaction
under a table lock on PostgreSQL so two concurrent creators cannot both
succeed.
"""

from typing import Dict, List, Optional
import logging

from sqlalchemy import select, func, text
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.database.db import dialect_name
from league_api.database.models import League, Position, Season, Sport
from league_api.services import token_service
from league_api.utils.datetime_utils import is_valid_date_range

logger = logging.getLogger(__name__)


class SingletonExistsError(Exception):
    """Raised when creating a singleton resource that already exists."""


class InvalidSportError(ValueError):
    """Raised when a league references an unknown or tampered sport id."""


class DateRangeError(ValueError):
    """Raised when a season's dates are out of order."""

    def __init__(self, ranges: List[str]):
        self.ranges = ranges
        super().__init__(f"incorrect date range(s): [{' '.join(ranges)}]")


async def lock_table(session: AsyncSession, table_name: str) -> None:
    """Serialize writers on a singleton table until the transaction ends (PostgreSQL only)."""
    if dialect_name(session) == "postgresql":
        await session.execute(text(f"LOCK TABLE {table_name} IN SHARE ROW EXCLUSIVE MODE"))


async def count_rows(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


# Leagues


async def get_total_leagues(session: AsyncSession) -> int:
    return await count_rows(session, League)


async def create_league(
    session: AsyncSession, name: str, signed_sport_id: str, master_admin: str
) -> str:
    """
    Create the league.

    Args:
        session: Database session
        name: League name
        signed_sport_id: Signed id of the league's sport
        master_admin: Stored id of the creating admin account

    Returns:
        Signed league id

    Raises:
        SingletonExistsError: If a league already exists
        InvalidSportError: If the sport id is tampered or unknown
    """
    if await get_total_leagues(session) > 0:
        raise SingletonExistsError("league already exists")
    if not token_service.verify_token(signed_sport_id):
        raise InvalidSportError("invalid SportID")
    sport_id = token_service.strip_checksum(signed_sport_id)
    result = await session.execute(select(Sport.id).where(Sport.id == sport_id))
    if result.scalar_one_or_none() is None:
        raise InvalidSportError("invalid SportID")

    try:
        await lock_table(session, League.__tablename__)
        if await get_total_leagues(session) > 0:
            raise SingletonExistsError("league already exists")
        league_id = token_service.signed_token(token_service.LEAGUE_ID_LENGTH)
        session.add(
            League(
                id=token_service.strip_checksum(league_id),
                name=name,
                sport_id=sport_id,
                master_admin=master_admin,
            )
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Created league {name}")
    return league_id


# Positions


async def create_positions(session: AsyncSession, names: List[str]) -> int:
    """
    Create the positions collection in one transaction.

    Returns:
        Number of positions created

    Raises:
        SingletonExistsError: If positions have already been created
        IntegrityError: If a name is repeated
    """
    if await count_rows(session, Position) > 0:
        raise SingletonExistsError("positions already exist")
    try:
        await lock_table(session, Position.__tablename__)
        if await count_rows(session, Position) > 0:
            raise SingletonExistsError("positions already exist")
        for name in names:
            position_id = token_service.signed_token(token_service.POSITION_ID_LENGTH)
            session.add(Position(id=token_service.strip_checksum(position_id), name=name))
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Created {len(names)} positions")
    return len(names)


async def list_positions(session: AsyncSession) -> List[Dict]:
    result = await session.execute(select(Position).order_by(Position.name))
    return [
        {"id": token_service.return_signed_token(position.id), "name": position.name}
        for position in result.scalars().all()
    ]


async def get_position_names(session: AsyncSession) -> List[str]:
    result = await session.execute(select(Position.name))
    return list(result.scalars().all())


# Sports


async def list_sports(session: AsyncSession) -> List[Dict]:
    result = await session.execute(select(Sport).order_by(Sport.name))
    return [
        {"id": token_service.return_signed_token(sport.id), "name": sport.name}
        for sport in result.scalars().all()
    ]


# Seasons


def _season_to_dict(season: Season) -> Dict:
    return {
        "id": token_service.return_signed_token(season.id),
        "name": season.name,
        "startDate": season.start_date,
        "endDate": season.end_date,
        "registrationOpens": season.registration_opens,
        "registrationCloses": season.registration_closes,
    }


def validate_season_dates(
    start_date: str, end_date: str, registration_opens: str, registration_closes: str
) -> None:
    """
    Check both season windows.

    Raises:
        ValueError: "invalid date: <value>" for an unparseable date
        DateRangeError: Naming every window whose start falls after its end
    """
    failed = []
    if not is_valid_date_range(start_date, end_date):
        failed.append("StartDate-EndDate")
    if not is_valid_date_range(registration_opens, registration_closes):
        failed.append("RegistrationOpens-RegistrationCloses")
    if failed:
        raise DateRangeError(failed)


async def create_season(
    session: AsyncSession,
    name: str,
    start_date: str,
    end_date: str,
    registration_opens: str,
    registration_closes: str,
) -> str:
    """
    Create a season after validating its date windows.

    Returns:
        Signed season id

    Raises:
        ValueError / DateRangeError: On bad dates
        IntegrityError: If the season name is already in use
    """
    validate_season_dates(start_date, end_date, registration_opens, registration_closes)
    season_id = token_service.signed_token(token_service.SEASON_ID_LENGTH)
    session.add(
        Season(
            id=token_service.strip_checksum(season_id),
            name=name,
            start_date=start_date,
            end_date=end_date,
            registration_opens=registration_opens,
            registration_closes=registration_closes,
        )
    )
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    return season_id


async def get_season(session: AsyncSession, signed_season_id: str) -> Optional[Dict]:
    """Get a season by signed id. Returns None for tampered or unknown ids."""
    if not token_service.verify_token(signed_season_id):
        return None
    result = await session.execute(
        select(Season).where(Season.id == token_service.strip_checksum(signed_season_id))
    )
    season = result.scalar_one_or_none()
    return _season_to_dict(season) if season else None


async def list_seasons(session: AsyncSession) -> List[Dict]:
    result = await session.execute(select(Season).order_by(Season.start_date, Season.name))
    return [_season_to_dict(season) for season in result.scalars().all()]


async def update_season(session: AsyncSession, signed_season_id: str, changes: Dict) -> bool:
    """
    Apply a partial update to a season.

    Empty or missing values in `changes` keep the stored value; the merged
    season's dates are validated before anything is written.

    Args:
        session: Database session
        signed_season_id: Signed season id
        changes: Mapping of column name to new value

    Returns:
        True if updated, False if the season does not exist

    Raises:
        ValueError / DateRangeError: If the merged dates are invalid
        IntegrityError: If the new name is already in use
    """
    if not token_service.verify_token(signed_season_id):
        return False
    result = await session.execute(
        select(Season)
        .where(Season.id == token_service.strip_checksum(signed_season_id))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    season = result.scalar_one_or_none()
    if season is None:
        return False

    try:
        for field in ("name", "start_date", "end_date", "registration_opens", "registration_closes"):
            value = changes.get(field)
            if value:
                setattr(season, field, value)
        validate_season_dates(
            season.start_date,
            season.end_date,
            season.registration_opens,
            season.registration_closes,
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    return True
