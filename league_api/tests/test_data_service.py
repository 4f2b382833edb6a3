"""
Tests for leagues, positions, sports and seasons.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from league_api.database.init_defaults import SPORTS, seed_sports
from league_api.database.models import League
from league_api.services import data_service, token_service

SPRING = {
    "name": "Spring 2025",
    "start_date": "2025-03-01",
    "end_date": "2025-06-01",
    "registration_opens": "2025-01-01",
    "registration_closes": "2025-02-15",
}


class TestSports:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        assert await seed_sports(db_session) == len(SPORTS)
        assert await seed_sports(db_session) == 0
        sports = await data_service.list_sports(db_session)
        assert [sport["name"] for sport in sports] == SPORTS
        assert all(len(sport["id"]) == token_service.SPORT_ID_LENGTH for sport in sports)
        assert all(token_service.verify_token(sport["id"]) for sport in sports)


class TestLeagues:
    @pytest.mark.asyncio
    async def test_create_league(self, db_session, seeded_sports):
        [sport] = [s for s in await data_service.list_sports(db_session) if s["name"] == "soccer"]
        league_id = await data_service.create_league(db_session, "Valley Youth", sport["id"], "ADMIN01")
        assert token_service.verify_token(league_id)
        assert len(league_id) == token_service.LEAGUE_ID_LENGTH

        result = await db_session.execute(select(League))
        league = result.scalar_one()
        assert league.master_admin == "ADMIN01"
        assert league.sport_id == sport["id"][:-1]

    @pytest.mark.asyncio
    async def test_second_league_is_rejected(self, db_session, seeded_sports):
        [sport, *_] = await data_service.list_sports(db_session)
        await data_service.create_league(db_session, "Valley Youth", sport["id"], "ADMIN01")
        with pytest.raises(data_service.SingletonExistsError):
            await data_service.create_league(db_session, "Hill Youth", sport["id"], "ADMIN01")

    @pytest.mark.asyncio
    async def test_unknown_or_tampered_sport(self, db_session, seeded_sports):
        with pytest.raises(data_service.InvalidSportError, match="invalid SportID"):
            await data_service.create_league(db_session, "Valley Youth", "A1B2", "ADMIN01")
        unknown = token_service.return_signed_token("---")
        with pytest.raises(data_service.InvalidSportError):
            await data_service.create_league(db_session, "Valley Youth", unknown, "ADMIN01")
        assert await data_service.get_total_leagues(db_session) == 0


class TestPositions:
    @pytest.mark.asyncio
    async def test_positions_are_created_once(self, db_session):
        assert await data_service.create_positions(db_session, ["Pitcher", "Catcher"]) == 2
        with pytest.raises(data_service.SingletonExistsError):
            await data_service.create_positions(db_session, ["Shortstop"])
        positions = await data_service.list_positions(db_session)
        assert [position["name"] for position in positions] == ["Catcher", "Pitcher"]
        assert all(token_service.verify_token(position["id"]) for position in positions)

    @pytest.mark.asyncio
    async def test_duplicate_names_roll_back(self, db_session):
        with pytest.raises(IntegrityError):
            await data_service.create_positions(db_session, ["Pitcher", "Pitcher"])
        assert await data_service.list_positions(db_session) == []


class TestSeasons:
    @pytest.mark.asyncio
    async def test_create_and_get(self, db_session):
        season_id = await data_service.create_season(db_session, **SPRING)
        assert len(season_id) == token_service.SEASON_ID_LENGTH
        season = await data_service.get_season(db_session, season_id)
        assert season == {
            "id": season_id,
            "name": "Spring 2025",
            "startDate": "2025-03-01",
            "endDate": "2025-06-01",
            "registrationOpens": "2025-01-01",
            "registrationCloses": "2025-02-15",
        }
        assert await data_service.list_seasons(db_session) == [season]

    @pytest.mark.asyncio
    async def test_both_bad_ranges_are_named(self, db_session):
        with pytest.raises(data_service.DateRangeError) as exc_info:
            await data_service.create_season(
                db_session,
                **dict(SPRING, end_date="2025-01-01", registration_closes="2024-12-01"),
            )
        assert str(exc_info.value) == (
            "incorrect date range(s): [StartDate-EndDate RegistrationOpens-RegistrationCloses]"
        )

    @pytest.mark.asyncio
    async def test_single_bad_range(self, db_session):
        with pytest.raises(data_service.DateRangeError) as exc_info:
            await data_service.create_season(db_session, **dict(SPRING, registration_closes="2024-12-01"))
        assert exc_info.value.ranges == ["RegistrationOpens-RegistrationCloses"]

    @pytest.mark.asyncio
    async def test_unparseable_date(self, db_session):
        with pytest.raises(ValueError, match="invalid date: March 1st"):
            await data_service.create_season(db_session, **dict(SPRING, start_date="March 1st"))

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, db_session):
        season_id = await data_service.create_season(db_session, **SPRING)
        assert await data_service.update_season(db_session, season_id, {"end_date": "2025-07-01"})
        season = await data_service.get_season(db_session, season_id)
        assert season["endDate"] == "2025-07-01"
        assert season["startDate"] == "2025-03-01"
        assert season["name"] == "Spring 2025"

    @pytest.mark.asyncio
    async def test_update_revalidates_merged_dates(self, db_session):
        season_id = await data_service.create_season(db_session, **SPRING)
        with pytest.raises(data_service.DateRangeError):
            await data_service.update_season(db_session, season_id, {"start_date": "2025-09-01"})
        season = await data_service.get_season(db_session, season_id)
        assert season["startDate"] == "2025-03-01"

    @pytest.mark.asyncio
    async def test_update_unknown_season(self, db_session):
        unknown = token_service.signed_token(token_service.SEASON_ID_LENGTH)
        assert await data_service.update_season(db_session, unknown, {"name": "Fall"}) is False
        assert await data_service.get_season(db_session, "A1B2C3D4") is None
