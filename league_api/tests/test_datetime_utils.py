"""
Tests for datetime utilities.
"""

from datetime import date

import pytest
import pytz

from league_api.utils.datetime_utils import (
    calculate_age,
    is_valid_date_range,
    parse_iso_date,
    utcnow,
)


def test_utcnow_is_timezone_aware():
    assert utcnow().tzinfo == pytz.UTC


class TestCalculateAge:
    @pytest.mark.parametrize(
        "born,on,expected",
        [
            ("1990-08-31", "2011-08-31", 21),
            ("1990-08-31", "2011-08-30", 20),
            ("1990-08-31", "2011-09-01", 21),
            ("2000-12-31", "2001-01-01", 0),
            ("2020-01-01", "2020-02-01", 0),
            ("2004-02-29", "2022-02-28", 17),
            ("2004-02-29", "2022-03-01", 18),
        ],
    )
    def test_month_and_day_carry(self, born, on, expected):
        assert calculate_age(born, on) == expected

    def test_accepts_date_objects(self):
        assert calculate_age(date(2000, 1, 1), date(2018, 1, 1)) == 18


class TestDates:
    def test_parse_iso_date(self):
        assert parse_iso_date("2024-03-01") == date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["2024-13-01", "03/01/2024", "", "tomorrow"])
    def test_parse_invalid_date(self, value):
        with pytest.raises(ValueError, match="invalid date"):
            parse_iso_date(value)

    def test_date_ranges(self):
        assert is_valid_date_range("2024-03-01", "2024-06-01")
        assert is_valid_date_range("2024-03-01", "2024-03-01")
        assert not is_valid_date_range("2024-06-01", "2024-03-01")
