"""
Tests for the password policy, hashing and the account age gate.
"""

from datetime import date

import pytest

from league_api.services import auth_service
from league_api.services.auth_service import PasswordPolicyError

VALID_PASSWORD = "Password1!"


class TestPasswordPolicy:
    """Rules are checked in order and the first failure is reported."""

    @pytest.mark.parametrize(
        "password,kind,message",
        [
            ("Pa1!", "password_too_short", "password must be at least 8 characters"),
            ("Pa1!" + "a" * 61, "password_too_long", "password must be at most 64 characters"),
            ("Password!", "missing_numeric", "missing numeric character"),
            ("password1!", "missing_uppercase", "missing uppercase character"),
            ("PASSWORD1!", "missing_lowercase", "missing lowercase character"),
            ("Password1", "missing_special", "missing special character"),
        ],
    )
    def test_policy_failures(self, password, kind, message):
        with pytest.raises(PasswordPolicyError) as exc_info:
            auth_service.hash_password(password)
        assert exc_info.value.kind == kind
        assert str(exc_info.value) == message

    def test_too_short_wins_over_missing_characters(self):
        with pytest.raises(PasswordPolicyError) as exc_info:
            auth_service.check_password_policy("abc")
        assert exc_info.value.kind == "password_too_short"

    def test_length_boundaries(self):
        auth_service.check_password_policy("Pass1!ab")  # 8
        auth_service.check_password_policy("Pa1!" + "a" * 60)  # 64

    @pytest.mark.parametrize("special", list("~`!@#$%^&*()_-{[]},."))
    def test_every_special_character_is_accepted(self, special):
        auth_service.check_password_policy("Password1" + special)

    def test_other_punctuation_is_not_special(self):
        with pytest.raises(PasswordPolicyError) as exc_info:
            auth_service.check_password_policy("Password1?")
        assert exc_info.value.kind == "missing_special"


class TestHashing:
    def test_hash_is_not_plaintext(self):
        hashed = auth_service.hash_password(VALID_PASSWORD)
        assert hashed != VALID_PASSWORD
        assert hashed.startswith("$2")

    def test_hashes_are_salted(self):
        assert auth_service.hash_password(VALID_PASSWORD) != auth_service.hash_password(VALID_PASSWORD)

    def test_compare_matches_original(self):
        hashed = auth_service.hash_password(VALID_PASSWORD)
        assert auth_service.compare_passwords(VALID_PASSWORD, hashed) is True

    def test_compare_rejects_single_character_mutations(self):
        hashed = auth_service.hash_password(VALID_PASSWORD)
        for index in range(len(VALID_PASSWORD)):
            mutated = VALID_PASSWORD[:index] + "x" + VALID_PASSWORD[index + 1:]
            if mutated != VALID_PASSWORD:
                assert auth_service.compare_passwords(mutated, hashed) is False

    def test_compare_with_malformed_hash(self):
        assert auth_service.compare_passwords(VALID_PASSWORD, "not-a-hash") is False
        assert auth_service.compare_passwords(VALID_PASSWORD, "") is False

    def test_failed_policy_leaves_input_untouched(self):
        password = "short"
        with pytest.raises(PasswordPolicyError):
            auth_service.hash_password(password)
        assert password == "short"


class TestAccountAge:
    def _years_ago(self, years: int, days_later: int = 0) -> str:
        today = date.today()
        try:
            anniversary = today.replace(year=today.year - years)
        except ValueError:
            # Feb 29 on a non-leap year
            anniversary = today.replace(year=today.year - years, day=28)
        return date.fromordinal(anniversary.toordinal() + days_later).isoformat()

    def test_exactly_eighteen(self, monkeypatch):
        monkeypatch.setattr(auth_service, "today", date.today)
        assert auth_service.is_of_account_age(self._years_ago(18)) is True

    def test_one_day_short_of_eighteen(self, monkeypatch):
        monkeypatch.setattr(auth_service, "today", date.today)
        assert auth_service.is_of_account_age(self._years_ago(18, days_later=1)) is False

    def test_invalid_date(self):
        with pytest.raises(ValueError, match="invalid date: 04/12/1985"):
            auth_service.is_of_account_age("04/12/1985")
