"""
Tests for the signed token codec.
"""

import pytest

from league_api.services import token_service


def _substitute(char: str) -> str:
    """Next character of the body alphabet, wrapping around."""
    alphabet = token_service.BODY_ALPHABET
    return alphabet[(alphabet.index(char) + 1) % len(alphabet)]


class TestSignedToken:
    """Tests for signed_token and verify_token."""

    @pytest.mark.parametrize("length", [2, 4, 6, 8, 10, 64])
    def test_signed_token_verifies(self, length):
        token = token_service.signed_token(length)
        assert len(token) == length
        assert token_service.verify_token(token)

    @pytest.mark.parametrize("length", [1, 0, -1, -10])
    def test_degenerate_lengths_are_empty(self, length):
        assert token_service.signed_token(length) == ""

    def test_empty_token_does_not_verify(self):
        assert token_service.verify_token("") is False

    def test_body_uses_uppercase_alphanumerics(self):
        token = token_service.signed_token(64)
        assert all(char in token_service.BODY_ALPHABET for char in token[:-1])
        assert token[-1] in token_service.CHECK_ALPHABET

    def test_known_tokens(self):
        assert token_service.verify_token("KJV1XK3")
        assert token_service.verify_token("ERCXNX57")
        assert not token_service.verify_token("A1B2C3D4")

    def test_single_character_substitution_is_detected(self):
        token = token_service.signed_token(10)
        for index in range(len(token) - 1):
            corrupted = token[:index] + _substitute(token[index]) + token[index + 1:]
            assert not token_service.verify_token(corrupted), corrupted

    def test_wrong_check_character_is_detected(self):
        token = token_service.signed_token(10)
        for char in token_service.CHECK_ALPHABET:
            if char != token[-1]:
                assert not token_service.verify_token(token[:-1] + char)


class TestUnsignedToken:
    @pytest.mark.parametrize("length", [0, 1, 5, 36])
    def test_length(self, length):
        assert len(token_service.unsigned_token(length)) == length

    def test_negative_length_is_empty(self):
        assert token_service.unsigned_token(-3) == ""


class TestReturnSignedToken:
    @pytest.mark.parametrize("body", ["", "A", "KJV1XK", "ERCXNX5", "ZZZZZZZZZZ"])
    def test_resigned_body_verifies(self, body):
        signed = token_service.return_signed_token(body)
        assert signed == body + token_service.checksum(body)
        assert token_service.verify_token(signed)

    def test_strip_then_resign_round_trip(self):
        token = token_service.signed_token(8)
        body = token_service.strip_checksum(token)
        assert len(body) == 7
        assert token_service.return_signed_token(body) == token

    def test_checksum_is_deterministic(self):
        assert token_service.checksum("ERCXNX5") == token_service.checksum("ERCXNX5") == "7"
