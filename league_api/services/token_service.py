"""
Checksum-signed short identifiers.

Every resource id, registration code and API key is a random body of
uppercase alphanumerics followed by one check character computed from the
body. The database stores the body only; the check character is re-derived
whenever an id leaves the system.
"""

import secrets

# Bodies are drawn from the first 36 characters; the check character can
# also be '*' because the checksum is taken modulo 37.
BODY_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
CHECK_ALPHABET = BODY_ALPHABET + "*"

# Token lengths (including the check character)
ACCOUNT_ID_LENGTH = 8
API_KEY_LENGTH = 64
PLAYER_ID_LENGTH = 10
REGISTRATION_CODE_LENGTH = 10
SEASON_ID_LENGTH = 10
LEAGUE_ID_LENGTH = 6
POSITION_ID_LENGTH = 6
SPORT_ID_LENGTH = 4
EMAIL_CONFIG_ID_LENGTH = 4


def checksum(body: str) -> str:
    """
    Compute the check character for a token body.

    Args:
        body: Token body (without check character)

    Returns:
        Single character from CHECK_ALPHABET
    """
    return CHECK_ALPHABET[sum(ord(char) for char in body) % len(CHECK_ALPHABET)]


def unsigned_token(length: int) -> str:
    """Random body of `length` characters; empty for length <= 0."""
    if length <= 0:
        return ""
    return "".join(secrets.choice(BODY_ALPHABET) for _ in range(length))


def signed_token(length: int) -> str:
    """
    Generate a random signed token of total length `length`.

    The token is `length - 1` random characters followed by their check
    character. Lengths below 2 leave no room for a body and yield "".
    """
    if length < 2:
        return ""
    body = unsigned_token(length - 1)
    return body + checksum(body)


def verify_token(token: str) -> bool:
    """True iff token is non-empty and its last character is the checksum of the rest."""
    if not token:
        return False
    return token[-1] == checksum(token[:-1])


def return_signed_token(body: str) -> str:
    """Re-append the check character to a stored token body."""
    return body + checksum(body)


def strip_checksum(token: str) -> str:
    """Stored form of a signed token (the body without its check character)."""
    return token[:-1]
