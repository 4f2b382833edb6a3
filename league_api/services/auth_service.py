"""
Password policy, hashing and the account age gate.
"""

import logging
import bcrypt

from league_api.utils.datetime_utils import calculate_age, today

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 64
MINIMUM_ACCOUNT_AGE = 18

DIGITS = "1234567890"
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
SPECIAL_CHARACTERS = "~`!@#$%^&*()_-{[]},."

UNDERAGE_DETAIL = "must be 18 or older to create an account"

# Checked by login when no active account matches the email
DUMMY_PASSWORD_HASH = bcrypt.hashpw(
    b"league-api-no-such-account", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
).decode("utf-8")


class PasswordPolicyError(ValueError):
    """Raised when a plaintext password fails a composition rule."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def check_password_policy(password: str) -> None:
    """
    Enforce the password composition rules in order.

    Length is measured in UTF-8 bytes, which also keeps every accepted
    password inside bcrypt's 72 byte input limit.

    Raises:
        PasswordPolicyError: On the first rule the password breaks
    """
    length = len(password.encode("utf-8"))
    if length < MIN_PASSWORD_LENGTH:
        raise PasswordPolicyError(
            "password_too_short", f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if length > MAX_PASSWORD_LENGTH:
        raise PasswordPolicyError(
            "password_too_long", f"password must be at most {MAX_PASSWORD_LENGTH} characters"
        )
    if not any(char in DIGITS for char in password):
        raise PasswordPolicyError("missing_numeric", "missing numeric character")
    if not any(char in UPPERCASE for char in password):
        raise PasswordPolicyError("missing_uppercase", "missing uppercase character")
    if not any(char in LOWERCASE for char in password):
        raise PasswordPolicyError("missing_lowercase", "missing lowercase character")
    if not any(char in SPECIAL_CHARACTERS for char in password):
        raise PasswordPolicyError("missing_special", "missing special character")


def hash_password(password: str) -> str:
    """
    Validate a plaintext password against the policy and hash it with bcrypt.

    Args:
        password: Plaintext password

    Returns:
        bcrypt hash string

    Raises:
        PasswordPolicyError: If the password breaks a composition rule
    """
    check_password_policy(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def compare_passwords(provided_password: str, stored_hash: str) -> bool:
    """
    Constant-time comparison of a plaintext password with a stored bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    if not provided_password or not stored_hash:
        return False
    try:
        return bcrypt.checkpw(provided_password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def is_of_account_age(date_of_birth: str) -> bool:
    """
    True when the holder of date_of_birth is at least 18 today.

    Raises:
        ValueError: If date_of_birth is not an ISO date
    """
    return calculate_age(date_of_birth, today()) >= MINIMUM_ACCOUNT_AGE
