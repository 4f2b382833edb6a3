"""
Account service layer: creation with bootstrap admin, activation, and API keys.
"""

from typing import Dict, Optional
import logging

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.database.models import Account
from league_api.models.schemas import AccountCreate
from league_api.services import auth_service, token_service
from league_api.utils.errors import violated_constraint

logger = logging.getLogger(__name__)

SINGLE_ADMIN_CONSTRAINTS = ("accounts_single_admin", "accounts.is_admin")


class UnderageError(ValueError):
    """Raised when the account holder is younger than the minimum account age."""


def _account_to_dict(account: Account) -> Dict:
    """Convert an Account row to a plain dict."""
    return {
        "id": account.id,
        "first_name": account.first_name,
        "last_name": account.last_name,
        "email": account.email,
        "password_hash": account.password,
        "phone": account.phone,
        "date_of_birth": account.date_of_birth,
        "registration_code": account.registration_code or "",
        "player_ids": list(account.player_ids or []),
        "coach": account.coach,
        "volunteer": account.volunteer,
        "is_active": account.is_active,
        "is_admin": account.is_admin,
    }


def _is_single_admin_violation(exc: IntegrityError) -> bool:
    constraint = violated_constraint(exc) or str(exc.orig)
    return any(name in constraint for name in SINGLE_ADMIN_CONSTRAINTS)


async def get_total_accounts(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Account))
    return result.scalar_one()


async def create_account(session: AsyncSession, payload: AccountCreate) -> Dict:
    """
    Create an account.

    The first account created against an empty table becomes the active
    admin; every later account starts inactive and waits for verification.
    Two callers racing on an empty table both see a count of zero, but the
    single-admin index lets only one admin row commit and the other is
    stored as an ordinary inactive account.

    Args:
        session: Database session
        payload: Validated account creation payload

    Returns:
        Created account dict with "id" holding the signed account id

    Raises:
        UnderageError: If the holder is under the minimum account age
        ValueError: If date_of_birth is not an ISO date
        PasswordPolicyError: If the password breaks a composition rule
        IntegrityError: If the email or phone is already in use
    """
    if not auth_service.is_of_account_age(payload.date_of_birth):
        raise UnderageError(auth_service.UNDERAGE_DETAIL)
    password_hash = auth_service.hash_password(payload.password)

    signed_id = token_service.signed_token(token_service.ACCOUNT_ID_LENGTH)
    bootstrap = await get_total_accounts(session) == 0

    def build(is_admin: bool) -> Account:
        return Account(
            id=token_service.strip_checksum(signed_id),
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            password=password_hash,
            phone=payload.phone,
            date_of_birth=payload.date_of_birth,
            registration_code="",
            player_ids=[],
            coach=payload.coach,
            volunteer=payload.volunteer,
            apikey="",
            is_active=is_admin,
            is_admin=is_admin,
        )

    account = build(bootstrap)
    session.add(account)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        if not (bootstrap and _is_single_admin_violation(e)):
            raise
        logger.info("Bootstrap admin already claimed; creating regular account")
        account = build(False)
        session.add(account)
        await session.commit()

    if account.is_admin:
        logger.info("Created bootstrap admin account")
    else:
        logger.info("Created inactive account")
    result = _account_to_dict(account)
    result["id"] = signed_id
    return result


async def get_account(session: AsyncSession, account_id: str) -> Optional[Dict]:
    """Get an account by its stored (unsigned) id."""
    result = await session.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    return _account_to_dict(account) if account else None


async def get_account_by_email(
    session: AsyncSession, email: str, active_only: bool = True
) -> Optional[Dict]:
    """
    Get an account by email address.

    Args:
        session: Database session
        email: Email address
        active_only: Only match accounts that have been activated

    Returns:
        Account dict or None if not found
    """
    query = select(Account).where(Account.email == email)
    if active_only:
        query = query.where(Account.is_active.is_(True))
    result = await session.execute(query.limit(1))
    account = result.scalar_one_or_none()
    return _account_to_dict(account) if account else None


async def get_account_by_api_key(session: AsyncSession, api_key: str) -> Optional[Dict]:
    """
    Resolve a signed API key to its account.

    Args:
        session: Database session
        api_key: Signed API key as presented by the client

    Returns:
        Account dict or None if no account holds the key
    """
    key_body = token_service.strip_checksum(api_key)
    if not key_body:
        return None
    result = await session.execute(select(Account).where(Account.apikey == key_body).limit(1))
    account = result.scalar_one_or_none()
    return _account_to_dict(account) if account else None


async def activate_account(session: AsyncSession, signed_account_id: str) -> Optional[str]:
    """
    Activate an inactive account and issue its first API key.

    Args:
        session: Database session
        signed_account_id: Signed account id from the verification link

    Returns:
        Signed API key, or None if the id is invalid, unknown or already active
    """
    if not token_service.verify_token(signed_account_id):
        return None
    api_key = token_service.signed_token(token_service.API_KEY_LENGTH)
    result = await session.execute(
        update(Account)
        .where(
            Account.id == token_service.strip_checksum(signed_account_id),
            Account.is_active.is_(False),
        )
        .values(is_active=True, apikey=token_service.strip_checksum(api_key))
    )
    await session.commit()
    if result.rowcount == 0:
        return None
    logger.info("Activated account")
    return api_key


async def set_api_key(session: AsyncSession, account_id: str) -> str:
    """
    Issue a fresh API key for an account, replacing any existing one.

    Returns:
        Signed API key
    """
    api_key = token_service.signed_token(token_service.API_KEY_LENGTH)
    await session.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(apikey=token_service.strip_checksum(api_key))
    )
    await session.commit()
    return api_key


async def unset_api_key(session: AsyncSession, account_id: str) -> bool:
    """Clear an account's API key. Returns True if the account exists."""
    result = await session.execute(
        update(Account).where(Account.id == account_id).values(apikey="")
    )
    await session.commit()
    return result.rowcount > 0


async def login(session: AsyncSession, email: str, password: str) -> Optional[str]:
    """
    Authenticate with email and password and rotate the API key.

    Unknown emails, inactive accounts and wrong passwords all return None,
    each after exactly one bcrypt comparison.

    Returns:
        Signed API key, or None on any failure
    """
    account = await get_account_by_email(session, email, active_only=True)
    if account is None:
        auth_service.compare_passwords(password, auth_service.DUMMY_PASSWORD_HASH)
        return None
    if not auth_service.compare_passwords(password, account["password_hash"]):
        return None
    return await set_api_key(session, account["id"])
