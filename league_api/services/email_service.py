"""
Email configuration service: SMTP credential checks and the EmailConfig store.

Relay credentials are verified against the SMTP host (implicit TLS) before
they are stored. Only one configuration may exist.
"""

import asyncio
import logging
import smtplib
import ssl
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from league_api.database.models import EmailConfig
from league_api.models.schemas import EmailConfigCreate
from league_api.services import token_service
from league_api.services.data_service import SingletonExistsError, count_rows, lock_table

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10


class SMTPCheckError(Exception):
    """Base class for SMTP credential check failures."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class SMTPHostNotFoundError(SMTPCheckError):
    status_code = 404


class SMTPAuthError(SMTPCheckError):
    status_code = 401


def _reply_text(reply) -> str:
    if isinstance(reply, bytes):
        return reply.decode("utf-8", errors="replace")
    return str(reply)


def check_smtp_credentials(host: str, port: int, user: str, password: str) -> None:
    """
    Connect to an SMTP relay over TLS and log in. Blocking.

    Raises:
        SMTPHostNotFoundError: If the host cannot be reached or the TLS handshake fails
        SMTPAuthError: If the server rejects the credentials
        SMTPCheckError: On any other SMTP failure
    """
    context = ssl.create_default_context()
    try:
        client = smtplib.SMTP_SSL(host, port, timeout=SMTP_TIMEOUT_SECONDS, context=context)
    except (OSError, smtplib.SMTPException) as e:
        logger.warning(f"SMTP host {host}:{port} unreachable: {e}")
        raise SMTPHostNotFoundError("host not found") from e

    try:
        client.login(user, password)
        client.quit()
    except smtplib.SMTPAuthenticationError as e:
        logger.warning(f"SMTP authentication failed for {host}:{port}")
        raise SMTPAuthError(_reply_text(e.smtp_error)) from e
    except (OSError, smtplib.SMTPException) as e:
        logger.warning(f"SMTP check failed for {host}:{port}: {e}")
        raise SMTPCheckError(str(e) or "smtp error") from e
    finally:
        client.close()


async def verify_smtp_credentials(host: str, port: int, user: str, password: str) -> None:
    """Run check_smtp_credentials in a worker thread."""
    await asyncio.to_thread(check_smtp_credentials, host, port, user, password)


async def get_total_email_configs(session: AsyncSession) -> int:
    return await count_rows(session, EmailConfig)


async def create_email_config(
    session: AsyncSession, payload: EmailConfigCreate
) -> Optional[str]:
    """
    Verify relay credentials and store the email configuration.

    Args:
        session: Database session
        payload: Validated configuration payload

    Returns:
        Signed config id

    Raises:
        SingletonExistsError: If a configuration already exists
        SMTPCheckError: If the credentials cannot be verified
    """
    if await get_total_email_configs(session) > 0:
        raise SingletonExistsError("email config already exists")
    # End the read transaction before the slow network check
    await session.rollback()

    await verify_smtp_credentials(
        payload.smtp_host, payload.smtp_port, payload.smtp_user, payload.smtp_pass
    )

    try:
        await lock_table(session, EmailConfig.__tablename__)
        if await get_total_email_configs(session) > 0:
            raise SingletonExistsError("email config already exists")
        config_id = token_service.signed_token(token_service.EMAIL_CONFIG_ID_LENGTH)
        session.add(
            EmailConfig(
                id=token_service.strip_checksum(config_id),
                email=payload.email,
                smtp_host=payload.smtp_host,
                smtp_port=payload.smtp_port,
                smtp_user=payload.smtp_user,
                smtp_pass=payload.smtp_pass,
                is_enabled=True,
                has_error=False,
            )
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Stored email config for {payload.smtp_host}")
    return config_id
