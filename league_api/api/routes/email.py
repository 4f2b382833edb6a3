"""Email configuration route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from league_api.api.auth_dependencies import require_admin
from league_api.api.routes import SUCCESSFUL, bad_request, unauthorized
from league_api.database.db import get_db_session
from league_api.models.schemas import EmailConfigCreate
from league_api.services import email_service
from league_api.services.data_service import SingletonExistsError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/email/config", status_code=201)
async def create_email_config(
    payload: EmailConfigCreate,
    account: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Store the outbound SMTP relay configuration.

    The credentials are checked against the relay before anything is saved.
    Only one configuration may exist.
    """
    try:
        await email_service.create_email_config(session, payload)
        return SUCCESSFUL
    except SingletonExistsError:
        logger.info("Rejected email config: configuration already exists")
        raise unauthorized()
    except email_service.SMTPCheckError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except IntegrityError as e:
        raise bad_request(e)
