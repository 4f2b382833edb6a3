"""
Pydantic models for API request validation.

Fields are declared snake_case and bound from camelCase JSON keys. Custom
field types raise errors tagged "required", "email", "e164" or "min" so the
error classifier can describe them.
"""

import re
from typing import Annotated, Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic_core import PydanticCustomError

E164_PATTERN = re.compile(r"^\+[1-9]?[0-9]{7,14}$")
MIN_LEAGUE_NAME_LENGTH = 3


def _required(value: Any) -> Any:
    if value is None or value == "":
        raise PydanticCustomError("required", "field is required")
    return value


def _required_number(value: Any) -> Any:
    if value is None or value == 0:
        raise PydanticCustomError("required", "field is required")
    return value


def _email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email", "invalid email")
    return value


def _e164(value: str) -> str:
    if not E164_PATTERN.match(value):
        raise PydanticCustomError("e164", "phone must use the E.164 international standard")
    return value


def _league_name(value: str) -> str:
    if len(value) < MIN_LEAGUE_NAME_LENGTH:
        raise PydanticCustomError("min", "name is too short")
    return value


RequiredStr = Annotated[str, BeforeValidator(_required)]
RequiredInt = Annotated[int, BeforeValidator(_required_number)]
Email = Annotated[str, BeforeValidator(_required), AfterValidator(_email)]
Phone = Annotated[str, BeforeValidator(_required), AfterValidator(_e164)]
LeagueName = Annotated[str, BeforeValidator(_required), AfterValidator(_league_name)]


class RequestModel(BaseModel):
    """Base for request bodies: camelCase keys, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# Accounts
class AccountCreate(RequestModel):
    """Account creation payload. Any client-supplied id is ignored."""

    first_name: RequiredStr = Field(alias="firstName")
    last_name: RequiredStr = Field(alias="lastName")
    email: Email
    password: RequiredStr
    phone: Phone
    date_of_birth: RequiredStr = Field(alias="dateOfBirth")
    coach: bool = False
    volunteer: bool = False


class LoginRequest(RequestModel):
    email: Email
    password: RequiredStr


# Players
class PlayerCreate(RequestModel):
    """A single player inside a PlayerCreation payload."""

    first_name: RequiredStr = Field(alias="firstName")
    last_name: RequiredStr = Field(alias="lastName")
    date_of_birth: RequiredStr = Field(alias="dateOfBirth")
    position: RequiredStr
    team: str = ""
    division: str = ""


class PlayerCreation(RequestModel):
    """
    Batch of players to create.

    Items are kept as raw objects; each one is validated as a PlayerCreate
    inside the creating transaction so a bad item aborts the whole batch.
    """

    players: Annotated[List[Dict[str, Any]], BeforeValidator(_required)]


class PlayerRegistration(RequestModel):
    """Signed player ids to register."""

    players: Annotated[List[str], BeforeValidator(_required)]


# Leagues
class LeagueCreate(RequestModel):
    name: LeagueName
    sport_id: RequiredStr = Field(alias="sportID")


# Positions
class PositionCreation(RequestModel):
    positions: List[str] = Field(default_factory=list)


# Seasons
class SeasonCreate(RequestModel):
    name: RequiredStr
    start_date: RequiredStr = Field(alias="startDate")
    end_date: RequiredStr = Field(alias="endDate")
    registration_opens: RequiredStr = Field(alias="registrationOpens")
    registration_closes: RequiredStr = Field(alias="registrationCloses")


class SeasonUpdate(RequestModel):
    """Partial season update. Omitted or empty fields keep their stored value."""

    name: Optional[str] = None
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    registration_opens: Optional[str] = Field(None, alias="registrationOpens")
    registration_closes: Optional[str] = Field(None, alias="registrationCloses")


# Email
class EmailConfigCreate(RequestModel):
    email: Email
    smtp_host: RequiredStr = Field(alias="smtpHost")
    smtp_port: RequiredInt = Field(alias="smtpPort")
    smtp_user: RequiredStr = Field(alias="smtpUser")
    smtp_pass: RequiredStr = Field(alias="smtpPass")
