"""
SQLAlchemy ORM models for the league system.

Every id column holds the body of a signed token (no check character).
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    JSON,
    Index,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from league_api.database.db import Base

# TEXT[] on PostgreSQL, JSON list elsewhere (SQLite in development and tests)
IdList = JSON().with_variant(ARRAY(String), "postgresql")


class Account(Base):
    """Administrator and guardian accounts."""

    __tablename__ = "accounts"

    id = Column(String, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    password = Column(String, nullable=False)  # bcrypt hash
    phone = Column(String, nullable=False, unique=True)  # E.164
    date_of_birth = Column(String, nullable=False)  # ISO date
    registration_code = Column(String, nullable=False, default="")
    player_ids = Column(IdList, nullable=False, default=list)
    coach = Column(Boolean, default=False, nullable=False)
    volunteer = Column(Boolean, default=False, nullable=False)
    apikey = Column(String, nullable=False, default="")
    is_active = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("idx_accounts_apikey", "apikey"),
        # At most one admin: only the bootstrap account ever gets is_admin
        Index(
            "accounts_single_admin_idx",
            "is_admin",
            unique=True,
            postgresql_where=text("is_admin"),
            sqlite_where=text("is_admin"),
        ),
    )


class Player(Base):
    """Players owned by an account through Account.player_ids."""

    __tablename__ = "players"

    id = Column(String, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    date_of_birth = Column(String, nullable=False)
    position = Column(String, nullable=False)  # Position.name
    team = Column(String, nullable=False, default="")
    division = Column(String, nullable=False, default="")
    is_registered = Column(Boolean, default=False, nullable=False)


class League(Base):
    """The league (a single row system-wide)."""

    __tablename__ = "leagues"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    sport_id = Column(String, nullable=False)
    master_admin = Column(String, nullable=False)  # Account.id


class Season(Base):
    """League seasons with play and registration windows."""

    __tablename__ = "seasons"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    start_date = Column(String, nullable=False)
    end_date = Column(String, nullable=False)
    registration_opens = Column(String, nullable=False)
    registration_closes = Column(String, nullable=False)


class Position(Base):
    """Playing positions, created once as a collection."""

    __tablename__ = "positions"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)


class Sport(Base):
    """Supported sports, seeded at initialization."""

    __tablename__ = "sports"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)


class Registration(Base):
    """Player registrations keyed by the owning account's registration code."""

    __tablename__ = "registrations"

    id = Column(String, primary_key=True)
    player_ids = Column(IdList, nullable=False, default=list)
    amount_due = Column(Integer, nullable=False, default=0)
    amount_paid = Column(Integer, nullable=False, default=0)


class EmailConfig(Base):
    """Outbound SMTP relay configuration (a single row system-wide)."""

    __tablename__ = "email"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    smtp_host = Column(String, nullable=False)
    smtp_port = Column(Integer, nullable=False)
    smtp_user = Column(String, nullable=False)
    smtp_pass = Column(String, nullable=False)
    is_enabled = Column(Boolean, default=False, nullable=False)
    has_error = Column(Boolean, default=True, nullable=False)
