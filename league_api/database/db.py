"""
Database connection and management using SQLAlchemy async mode.
"""

from typing import AsyncGenerator, Dict, Any, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine,
)
from sqlalchemy.orm import DeclarativeBase

from league_api import config


def build_database_url(database: str, conn_str: str) -> Tuple[str, Dict[str, Any]]:
    """
    Translate the DATABASE / DB_CONN_STR pair into a SQLAlchemy async URL.

    libpq style DSNs (postgres://, postgresql://) are pointed at asyncpg and
    their sslmode parameter becomes asyncpg's ssl connect argument.

    Returns:
        (url, connect_args)

    Raises:
        ValueError: If the database backend is not supported
    """
    connect_args: Dict[str, Any] = {}
    if database == "postgres":
        parts = urlsplit(conn_str)
        scheme = parts.scheme
        if scheme in ("postgres", "postgresql"):
            scheme = "postgresql+asyncpg"
        query = []
        for key, value in parse_qsl(parts.query):
            if key == "sslmode":
                connect_args["ssl"] = value
            else:
                query.append((key, value))
        url = urlunsplit((scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
        return url, connect_args
    if database == "sqlite":
        if "://" in conn_str:
            return conn_str, connect_args
        return f"sqlite+aiosqlite:///{conn_str}", connect_args
    raise ValueError(f"Unsupported Database '{database}'")


DATABASE_URL, CONNECT_ARGS = build_database_url(config.DATABASE, config.DB_CONN_STR)

engine: AsyncEngine = create_async_engine(
    DATABASE_URL,
    echo=config.SQL_ECHO,
    future=True,
    pool_pre_ping=True,
    connect_args=CONNECT_ARGS,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# Import models to register them with Base.metadata
from league_api.database import models  # noqa: F401, E402


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get a database session.

    Usage in FastAPI routes:
        async def my_route(session: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_database(target: AsyncEngine = None):
    """Create every table and index in a single transaction. Safe to re-run."""
    async with (target or engine).begin() as conn:
        def create_tables(sync_conn):
            Base.metadata.create_all(bind=sync_conn, checkfirst=True)
        await conn.run_sync(create_tables)


def dialect_name(session: AsyncSession) -> str:
    """Name of the SQL dialect a session talks to ("postgresql", "sqlite", ...)."""
    return session.get_bind().dialect.name
