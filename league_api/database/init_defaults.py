#!/usr/bin/env python3
"""
Initialize default database values.
Run on startup to create the schema and seed the fixed list of sports, or by
hand as an admin command:

    python -m league_api.database.init_defaults
"""

import asyncio
import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from league_api.database import db
from league_api.database.models import Sport
from league_api.services import token_service

logger = logging.getLogger(__name__)

SPORTS = [
    "baseball",
    "basketball",
    "football",
    "hockey",
    "quidditch",
    "rugby",
    "soccer",
    "softball",
    "volleyball",
]


async def seed_sports(session) -> int:
    """
    Insert any sport from SPORTS that is not stored yet.

    Returns:
        Number of sports inserted
    """
    result = await session.execute(select(Sport.name))
    existing = set(result.scalars().all())
    missing = [name for name in SPORTS if name not in existing]
    for name in missing:
        sport_id = token_service.signed_token(token_service.SPORT_ID_LENGTH)
        session.add(Sport(id=token_service.strip_checksum(sport_id), name=name))
    try:
        await session.commit()
    except IntegrityError:
        # Another process seeded concurrently
        await session.rollback()
        logger.info("Sports already seeded by another process")
        return 0
    return len(missing)


async def init_defaults():
    """Initialize default database values."""
    async with db.AsyncSessionLocal() as session:
        inserted = await seed_sports(session)
    if inserted:
        logger.info(f"Seeded {inserted} sports")
    else:
        logger.info("Sports already seeded")


async def _main():
    await db.init_database()
    await init_defaults()
    await db.engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())
