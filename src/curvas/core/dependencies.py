"""FastAPI dependencies: database session, random source, notifier."""

import random
from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; committed when the route returns without error."""
    async with get_database_manager().session() as session:
        yield session


@lru_cache
def get_rng() -> random.Random:
    """Process-wide slot-drawing source, seeded from CURVAS_RANDOM_SEED when set."""
    return random.Random(get_settings().random_seed)


def get_notifier():
    from curvas.services.notifications import get_default_notifier

    return get_default_notifier()
