# Ensure src/ is on sys.path when pytest runs without an installed package
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

_src = Path(__file__).resolve().parent.parent / "src"
_str_src = str(_src)
if _str_src not in sys.path:
    sys.path.insert(0, _str_src)

import pytest
import pytest_asyncio

from curvas.core.config import Settings
from curvas.core.database import DatabaseManager, dispose_database, init_database

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings():
    return Settings(database_url=TEST_DATABASE_URL, random_seed=7)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory store per test."""
    manager = DatabaseManager(TEST_DATABASE_URL)
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def session(db):
    s = db.new_session()
    try:
        yield s
    finally:
        await s.close()


@pytest_asyncio.fixture
async def api_db():
    """Process-wide manager used by the FastAPI session dependency."""
    manager = await init_database(TEST_DATABASE_URL)
    yield manager
    await dispose_database()


def match_kwargs(**overrides):
    start = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)
    values = dict(
        home_team="Millonarios",
        away_team="Santa Fe",
        tournament="Liga BetPlay",
        start_date=start,
        end_time=start + timedelta(hours=2),
        ticket_price=5000.0,
        reward_amount=200000.0,
    )
    values.update(overrides)
    return values


@pytest.fixture
def make_match(rng):
    """Create a match (and its first curva) through the admin service."""
    from curvas.services import match_service

    async def _make(session, **overrides):
        return await match_service.create_match(session, rng=rng, **match_kwargs(**overrides))

    return _make


@pytest.fixture
def buy(rng, settings):
    """Purchase helper with a deterministic random source."""
    from curvas.services import ticket_service

    async def _buy(session, match_id, quantity, email="fan@example.com", **kwargs):
        kwargs.setdefault("rng", rng)
        kwargs.setdefault("settings", settings)
        return await ticket_service.purchase_ticket(
            session, match_id, quantity, buyer_email=email, **kwargs
        )

    return _buy


@pytest_asyncio.fixture(autouse=True)
async def _drain_notifications():
    """Dispatched notifications must not outlive the test's event loop."""
    from curvas.services.notifications import drain_notifications

    yield
    await drain_notifications()
