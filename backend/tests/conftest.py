import os

os.environ.setdefault("ENV", "test")

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from liveshop.core.database import Database
from liveshop.models.orm.enums import EventType

T0 = datetime(2026, 10, 2, 18, 0, tzinfo=timezone.utc)


def minutes(n: float) -> timedelta:
    return timedelta(minutes=n)


def make_session(**overrides) -> SimpleNamespace:
    fields = {
        "id": 1,
        "seller_id": "seller_1",
        "shop_slug": "boutique-awa",
        "active_product_id": "P1",
        "preloaded_products": ["P1", "P2", "P3"],
        "is_live": False,
        "live_started_at": T0,
        "live_ended_at": T0 + minutes(15),
        "flash_offer_active": False,
        "flash_offer_type": None,
        "flash_offer_value": 0.0,
        "flash_offer_ends_at": None,
        "show_public_counter": False,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_event(event_type: EventType, at: datetime, seller_id: str = "seller_1", product_id: str = "P1"):
    return SimpleNamespace(
        seller_id=seller_id,
        product_id=product_id,
        event_type=event_type,
        created_at=at,
    )


@pytest_asyncio.fixture
async def db():
    database = Database("sqlite+aiosqlite:///:memory:")
    await database.create_database()
    async with database.session() as session:
        yield session
    await database.dispose()


@pytest.fixture
def client():
    from liveshop.core.db import get_db
    from liveshop.main import app

    test_db = Database("sqlite+aiosqlite:///:memory:")

    async def override_get_db():
        await test_db.create_database()
        async with test_db.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
