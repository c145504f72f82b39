"""
Live session state machine against an in-memory SQLite store.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from liveshop.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from liveshop.models.orm.enums import FlashOfferType
from liveshop.repository.live_session_repo import list_sessions, update_session
from liveshop.repository.queries import SessionQuery
from liveshop.services import live_session_service as service
from liveshop.utils.timeutil import as_utc

from conftest import T0, minutes

SELLER = "seller_1"
SHOP = "boutique-awa"


async def go_live(db, product_ids=("P1", "P2"), now=T0, **kwargs):
    return await service.start_session(db, SELLER, SHOP, list(product_ids), now=now, **kwargs)


class TestStartSession:
    async def test_first_start_creates_row(self, db):
        session = await go_live(db, ["P1", "P2", "P3"])

        assert session.id is not None
        assert session.is_live is True
        assert session.active_product_id == "P1"
        assert session.preloaded_products == ["P1", "P2", "P3"]
        assert as_utc(session.live_started_at) == T0
        assert session.live_ended_at is None
        assert session.flash_offer_active is False

    @pytest.mark.parametrize(
        "product_ids",
        [
            [],
            ["P1", "P2", "P3", "P4", "P5", "P6"],
            ["P1", ""],
            ["P1", "P1"],
        ],
    )
    async def test_rejects_bad_product_selection(self, db, product_ids):
        with pytest.raises(InvalidArgumentError):
            await go_live(db, product_ids)
        assert await list_sessions(db, SessionQuery(seller_id=SELLER)) == []

    async def test_five_products_is_the_maximum(self, db):
        session = await go_live(db, ["P1", "P2", "P3", "P4", "P5"])
        assert len(session.preloaded_products) == 5

    async def test_restart_while_live_restages_only(self, db):
        first = await go_live(db, ["P1", "P2"])
        again = await go_live(db, ["P7"], now=T0 + minutes(5))

        assert again.id == first.id
        assert again.preloaded_products == ["P7"]
        assert again.active_product_id == "P7"
        assert as_utc(again.live_started_at) == T0

    async def test_reuse_mode_keeps_one_row(self, db):
        first = await go_live(db, history_mode="reuse")
        await service.stop_session(db, first, now=T0 + minutes(10))
        second = await go_live(db, ["P3"], now=T0 + minutes(30), history_mode="reuse")

        assert second.id == first.id
        assert as_utc(second.live_started_at) == T0 + minutes(30)
        assert second.live_ended_at is None
        assert len(await list_sessions(db, SessionQuery(seller_id=SELLER))) == 1

    async def test_append_mode_keeps_history(self, db):
        first = await go_live(db, history_mode="append")
        await service.stop_session(db, first, now=T0 + minutes(10))
        second = await go_live(db, ["P3"], now=T0 + minutes(30), history_mode="append")

        assert second.id != first.id
        rows = await list_sessions(db, SessionQuery(seller_id=SELLER))
        assert [r.id for r in rows] == [second.id, first.id]
        assert as_utc(rows[1].live_ended_at) == T0 + minutes(10)

    async def test_store_errors_propagate(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=SQLAlchemyError("connection lost"))
        with pytest.raises(SQLAlchemyError):
            await service.start_session(db, SELLER, SHOP, ["P1"], now=T0)


class TestReads:
    async def test_current_session_prefers_live_row(self, db):
        old = await go_live(db, history_mode="append")
        await service.stop_session(db, old, now=T0 + minutes(5))
        live = await go_live(db, now=T0 + minutes(10), history_mode="append")

        current = await service.get_current_session(db, SELLER)
        assert current.id == live.id

    async def test_current_session_falls_back_to_latest(self, db):
        session = await go_live(db)
        await service.stop_session(db, session, now=T0 + minutes(5))
        current = await service.get_current_session(db, SELLER)
        assert current.id == session.id
        assert current.is_live is False

    async def test_unknown_seller(self, db):
        assert await service.get_current_session(db, "nobody") is None

    async def test_public_session_by_shop_slug(self, db):
        session = await go_live(db)
        public = await service.get_public_live_session(db, SHOP)
        assert public.id == session.id

        await service.stop_session(db, session, now=T0 + minutes(1))
        assert await service.get_public_live_session(db, SHOP) is None


class TestSwitchProduct:
    async def test_switch_to_preloaded_product(self, db):
        session = await go_live(db, ["P1", "P2"])
        session = await service.switch_product(db, session, "P2")
        assert session.active_product_id == "P2"

    async def test_switch_to_unknown_product(self, db):
        session = await go_live(db, ["P1", "P2"])
        with pytest.raises(NotFoundError):
            await service.switch_product(db, session, "P3")
        assert session.active_product_id == "P1"

    async def test_switch_when_not_live(self, db):
        session = await go_live(db)
        session = await service.stop_session(db, session, now=T0 + minutes(1))
        with pytest.raises(ConflictError):
            await service.switch_product(db, session, "P2")

    async def test_switch_to_current_product_is_a_noop(self, db):
        session = await go_live(db)
        assert (await service.switch_product(db, session, "P1")).active_product_id == "P1"


class TestFlashOffer:
    async def test_activate(self, db):
        session = await go_live(db)
        session = await service.activate_flash_offer(
            db, session, FlashOfferType.PERCENTAGE, 20, 15, now=T0 + minutes(1)
        )
        assert session.flash_offer_active is True
        assert session.flash_offer_type == FlashOfferType.PERCENTAGE
        assert session.flash_offer_value == 20.0
        assert as_utc(session.flash_offer_ends_at) == T0 + minutes(16)

    async def test_second_offer_while_running_conflicts(self, db):
        session = await go_live(db)
        session = await service.activate_flash_offer(db, session, "fixed", 500, 15, now=T0)
        with pytest.raises(ConflictError):
            await service.activate_flash_offer(db, session, "fixed", 700, 5, now=T0 + minutes(1))

    async def test_expired_offer_can_be_replaced(self, db):
        session = await go_live(db)
        session = await service.activate_flash_offer(db, session, "fixed", 500, 15, now=T0)
        session = await service.activate_flash_offer(
            db, session, "percentage", 10, 5, now=T0 + minutes(20)
        )
        assert session.flash_offer_type == FlashOfferType.PERCENTAGE
        assert as_utc(session.flash_offer_ends_at) == T0 + minutes(25)

    async def test_requires_live_session(self, db):
        session = await go_live(db)
        session = await service.stop_session(db, session, now=T0 + minutes(1))
        with pytest.raises(ConflictError):
            await service.activate_flash_offer(db, session, "percentage", 20, 15, now=T0 + minutes(2))

    @pytest.mark.parametrize(
        "offer_type,value,duration",
        [
            ("bogo", 20, 15),
            ("percentage", 0, 15),
            ("fixed", -5, 15),
            ("percentage", 120, 15),
            ("percentage", 20, 0),
        ],
    )
    async def test_rejects_invalid_offer(self, db, offer_type, value, duration):
        session = await go_live(db)
        with pytest.raises(InvalidArgumentError):
            await service.activate_flash_offer(db, session, offer_type, value, duration, now=T0)
        assert session.flash_offer_active is False


class TestStopSession:
    async def test_stop(self, db):
        session = await go_live(db)
        session = await service.activate_flash_offer(db, session, "fixed", 500, 15, now=T0)
        session = await service.stop_session(db, session, now=T0 + minutes(12))

        assert session.is_live is False
        assert as_utc(session.live_ended_at) == T0 + minutes(12)
        assert session.flash_offer_active is False

    async def test_stop_twice_conflicts(self, db):
        session = await go_live(db)
        session = await service.stop_session(db, session, now=T0 + minutes(1))
        with pytest.raises(ConflictError):
            await service.stop_session(db, session, now=T0 + minutes(2))

    async def test_public_counter_toggle(self, db):
        session = await go_live(db)
        session = await service.set_public_counter(db, session, True)
        assert session.show_public_counter is True


class TestSessionStore:
    async def test_update_unknown_row(self, db):
        with pytest.raises(NotFoundError):
            await update_session(db, 999, {"is_live": False})

    async def test_update_unknown_column(self, db):
        session = await go_live(db)
        with pytest.raises(AttributeError):
            await update_session(db, session.id, {"not_a_column": 1})
