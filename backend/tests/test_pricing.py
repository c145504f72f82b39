"""
Flash offer pricing: expiry is read from the clock, never from the stored flag.
"""
import pytest

from liveshop.models.orm.enums import FlashOfferType
from liveshop.services.pricing import (
    compute_effective_price,
    flash_offer_seconds_remaining,
    is_flash_offer_currently_active,
)

from conftest import T0, make_session, minutes


def offer_session(offer_type=FlashOfferType.PERCENTAGE, value=20.0, ends_in=15):
    return make_session(
        is_live=True,
        live_ended_at=None,
        flash_offer_active=True,
        flash_offer_type=offer_type,
        flash_offer_value=value,
        flash_offer_ends_at=T0 + minutes(ends_in),
    )


class TestCurrentlyActive:
    def test_active_before_end(self):
        assert is_flash_offer_currently_active(offer_session(), T0 + minutes(14))

    def test_expires_exactly_at_end(self):
        assert not is_flash_offer_currently_active(offer_session(), T0 + minutes(15))

    def test_flag_off_is_inactive(self):
        session = offer_session()
        session.flash_offer_active = False
        assert not is_flash_offer_currently_active(session, T0)

    def test_missing_end_time_is_inactive(self):
        session = offer_session()
        session.flash_offer_ends_at = None
        assert not is_flash_offer_currently_active(session, T0)

    def test_naive_end_time_is_read_as_utc(self):
        session = offer_session()
        session.flash_offer_ends_at = session.flash_offer_ends_at.replace(tzinfo=None)
        assert is_flash_offer_currently_active(session, T0 + minutes(1))


class TestEffectivePrice:
    def test_percentage(self):
        assert compute_effective_price(10000, offer_session(), T0 + minutes(1)) == 8000

    def test_fixed(self):
        session = offer_session(FlashOfferType.FIXED, 3000)
        assert compute_effective_price(10000, session, T0 + minutes(1)) == 7000

    def test_fixed_larger_than_price_floors_at_zero(self):
        session = offer_session(FlashOfferType.FIXED, 15000)
        assert compute_effective_price(10000, session, T0 + minutes(1)) == 0

    def test_expired_offer_returns_base_price(self):
        assert compute_effective_price(10000, offer_session(), T0 + minutes(16)) == 10000

    def test_string_offer_type_is_accepted(self):
        session = offer_session("fixed", 500)
        assert compute_effective_price(2000, session, T0) == 1500

    @pytest.mark.parametrize("base_price", [0, 1, 99.5, 10000])
    @pytest.mark.parametrize(
        "offer_type,value",
        [
            (FlashOfferType.PERCENTAGE, 100),
            (FlashOfferType.PERCENTAGE, 35),
            (FlashOfferType.FIXED, 1),
            (FlashOfferType.FIXED, 50000),
        ],
    )
    def test_never_negative_nor_above_base(self, base_price, offer_type, value):
        price = compute_effective_price(base_price, offer_session(offer_type, value), T0)
        assert 0 <= price <= base_price


class TestSecondsRemaining:
    def test_counts_down(self):
        assert flash_offer_seconds_remaining(offer_session(), T0 + minutes(10)) == 300

    def test_zero_once_over(self):
        assert flash_offer_seconds_remaining(offer_session(), T0 + minutes(20)) == 0
