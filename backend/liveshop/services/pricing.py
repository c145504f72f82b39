"""
Flash offer pricing.

Pure functions: no I/O, no clock of their own. Callers pass `now`, so the
same session snapshot always prices the same way for the same instant.
Expiry is never stored; an offer whose end time has passed simply stops
applying here, whatever the stored flag says.
"""
from datetime import datetime
from typing import Protocol, Optional, Union

from liveshop.models.orm.enums import FlashOfferType
from liveshop.utils.timeutil import as_utc

Number = Union[int, float]


class FlashOfferLike(Protocol):
    flash_offer_active: bool
    flash_offer_type: Optional[FlashOfferType]
    flash_offer_value: float
    flash_offer_ends_at: Optional[datetime]


def is_flash_offer_currently_active(session: FlashOfferLike, now: datetime) -> bool:
    if not session.flash_offer_active or session.flash_offer_ends_at is None:
        return False
    return as_utc(now) < as_utc(session.flash_offer_ends_at)


def compute_effective_price(base_price: Number, session: FlashOfferLike, now: datetime) -> Number:
    """
    Price a product is sold at right now.

    percentage: base * (1 - value / 100), fixed: base - value.
    Both are clamped at 0. Without a currently active offer the base price
    is returned untouched.
    """
    if not is_flash_offer_currently_active(session, now):
        return base_price

    value = session.flash_offer_value or 0
    offer_type = FlashOfferType(session.flash_offer_type)
    if offer_type == FlashOfferType.PERCENTAGE:
        discounted = base_price - base_price * value / 100
    else:
        discounted = base_price - value
    return max(0, discounted)


def flash_offer_seconds_remaining(session: FlashOfferLike, now: datetime) -> int:
    """Countdown for the viewer page; 0 once the offer is over."""
    if not is_flash_offer_currently_active(session, now):
        return 0
    return int((as_utc(session.flash_offer_ends_at) - as_utc(now)).total_seconds())
