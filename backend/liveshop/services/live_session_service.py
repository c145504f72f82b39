"""
Live session state machine.

States: Idle (no row, or is_live=False) and Live, plus the orthogonal
flash offer flag. Each operation is a single read-modify-write against the
seller's row through the session store; nothing here locks, retries or
schedules. Offer expiry is not a transition: see services.pricing.

Store errors propagate to the caller unchanged. Rejected operations raise
InvalidArgumentError / ConflictError / NotFoundError with a message meant
for the seller.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.core.config import configs
from liveshop.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from liveshop.models.orm.enums import FlashOfferType
from liveshop.models.orm.live_session import LiveSession
from liveshop.repository.live_session_repo import create_session, list_sessions, update_session
from liveshop.repository.queries import SessionQuery
from liveshop.services.pricing import is_flash_offer_currently_active
from liveshop.utils.timeutil import as_utc, utcnow

logger = logging.getLogger(__name__)


# ── Reads ─────────────────────────────────────────────────────────────

async def get_current_session(db: AsyncSession, seller_id: str) -> Optional[LiveSession]:
    """The seller's live row if any, else their most recent row."""
    live = await list_sessions(db, SessionQuery(seller_id=seller_id, is_live=True, limit=1))
    if live:
        return live[0]
    latest = await list_sessions(db, SessionQuery(seller_id=seller_id, limit=1))
    return latest[0] if latest else None


async def get_public_live_session(db: AsyncSession, shop_slug: str) -> Optional[LiveSession]:
    """Live session a viewer page polls for, by shop slug."""
    rows = await list_sessions(db, SessionQuery(shop_slug=shop_slug, is_live=True, limit=1))
    return rows[0] if rows else None


async def list_seller_sessions(db: AsyncSession, seller_id: str) -> list[LiveSession]:
    return await list_sessions(db, SessionQuery(seller_id=seller_id))


# ── Transitions ───────────────────────────────────────────────────────

def _validate_product_ids(product_ids: Sequence[str]) -> list[str]:
    ids = list(product_ids or [])
    max_products = configs.MAX_PRELOADED_PRODUCTS
    if not 1 <= len(ids) <= max_products:
        raise InvalidArgumentError(
            f"Select between 1 and {max_products} products before going live ({len(ids)} given)"
        )
    if any(not isinstance(pid, str) or not pid.strip() for pid in ids):
        raise InvalidArgumentError("Product ids must be non-empty strings")
    if len(set(ids)) != len(ids):
        raise InvalidArgumentError("The same product cannot be preloaded twice")
    return ids


async def start_session(
    db: AsyncSession,
    seller_id: str,
    shop_slug: str,
    product_ids: Sequence[str],
    now: Optional[datetime] = None,
    history_mode: Optional[str] = None,
) -> LiveSession:
    """
    Go live with 1 to 5 preloaded products; the first one is showcased.

    Idle -> Live sets live_started_at and clears live_ended_at. Calling it
    while already live only restages the products: the broadcast keeps its
    original start time.
    """
    ids = _validate_product_ids(product_ids)
    now = as_utc(now) if now is not None else utcnow()
    mode = history_mode or configs.SESSION_HISTORY_MODE

    staged = {
        "shop_slug": shop_slug,
        "active_product_id": ids[0],
        "preloaded_products": ids,
        "flash_offer_active": False,
        "is_live": True,
    }

    current = await get_current_session(db, seller_id)

    if current is not None and current.is_live:
        session = await update_session(db, current.id, staged)
        logger.info(f"Seller {seller_id} restaged live session {session.id} with {len(ids)} products")
        return session

    transition = {**staged, "live_started_at": now, "live_ended_at": None}

    if current is None or mode == "append":
        session = await create_session(db, seller_id=seller_id, **transition)
    else:
        session = await update_session(db, current.id, transition)

    logger.info(f"Seller {seller_id} went live (session {session.id}, mode={mode})")
    return session


async def switch_product(
    db: AsyncSession,
    session: LiveSession,
    product_id: str,
) -> LiveSession:
    """Showcase another preloaded product without interrupting viewers."""
    if not session.is_live:
        raise ConflictError("The live session is not running")
    if product_id not in (session.preloaded_products or []):
        raise NotFoundError(f"Product {product_id} is not preloaded for this live")
    if session.active_product_id == product_id:
        return session

    session = await update_session(db, session.id, {"active_product_id": product_id})
    logger.info(f"Session {session.id} now showcasing product {product_id}")
    return session


async def activate_flash_offer(
    db: AsyncSession,
    session: LiveSession,
    offer_type: FlashOfferType | str,
    value: float,
    duration_minutes: float,
    now: Optional[datetime] = None,
) -> LiveSession:
    """
    Start a time-boxed discount on the live session.

    An offer whose end time has passed no longer counts as active, so a new
    one may replace it even though the stored flag is still set.
    """
    now = as_utc(now) if now is not None else utcnow()

    if not session.is_live:
        raise ConflictError("Flash offers can only run during a live session")

    try:
        offer_type = FlashOfferType(offer_type)
    except ValueError:
        raise InvalidArgumentError(f"Unknown flash offer type '{offer_type}'")
    if value is None or value <= 0:
        raise InvalidArgumentError("Flash offer value must be greater than 0")
    if offer_type == FlashOfferType.PERCENTAGE and value > 100:
        raise InvalidArgumentError("A percentage discount cannot exceed 100")
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidArgumentError("Flash offer duration must be greater than 0 minutes")

    if is_flash_offer_currently_active(session, now):
        raise ConflictError("A flash offer is already running")

    session = await update_session(
        db,
        session.id,
        {
            "flash_offer_active": True,
            "flash_offer_type": offer_type,
            "flash_offer_value": float(value),
            "flash_offer_ends_at": now + timedelta(minutes=duration_minutes),
        },
    )
    logger.info(
        f"Flash offer on session {session.id}: {offer_type.value} {value} for {duration_minutes} min"
    )
    return session


async def stop_session(
    db: AsyncSession,
    session: LiveSession,
    now: Optional[datetime] = None,
) -> LiveSession:
    """Live -> Idle. Ends any flash offer with it."""
    if not session.is_live:
        raise ConflictError("The live session is already stopped")
    now = as_utc(now) if now is not None else utcnow()

    session = await update_session(
        db,
        session.id,
        {
            "is_live": False,
            "live_ended_at": now,
            "flash_offer_active": False,
        },
    )
    logger.info(f"Session {session.id} stopped for seller {session.seller_id}")
    return session


async def set_public_counter(
    db: AsyncSession,
    session: LiveSession,
    visible: bool,
) -> LiveSession:
    return await update_session(db, session.id, {"show_public_counter": bool(visible)})
