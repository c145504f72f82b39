"""
Live session control (seller) and live view (viewers).

GET  /api/v1/live/sellers/{seller_id}                  - Current session + live stats
POST /api/v1/live/sellers/{seller_id}/start            - Go live with preloaded products
POST /api/v1/live/sellers/{seller_id}/switch           - Showcase another preloaded product
POST /api/v1/live/sellers/{seller_id}/flash-offer      - Start a time-boxed discount
POST /api/v1/live/sellers/{seller_id}/stop             - End the broadcast
POST /api/v1/live/sellers/{seller_id}/public-counter   - Show/hide the scan counter
GET  /api/v1/live/shops/{shop_slug}                    - Viewer page polling endpoint

Nothing is pushed: clients poll at the advertised interval and every
response re-evaluates offer expiry against the server clock.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.core.config import configs
from liveshop.core.db import get_db
from liveshop.core.exceptions import LiveCommerceError, error_to_http
from liveshop.models.orm.live_session import LiveSession
from liveshop.schemas.live_schema import (
    FlashOfferRequest,
    LiveSessionResponse,
    PublicCounterRequest,
    PublicLiveResponse,
    SellerLiveStatusResponse,
    SessionStatsResponse,
    StartLiveRequest,
    SwitchProductRequest,
)
from liveshop.services import live_session_service
from liveshop.services.metrics_service import SessionStats, compute_live_stats
from liveshop.services.pricing import (
    compute_effective_price,
    flash_offer_seconds_remaining,
    is_flash_offer_currently_active,
)
from liveshop.utils.timeutil import as_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/live", tags=["Live"])


def to_session_response(session: LiveSession) -> LiveSessionResponse:
    now = utcnow()
    response = LiveSessionResponse.model_validate(session)
    response.live_started_at = as_utc(session.live_started_at)
    response.live_ended_at = as_utc(session.live_ended_at)
    response.flash_offer_ends_at = as_utc(session.flash_offer_ends_at)
    response.flash_offer_currently_active = is_flash_offer_currently_active(session, now)
    response.flash_offer_seconds_remaining = flash_offer_seconds_remaining(session, now)
    return response


def to_stats_response(stats: SessionStats) -> SessionStatsResponse:
    return SessionStatsResponse(
        scans=stats.scans,
        views=stats.views,
        clicks=stats.clicks,
        duration_minutes=stats.duration_minutes,
        conversion_rate=stats.conversion_rate,
    )


async def _require_session(db: AsyncSession, seller_id: str) -> LiveSession:
    session = await live_session_service.get_current_session(db, seller_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No live session for this seller")
    return session


# ── Seller side ──────────────────────────────────────────────────────

@router.get("/sellers/{seller_id}", response_model=SellerLiveStatusResponse)
async def get_seller_live_status(seller_id: str, db: AsyncSession = Depends(get_db)):
    session = await live_session_service.get_current_session(db, seller_id)
    if session is None:
        return SellerLiveStatusResponse(poll_interval_seconds=configs.SESSION_POLL_SECONDS)

    stats = await compute_live_stats(db, session)
    return SellerLiveStatusResponse(
        session=to_session_response(session),
        stats=to_stats_response(stats),
        poll_interval_seconds=configs.SESSION_POLL_SECONDS,
    )


@router.post("/sellers/{seller_id}/start", response_model=LiveSessionResponse)
async def start_live(
    seller_id: str,
    request: StartLiveRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        session = await live_session_service.start_session(
            db,
            seller_id=seller_id,
            shop_slug=request.shop_slug,
            product_ids=request.product_ids,
        )
    except LiveCommerceError as e:
        raise error_to_http(e)
    return to_session_response(session)


@router.post("/sellers/{seller_id}/switch", response_model=LiveSessionResponse)
async def switch_live_product(
    seller_id: str,
    request: SwitchProductRequest,
    db: AsyncSession = Depends(get_db),
):
    session = await _require_session(db, seller_id)
    try:
        session = await live_session_service.switch_product(db, session, request.product_id)
    except LiveCommerceError as e:
        raise error_to_http(e)
    return to_session_response(session)


@router.post("/sellers/{seller_id}/flash-offer", response_model=LiveSessionResponse)
async def start_flash_offer(
    seller_id: str,
    request: FlashOfferRequest,
    db: AsyncSession = Depends(get_db),
):
    session = await _require_session(db, seller_id)
    try:
        session = await live_session_service.activate_flash_offer(
            db,
            session,
            offer_type=request.offer_type,
            value=request.value,
            duration_minutes=request.duration_minutes,
        )
    except LiveCommerceError as e:
        raise error_to_http(e)
    return to_session_response(session)


@router.post("/sellers/{seller_id}/stop", response_model=LiveSessionResponse)
async def stop_live(seller_id: str, db: AsyncSession = Depends(get_db)):
    session = await _require_session(db, seller_id)
    try:
        session = await live_session_service.stop_session(db, session)
    except LiveCommerceError as e:
        raise error_to_http(e)
    return to_session_response(session)


@router.post("/sellers/{seller_id}/public-counter", response_model=LiveSessionResponse)
async def set_public_counter(
    seller_id: str,
    request: PublicCounterRequest,
    db: AsyncSession = Depends(get_db),
):
    session = await _require_session(db, seller_id)
    session = await live_session_service.set_public_counter(db, session, request.visible)
    return to_session_response(session)


# ── Viewer side ──────────────────────────────────────────────────────

@router.get("/shops/{shop_slug}", response_model=PublicLiveResponse)
async def get_public_live(
    shop_slug: str,
    base_price: Optional[float] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """
    Polled by the viewer page. `base_price` is the catalog price of the
    showcased product; when given, the discounted price is returned too.
    """
    session = await live_session_service.get_public_live_session(db, shop_slug)
    if session is None:
        return PublicLiveResponse(is_live=False, poll_interval_seconds=configs.SESSION_POLL_SECONDS)

    now = utcnow()
    active = is_flash_offer_currently_active(session, now)
    scans = None
    if session.show_public_counter:
        scans = (await compute_live_stats(db, session, now)).scans

    return PublicLiveResponse(
        is_live=True,
        seller_id=session.seller_id,
        active_product_id=session.active_product_id,
        flash_offer_currently_active=active,
        flash_offer_type=session.flash_offer_type if active else None,
        flash_offer_value=session.flash_offer_value if active else 0.0,
        flash_offer_seconds_remaining=flash_offer_seconds_remaining(session, now),
        base_price=base_price,
        effective_price=compute_effective_price(base_price, session, now) if base_price is not None else None,
        scans=scans,
        poll_interval_seconds=configs.SESSION_POLL_SECONDS,
    )
