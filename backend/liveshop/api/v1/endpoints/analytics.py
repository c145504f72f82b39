"""
Engagement tracking and live stats.

POST /api/v1/analytics/events                       - Best-effort event write (always 202)
GET  /api/v1/analytics/sellers/{seller_id}/live     - Dashboard figures of the seller's current session
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.api.v1.endpoints.live import to_stats_response
from liveshop.core.config import configs
from liveshop.core.db import get_db
from liveshop.schemas.analytics_schema import (
    LiveStatsResponse,
    PeakMinuteResponse,
    ProductStatsResponse,
    TrackEventRequest,
    TrackEventResponse,
)
from liveshop.services import analytics_service, live_session_service
from liveshop.services.metrics_service import (
    compute_session_stats,
    load_session_events,
    peak_scan_minute,
    product_breakdown,
)
from liveshop.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.post(
    "/events",
    response_model=TrackEventResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def track_event(
    request: TrackEventRequest,
    user_agent: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a scan / product view / WhatsApp click / shop view.
    The viewer's action never waits on this write: a failure is logged and
    reported as recorded=false, still with 202.
    """
    event = await analytics_service.record_event(
        db,
        seller_id=request.seller_id,
        event_type=request.event_type,
        product_id=request.product_id,
        user_agent=user_agent,
    )
    return TrackEventResponse(recorded=event is not None)


@router.get(
    "/sellers/{seller_id}/live",
    response_model=LiveStatsResponse,
    responses={404: {"description": "Seller never went live"}},
)
async def get_live_stats(seller_id: str, db: AsyncSession = Depends(get_db)):
    session = await live_session_service.get_current_session(db, seller_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No live session for this seller")

    now = utcnow()
    events = await load_session_events(db, session, seller_id, now)
    stats = to_stats_response(compute_session_stats(session, events, now))
    peak = peak_scan_minute(session, events, now)

    return LiveStatsResponse(
        **stats.model_dump(),
        peak_minute=PeakMinuteResponse.model_validate(peak) if peak else None,
        products=[
            ProductStatsResponse.model_validate(p)
            for p in product_breakdown(session, events, now)
        ],
        poll_interval_seconds=configs.ANALYTICS_POLL_SECONDS,
    )
