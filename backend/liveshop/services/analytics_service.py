"""
Engagement tracking.

Writes are best-effort: they accompany a viewer action (opening the live
page, tapping the WhatsApp button) and must never block or undo it. A failed
write is logged here and dropped, never retried.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.models.orm.analytics_event import AnalyticsEvent
from liveshop.models.orm.enums import EventType
from liveshop.repository.analytics_repo import create_event

logger = logging.getLogger(__name__)


async def record_event(
    db: AsyncSession,
    seller_id: str,
    event_type: EventType | str,
    product_id: Optional[str] = None,
    user_agent: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[AnalyticsEvent]:
    """Append an event; returns None instead of raising when the write fails."""
    try:
        event = await create_event(
            db,
            seller_id=seller_id,
            event_type=EventType(event_type),
            product_id=product_id,
            user_agent=user_agent,
            now=now,
        )
        logger.debug(f"Tracked {event.event_type.value} for seller {seller_id}")
        return event
    except Exception as e:
        logger.warning(f"Analytics write failed for seller {seller_id} ({event_type}): {e}")
        return None
