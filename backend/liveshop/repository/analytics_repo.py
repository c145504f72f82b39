# liveshop/repository/analytics_repo.py
"""
Event log: append-only writes and filtered reads over analytics_events.

Rows are never updated or deleted here.
"""
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.models.orm.analytics_event import AnalyticsEvent
from liveshop.models.orm.enums import EventType
from liveshop.repository.queries import EventQuery
from liveshop.utils.timeutil import as_utc, utcnow


async def create_event(
    db: AsyncSession,
    seller_id: str,
    event_type: EventType,
    product_id: Optional[str] = None,
    user_agent: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AnalyticsEvent:
    """Append one event. created_at is assigned here, never by the caller's client."""
    event = AnalyticsEvent(
        seller_id=seller_id,
        product_id=product_id,
        event_type=event_type,
        user_agent=user_agent,
        created_at=as_utc(now) if now is not None else utcnow(),
    )
    db.add(event)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(event)
    return event


def _apply_filter(stmt, query: EventQuery):
    if query.seller_id is not None:
        stmt = stmt.where(AnalyticsEvent.seller_id == query.seller_id)
    if query.product_id is not None:
        stmt = stmt.where(AnalyticsEvent.product_id == query.product_id)
    if query.event_types:
        stmt = stmt.where(AnalyticsEvent.event_type.in_(query.event_types))
    if query.since is not None:
        stmt = stmt.where(AnalyticsEvent.created_at >= as_utc(query.since))
    if query.until is not None:
        stmt = stmt.where(AnalyticsEvent.created_at <= as_utc(query.until))
    return stmt


async def list_events(
    db: AsyncSession,
    query: EventQuery,
) -> AsyncIterator[AnalyticsEvent]:
    """Yield matching events. No ordering is guaranteed."""
    result = await db.execute(_apply_filter(select(AnalyticsEvent), query))
    for event in result.scalars():
        yield event


async def count_events_by_seller(
    db: AsyncSession,
    event_type: EventType,
) -> dict[str, int]:
    """Number of events of one type per seller, across all sellers."""
    stmt = (
        select(AnalyticsEvent.seller_id, func.count(AnalyticsEvent.id).label("total"))
        .where(AnalyticsEvent.event_type == event_type)
        .group_by(AnalyticsEvent.seller_id)
    )
    result = await db.execute(stmt)
    return {row.seller_id: row.total for row in result.all()}
