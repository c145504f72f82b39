"""
Session metrics: counts of engagement events inside a session's window.

The window is [live_started_at, live_ended_at or now], both ends included.
Everything except compute_live_stats() is pure and takes `now` explicitly,
so a still-running session's duration grows on every call without anything
being written back.
"""
import math
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.models.orm.enums import EventType
from liveshop.repository.analytics_repo import list_events
from liveshop.repository.queries import EventQuery
from liveshop.utils.timeutil import as_utc, minutes_between, utcnow


class SessionWindowLike(Protocol):
    live_started_at: Optional[datetime]
    live_ended_at: Optional[datetime]


class EventLike(Protocol):
    event_type: EventType
    product_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class SessionStats:
    scans: int = 0
    views: int = 0
    clicks: int = 0
    duration_minutes: int = 0

    @property
    def conversion_rate(self) -> int:
        return conversion_rate(self.scans, self.clicks)


@dataclass(frozen=True)
class PeakMinute:
    minute: int
    scans: int


@dataclass(frozen=True)
class ProductStats:
    product_id: str
    scans: int = 0
    views: int = 0
    clicks: int = 0


def conversion_rate(scans: int, clicks: int) -> int:
    """
    Clicks per scan as a whole percentage, rounded half up.
    Zero scans gives 0 rather than a division error.
    """
    if scans <= 0:
        return 0
    return int(math.floor(100 * clicks / scans + 0.5))


def session_window(
    session: SessionWindowLike,
    now: datetime,
) -> Optional[tuple[datetime, datetime]]:
    if session.live_started_at is None:
        return None
    start = as_utc(session.live_started_at)
    end = as_utc(session.live_ended_at) if session.live_ended_at is not None else as_utc(now)
    return start, end


def _events_in_window(events: Iterable[EventLike], window: tuple[datetime, datetime]):
    start, end = window
    for event in events:
        created_at = as_utc(event.created_at)
        if created_at is not None and start <= created_at <= end:
            yield event


def compute_session_stats(
    session: SessionWindowLike,
    events: Iterable[EventLike],
    now: datetime,
) -> SessionStats:
    window = session_window(session, now)
    if window is None:
        return SessionStats()

    counts = Counter(EventType(e.event_type) for e in _events_in_window(events, window))
    return SessionStats(
        scans=counts[EventType.SCAN],
        views=counts[EventType.VIEW_PRODUCT],
        clicks=counts[EventType.WHATSAPP_CLICK],
        duration_minutes=max(0, minutes_between(*window)),
    )


def peak_scan_minute(
    session: SessionWindowLike,
    events: Iterable[EventLike],
    now: datetime,
) -> Optional[PeakMinute]:
    """Minute offset from the start with the most scans (earliest on ties)."""
    window = session_window(session, now)
    if window is None:
        return None

    start = window[0]
    per_minute: Counter = Counter(
        minutes_between(start, e.created_at)
        for e in _events_in_window(events, window)
        if EventType(e.event_type) == EventType.SCAN
    )
    if not per_minute:
        return None
    minute, scans = min(per_minute.items(), key=lambda item: (-item[1], item[0]))
    return PeakMinute(minute=minute, scans=scans)


def product_breakdown(
    session: SessionWindowLike,
    events: Iterable[EventLike],
    now: datetime,
) -> list[ProductStats]:
    """Per-product counts inside the window, best performer (most scans) first."""
    window = session_window(session, now)
    if window is None:
        return []

    per_product: dict[str, Counter] = defaultdict(Counter)
    for event in _events_in_window(events, window):
        if event.product_id:
            per_product[event.product_id][EventType(event.event_type)] += 1

    stats = [
        ProductStats(
            product_id=product_id,
            scans=counts[EventType.SCAN],
            views=counts[EventType.VIEW_PRODUCT],
            clicks=counts[EventType.WHATSAPP_CLICK],
        )
        for product_id, counts in per_product.items()
    ]
    stats.sort(key=lambda s: (-s.scans, -s.clicks, s.product_id))
    return stats


async def load_session_events(
    db: AsyncSession,
    session: SessionWindowLike,
    seller_id: str,
    now: datetime,
) -> list:
    """Events of the seller that fall in the session's window."""
    window = session_window(session, now)
    if window is None:
        return []
    query = EventQuery(seller_id=seller_id, since=window[0], until=window[1])
    return [event async for event in list_events(db, query)]


async def compute_live_stats(
    db: AsyncSession,
    session,
    now: Optional[datetime] = None,
) -> SessionStats:
    now = as_utc(now) if now is not None else utcnow()
    events = await load_session_events(db, session, session.seller_id, now)
    return compute_session_stats(session, events, now)
