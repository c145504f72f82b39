"""Typed filters for the session store and the event log."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from liveshop.models.orm.enums import EventType


@dataclass(frozen=True)
class SessionQuery:
    seller_id: Optional[str] = None
    shop_slug: Optional[str] = None
    is_live: Optional[bool] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class EventQuery:
    seller_id: Optional[str] = None
    product_id: Optional[str] = None
    event_types: tuple[EventType, ...] = field(default_factory=tuple)
    # inclusive bounds on created_at
    since: Optional[datetime] = None
    until: Optional[datetime] = None
