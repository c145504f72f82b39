# liveshop/models/orm/analytics_event.py
"""Append-only engagement events (scans, product views, WhatsApp clicks, shop views)."""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from liveshop.models.orm.base import Base, IntegerMixin
from liveshop.models.orm.enums import EventType
from liveshop.utils.timeutil import utcnow


class AnalyticsEvent(Base, IntegerMixin):
    __tablename__ = "analytics_events"

    seller_id: Mapped[str] = mapped_column(String(64), index=True)

    product_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    event_type: Mapped[EventType] = mapped_column(
        Enum(
            EventType,
            native_enum=False,
            length=32,
            values_callable=lambda e: [m.value for m in e],
        ),
        index=True,
    )

    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )

    __table_args__ = (
        Index("ix_analytics_events_seller_created", "seller_id", "created_at"),
    )
