# liveshop/models/orm/live_session.py
"""
Persistent live session model.
One seller drives one broadcast at a time. Depending on SESSION_HISTORY_MODE
a seller keeps a single row mutated in place, or gets a new row per broadcast.
Flash offer expiry is never written back: readers compare flash_offer_ends_at
with their own clock.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from liveshop.models.orm.base import Base, IntegerMixin, TimestampMixin
from liveshop.models.orm.enums import FlashOfferType


class LiveSession(Base, IntegerMixin, TimestampMixin):
    __tablename__ = "live_sessions"

    seller_id: Mapped[str] = mapped_column(String(64), index=True)

    # Public shop identifier the viewer page polls with
    shop_slug: Mapped[str] = mapped_column(String(255), index=True)

    # Reference into the external product catalog
    active_product_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Ordered, 1 to 5 unique product ids staged before going live
    preloaded_products: Mapped[List[str]] = mapped_column(JSON, default=list)

    is_live: Mapped[bool] = mapped_column(Boolean, default=False)

    live_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    live_ended_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    flash_offer_active: Mapped[bool] = mapped_column(Boolean, default=False)
    flash_offer_type: Mapped[Optional[FlashOfferType]] = mapped_column(
        Enum(
            FlashOfferType,
            native_enum=False,
            length=16,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=True,
    )
    flash_offer_value: Mapped[float] = mapped_column(Float, default=0.0)
    flash_offer_ends_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Whether viewers see the scan counter on the public page
    show_public_counter: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        Index("ix_live_sessions_seller_live", "seller_id", "is_live"),
    )

    def __repr__(self) -> str:
        return f"<LiveSession {self.id} seller={self.seller_id} live={self.is_live}>"
