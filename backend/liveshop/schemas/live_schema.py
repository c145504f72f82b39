from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from liveshop.models.orm.enums import FlashOfferType


class StartLiveRequest(BaseModel):
    """Products staged for the broadcast; the first one is showcased"""
    shop_slug: constr(min_length=1, max_length=255)
    product_ids: List[str]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "shop_slug": "boutique-awa",
                "product_ids": ["prod_101", "prod_102", "prod_103"],
            }
        }
    )


class SwitchProductRequest(BaseModel):
    product_id: constr(min_length=1, max_length=64)


class FlashOfferRequest(BaseModel):
    offer_type: FlashOfferType
    value: float = Field(gt=0)
    duration_minutes: float = Field(gt=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"offer_type": "percentage", "value": 20, "duration_minutes": 15}
        }
    )


class PublicCounterRequest(BaseModel):
    visible: bool


class SessionStatsResponse(BaseModel):
    scans: int
    views: int
    clicks: int
    duration_minutes: int
    conversion_rate: int


class LiveSessionResponse(BaseModel):
    id: int
    seller_id: str
    shop_slug: str
    active_product_id: Optional[str] = None
    preloaded_products: List[str] = []
    is_live: bool
    live_started_at: Optional[datetime] = None
    live_ended_at: Optional[datetime] = None
    flash_offer_active: bool
    flash_offer_type: Optional[FlashOfferType] = None
    flash_offer_value: float = 0.0
    flash_offer_ends_at: Optional[datetime] = None
    show_public_counter: bool = False

    # evaluated against the server clock at read time
    flash_offer_currently_active: bool = False
    flash_offer_seconds_remaining: int = 0

    model_config = ConfigDict(from_attributes=True)


class SellerLiveStatusResponse(BaseModel):
    session: Optional[LiveSessionResponse] = None
    stats: Optional[SessionStatsResponse] = None
    poll_interval_seconds: int


class PublicLiveResponse(BaseModel):
    """What the viewer page polls: showcased product and offer state"""
    is_live: bool
    seller_id: Optional[str] = None
    active_product_id: Optional[str] = None
    flash_offer_currently_active: bool = False
    flash_offer_type: Optional[FlashOfferType] = None
    flash_offer_value: float = 0.0
    flash_offer_seconds_remaining: int = 0
    base_price: Optional[float] = None
    effective_price: Optional[float] = None
    scans: Optional[int] = None
    poll_interval_seconds: int
