from typing import List, Optional

from pydantic import BaseModel, ConfigDict, constr

from liveshop.models.orm.enums import EventType
from liveshop.schemas.live_schema import SessionStatsResponse


class TrackEventRequest(BaseModel):
    seller_id: constr(min_length=1, max_length=64)
    event_type: EventType
    product_id: Optional[constr(max_length=64)] = None


class TrackEventResponse(BaseModel):
    accepted: bool = True
    recorded: bool


class PeakMinuteResponse(BaseModel):
    minute: int
    scans: int

    model_config = ConfigDict(from_attributes=True)


class ProductStatsResponse(BaseModel):
    product_id: str
    scans: int
    views: int
    clicks: int

    model_config = ConfigDict(from_attributes=True)


class LiveStatsResponse(SessionStatsResponse):
    """Seller dashboard figures for the current session"""
    peak_minute: Optional[PeakMinuteResponse] = None
    # best performer first
    products: List[ProductStatsResponse] = []
    poll_interval_seconds: int
