from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from liveshop.schemas.live_schema import SessionStatsResponse


class SessionReportResponse(BaseModel):
    session_id: int
    product_id: Optional[str] = None
    is_live: bool
    live_started_at: Optional[datetime] = None
    live_ended_at: Optional[datetime] = None
    stats: SessionStatsResponse


class PerformanceReportResponse(BaseModel):
    session_count: int
    total_scans: int
    total_views: int
    total_clicks: int
    conversion_rate: int
    # approximate, motivational only
    top_percentile: Optional[int] = None
    sessions: List[SessionReportResponse]
