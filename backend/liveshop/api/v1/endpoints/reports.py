"""
Performance reports across a seller's live sessions.

GET /api/v1/reports/sellers/{seller_id}?date=YYYY-MM-DD             - Totals + per-session breakdown
GET /api/v1/reports/sellers/{seller_id}/export.csv?date=YYYY-MM-DD  - Same breakdown as a CSV download
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.api.v1.endpoints.live import to_stats_response
from liveshop.core.db import get_db
from liveshop.core.exceptions import LiveCommerceError, error_to_http
from liveshop.schemas.report_schema import PerformanceReportResponse, SessionReportResponse
from liveshop.services.report_service import build_performance_report, export_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/sellers/{seller_id}", response_model=PerformanceReportResponse)
async def get_performance_report(
    seller_id: str,
    date: Optional[str] = Query(None, description="Only sessions started on this day (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
):
    try:
        report = await build_performance_report(db, seller_id, date_filter=date)
    except LiveCommerceError as e:
        raise error_to_http(e)

    return PerformanceReportResponse(
        session_count=report.session_count,
        total_scans=report.total_scans,
        total_views=report.total_views,
        total_clicks=report.total_clicks,
        conversion_rate=report.conversion_rate,
        top_percentile=report.top_percentile,
        sessions=[
            SessionReportResponse(
                session_id=row.session_id,
                product_id=row.product_id,
                is_live=row.is_live,
                live_started_at=row.live_started_at,
                live_ended_at=row.live_ended_at,
                stats=to_stats_response(row.stats),
            )
            for row in report.per_session_breakdown
        ],
    )


@router.get("/sellers/{seller_id}/export.csv")
async def export_performance_report(
    seller_id: str,
    date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        report = await build_performance_report(db, seller_id, date_filter=date)
    except LiveCommerceError as e:
        raise error_to_http(e)

    export = export_csv(report.per_session_breakdown)
    logger.info(f"CSV export {export.filename} for seller {seller_id} ({report.session_count} rows)")
    return Response(
        content=export.content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
