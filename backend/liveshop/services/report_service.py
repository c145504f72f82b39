"""
Performance reporting across a seller's historical live sessions.

Totals are sums of per-session stats; the overall conversion rate is taken
from the summed scans and clicks, never averaged across sessions, so a
short session with a lucky ratio does not skew the figure.
"""
import csv
import io
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from liveshop.core.config import configs
from liveshop.core.exceptions import InvalidArgumentError
from liveshop.models.orm.enums import EventType
from liveshop.repository.analytics_repo import count_events_by_seller, list_events
from liveshop.repository.queries import EventQuery
from liveshop.services.live_session_service import list_seller_sessions
from liveshop.services.metrics_service import SessionStats, compute_session_stats, conversion_rate
from liveshop.utils.timeutil import as_utc, local_date, localize, utcnow

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Date",
    "Start time",
    "End time",
    "Duration (min)",
    "Product",
    "Scans",
    "Views",
    "Clicks",
    "Conversion rate",
]


@dataclass(frozen=True)
class SessionReportRow:
    session_id: int
    seller_id: str
    product_id: Optional[str]
    is_live: bool
    live_started_at: Optional[datetime]
    live_ended_at: Optional[datetime]
    stats: SessionStats

    @property
    def conversion_rate(self) -> int:
        return self.stats.conversion_rate


@dataclass(frozen=True)
class PerformanceReport:
    session_count: int = 0
    total_scans: int = 0
    total_views: int = 0
    total_clicks: int = 0
    conversion_rate: int = 0
    per_session_breakdown: list[SessionReportRow] = field(default_factory=list)
    # approximate ranking badge, see top_percentile()
    top_percentile: Optional[int] = None


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str


def parse_date_filter(value: date | str | None) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidArgumentError(f"Invalid date filter '{value}', expected YYYY-MM-DD")


def aggregate_across_sessions(
    sessions: Iterable,
    events: Iterable,
    date_filter: date | str | None = None,
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> PerformanceReport:
    """
    Sum per-session stats over the sessions started on `date_filter`
    (exact calendar day in the report time zone), or over all of them.
    """
    now = as_utc(now) if now is not None else utcnow()
    tz_name = tz_name or configs.REPORT_TIMEZONE
    day = parse_date_filter(date_filter)
    events = list(events)

    rows: list[SessionReportRow] = []
    for session in sessions:
        if day is not None:
            if session.live_started_at is None or local_date(session.live_started_at, tz_name) != day:
                continue
        seller_events = [
            e for e in events
            if getattr(e, "seller_id", None) in (None, session.seller_id)
        ]
        rows.append(
            SessionReportRow(
                session_id=session.id,
                seller_id=session.seller_id,
                product_id=session.active_product_id,
                is_live=bool(session.is_live),
                live_started_at=as_utc(session.live_started_at),
                live_ended_at=as_utc(session.live_ended_at),
                stats=compute_session_stats(session, seller_events, now),
            )
        )

    rows.sort(key=lambda r: (r.live_started_at is not None, r.live_started_at or now), reverse=True)

    total_scans = sum(r.stats.scans for r in rows)
    total_clicks = sum(r.stats.clicks for r in rows)
    return PerformanceReport(
        session_count=len(rows),
        total_scans=total_scans,
        total_views=sum(r.stats.views for r in rows),
        total_clicks=total_clicks,
        conversion_rate=conversion_rate(total_scans, total_clicks),
        per_session_breakdown=rows,
    )


def top_percentile(seller_scans: int, cohort_scans: Sequence[int]) -> Optional[int]:
    """
    Motivational "you are in the top N% of sellers" badge.

    This is an approximation, not a statistical percentile: the seller is
    ranked by total scans against the scan totals of every seller that has
    any, and the result is clamped to [5, 95]. Returns None (badge hidden)
    when the seller has no scans or there is nobody to compare with.
    """
    cohort = [c for c in cohort_scans if c > 0]
    if seller_scans <= 0 or not cohort:
        return None
    ahead = sum(1 for c in cohort if c > seller_scans)
    percentile = round(100 * (ahead + 1) / len(cohort))
    return max(5, min(95, percentile))


def export_csv(
    breakdown: Sequence[SessionReportRow],
    product_names: Optional[Mapping[str, str]] = None,
    report_name: Optional[str] = None,
    export_date: Optional[date] = None,
    tz_name: Optional[str] = None,
) -> CsvExport:
    """One quoted CSV row per session, header first."""
    tz_name = tz_name or configs.REPORT_TIMEZONE
    report_name = report_name or configs.REPORT_NAME
    export_date = export_date or local_date(utcnow(), tz_name)

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for row in breakdown:
        started = localize(row.live_started_at, tz_name)
        ended = localize(row.live_ended_at, tz_name)
        if product_names is None:
            product = row.product_id or "N/A"
        else:
            product = product_names.get(row.product_id or "", "N/A")
        writer.writerow([
            started.strftime(configs.REPORT_DATE_FORMAT) if started else "N/A",
            started.strftime(configs.REPORT_TIME_FORMAT) if started else "N/A",
            ended.strftime(configs.REPORT_TIME_FORMAT) if ended else "In progress",
            row.stats.duration_minutes,
            product,
            row.stats.scans,
            row.stats.views,
            row.stats.clicks,
            f"{row.conversion_rate}%",
        ])

    filename = f"{report_name}-{export_date.strftime('%Y-%m-%d')}.csv"
    return CsvExport(filename=filename, content=buffer.getvalue())


async def build_performance_report(
    db: AsyncSession,
    seller_id: str,
    date_filter: date | str | None = None,
    now: Optional[datetime] = None,
) -> PerformanceReport:
    """Load a seller's sessions and events, aggregate them and attach the ranking badge."""
    now = as_utc(now) if now is not None else utcnow()
    sessions = await list_seller_sessions(db, seller_id)
    events = [e async for e in list_events(db, EventQuery(seller_id=seller_id))]

    report = aggregate_across_sessions(sessions, events, date_filter=date_filter, now=now)

    cohort = await count_events_by_seller(db, EventType.SCAN)
    badge = top_percentile(cohort.get(seller_id, 0), list(cohort.values())) if report.total_scans else None

    logger.info(
        f"Performance report for seller {seller_id}: {report.session_count} sessions, "
        f"{report.total_scans} scans, {report.conversion_rate}% conversion"
    )
    return replace(report, top_percentile=badge)
