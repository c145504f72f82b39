from liveshop.models.orm.enums import EventType
from liveshop.services.metrics_service import (
    SessionStats,
    compute_live_stats,
    compute_session_stats,
    conversion_rate,
    peak_scan_minute,
    product_breakdown,
)
from liveshop.repository.analytics_repo import create_event
from liveshop.repository.live_session_repo import create_session

from conftest import T0, make_event, make_session, minutes


def fifteen_minute_events():
    """10 scans, 4 product views and 5 WhatsApp clicks spread over the live."""
    events = [make_event(EventType.SCAN, T0 + minutes(i)) for i in range(10)]
    events += [make_event(EventType.VIEW_PRODUCT, T0 + minutes(2 + i)) for i in range(4)]
    events += [make_event(EventType.WHATSAPP_CLICK, T0 + minutes(5 + i), product_id="P2") for i in range(5)]
    return events


class TestConversionRate:
    def test_zero_scans(self):
        assert conversion_rate(0, 0) == 0
        assert conversion_rate(0, 3) == 0

    def test_rounds_half_up(self):
        assert conversion_rate(8, 1) == 13  # 12.5
        assert conversion_rate(3, 2) == 67

    def test_can_exceed_one_hundred(self):
        assert conversion_rate(2, 3) == 150


class TestComputeSessionStats:
    def test_finished_session(self):
        stats = compute_session_stats(make_session(), fifteen_minute_events(), T0 + minutes(60))
        assert stats == SessionStats(scans=10, views=4, clicks=5, duration_minutes=15)
        assert stats.conversion_rate == 50

    def test_window_bounds_are_inclusive(self):
        events = [
            make_event(EventType.SCAN, T0),
            make_event(EventType.SCAN, T0 + minutes(15)),
            make_event(EventType.SCAN, T0 - minutes(1)),
            make_event(EventType.SCAN, T0 + minutes(16)),
        ]
        assert compute_session_stats(make_session(), events, T0 + minutes(60)).scans == 2

    def test_shop_views_are_not_counted(self):
        events = [make_event(EventType.VIEW_SHOP, T0 + minutes(1))]
        stats = compute_session_stats(make_session(), events, T0 + minutes(60))
        assert (stats.scans, stats.views, stats.clicks) == (0, 0, 0)

    def test_running_session_duration_grows(self):
        session = make_session(is_live=True, live_ended_at=None)
        first = compute_session_stats(session, [], T0 + minutes(3))
        later = compute_session_stats(session, [], T0 + minutes(7.5))
        assert first.duration_minutes == 3
        assert later.duration_minutes == 7

    def test_never_started(self):
        session = make_session(live_started_at=None, live_ended_at=None)
        assert compute_session_stats(session, fifteen_minute_events(), T0) == SessionStats()


class TestPeakAndBreakdown:
    def test_peak_scan_minute(self):
        events = [
            make_event(EventType.SCAN, T0 + minutes(2)),
            make_event(EventType.SCAN, T0 + minutes(4.2)),
            make_event(EventType.SCAN, T0 + minutes(4.8)),
            make_event(EventType.SCAN, T0 + minutes(6)),
        ]
        peak = peak_scan_minute(make_session(), events, T0 + minutes(60))
        assert (peak.minute, peak.scans) == (4, 2)

    def test_peak_ties_pick_earliest(self):
        events = [make_event(EventType.SCAN, T0 + minutes(m)) for m in (9, 3)]
        assert peak_scan_minute(make_session(), events, T0 + minutes(60)).minute == 3

    def test_no_scans_no_peak(self):
        assert peak_scan_minute(make_session(), [], T0 + minutes(60)) is None

    def test_product_breakdown_orders_by_scans(self):
        events = fifteen_minute_events() + [
            make_event(EventType.SCAN, T0 + minutes(1), product_id="P3"),
        ]
        breakdown = product_breakdown(make_session(), events, T0 + minutes(60))
        assert [p.product_id for p in breakdown] == ["P1", "P3", "P2"]
        assert breakdown[0].scans == 10
        assert breakdown[2].clicks == 5


class TestComputeLiveStats:
    async def test_reads_events_of_the_seller_only(self, db):
        session = await create_session(
            db,
            seller_id="seller_1",
            shop_slug="boutique-awa",
            active_product_id="P1",
            preloaded_products=["P1"],
            is_live=True,
            live_started_at=T0,
        )
        await create_event(db, "seller_1", EventType.SCAN, "P1", now=T0 + minutes(1))
        await create_event(db, "seller_1", EventType.WHATSAPP_CLICK, "P1", now=T0 + minutes(2))
        await create_event(db, "seller_2", EventType.SCAN, "P9", now=T0 + minutes(1))
        await create_event(db, "seller_1", EventType.SCAN, "P1", now=T0 - minutes(5))

        stats = await compute_live_stats(db, session, now=T0 + minutes(10))

        assert stats == SessionStats(scans=1, views=0, clicks=1, duration_minutes=10)
        assert stats.conversion_rate == 100
