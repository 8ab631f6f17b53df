"""
Tests for daily bucketing and keyed accumulation.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from loading.chart import to_time_series
from transformation.aggregation import accumulate, bucket_by_day, format_day_label
from transformation.calculations import calculate_daily_interactions, calculate_daily_revenue
from transformation.records import Interaction, LineItem, Order

from conftest import utc


def make_order(order_id, created_at, total, items=()):
    return Order(
        id=order_id,
        restaurant_id="r1",
        status="completed",
        created_at=created_at,
        total_price=total,
        items=tuple(items),
    )


def revenue_series(orders, timezone="UTC"):
    return bucket_by_day(
        orders,
        lambda order: order.created_at,
        {"revenue": lambda order: order.total_price},
        timezone=timezone,
    )


class TestBucketByDay:
    """Test the daily time-bucketing aggregator."""

    def test_revenue_per_day_in_date_order(self):
        """Two orders on May 1 and one on May 2 give two buckets."""
        orders = [
            make_order("o1", utc(2024, 5, 1, 9), 10),
            make_order("o2", utc(2024, 5, 1, 18), 5),
            make_order("o3", utc(2024, 5, 2, 12), 20),
        ]
        assert to_time_series(revenue_series(orders)) == [
            {"date": "May 1", "revenue": 15},
            {"date": "May 2", "revenue": 20},
        ]

    def test_sorted_by_actual_date_not_label(self):
        """'Dec 9' sorts after 'Dec 10' as text but before it as a date."""
        orders = [
            make_order("o1", utc(2024, 12, 10), 1),
            make_order("o2", utc(2024, 12, 9), 2),
        ]
        labels = [row["date"] for row in to_time_series(revenue_series(orders))]
        assert labels == ["Dec 9", "Dec 10"]

    def test_same_label_different_years_stay_apart(self):
        orders = [
            make_order("o1", utc(2023, 5, 1), 1),
            make_order("o2", utc(2024, 5, 1), 2),
        ]
        buckets = revenue_series(orders)
        assert list(buckets["date"]) == [date(2023, 5, 1), date(2024, 5, 1)]
        assert list(buckets["revenue"]) == [1, 2]

    def test_missing_timestamps_are_excluded(self):
        orders = [
            make_order("o1", utc(2024, 5, 1), 10),
            make_order("o2", None, 99),
        ]
        assert to_time_series(revenue_series(orders)) == [{"date": "May 1", "revenue": 10}]

    def test_unparseable_timestamp_is_excluded(self):
        records = [{"at": "not a date", "v": 3}, {"at": "2024-05-01T10:00:00Z", "v": 4}]
        buckets = bucket_by_day(records, lambda r: r["at"], {"v": lambda r: r["v"]})
        assert list(buckets["v"]) == [4]

    def test_mixed_timestamp_formats_all_counted(self):
        records = [
            {"at": "2024-05-01T10:00:00Z", "v": 4},
            {"at": "2024-05-02", "v": 6},
            {"at": 1714557600, "v": 5},
            {"at": "garbage", "v": 100},
        ]
        buckets = bucket_by_day(records, lambda r: r["at"], {"v": lambda r: r["v"]})
        assert to_time_series(buckets) == [
            {"date": "May 1", "v": 9},
            {"date": "May 2", "v": 6},
        ]
        assert buckets["v"].sum() == 15

    def test_no_usable_records_gives_empty_frame(self):
        buckets = revenue_series([make_order("o1", None, 10)])
        assert buckets.empty
        assert list(buckets.columns) == ["date", "label", "revenue"]

    def test_timezone_moves_calendar_day(self):
        """23:30 UTC on May 1 is already May 2 in Manila."""
        orders = [make_order("o1", utc(2024, 5, 1, 23, 30), 7)]
        assert to_time_series(revenue_series(orders, "Asia/Manila")) == [
            {"date": "May 2", "revenue": 7}
        ]

    def test_deterministic(self):
        orders = [
            make_order(f"o{i}", utc(2024, 5, 1) + timedelta(hours=7 * i), i)
            for i in range(30)
        ]
        first = to_time_series(revenue_series(orders))
        second = to_time_series(revenue_series(list(orders)))
        assert first == second

    def test_series_totals_are_conserved(self):
        orders = [
            make_order(f"o{i}", utc(2024, 5, 1) + timedelta(hours=5 * i), i * 1.5)
            for i in range(40)
        ]
        orders.append(make_order("no-time", None, 1000))
        buckets = revenue_series(orders)
        included = sum(order.total_price for order in orders if order.created_at is not None)
        assert buckets["revenue"].sum() == pytest.approx(included)

    def test_multiple_series_keep_given_order(self):
        orders = [make_order("o1", utc(2024, 5, 1), 10)]
        buckets = bucket_by_day(
            orders,
            lambda order: order.created_at,
            {"revenue": lambda o: o.total_price, "orders": lambda o: 1},
        )
        assert list(buckets.columns) == ["date", "label", "revenue", "orders"]


class TestDailyCalculations:
    """Test the report-level daily series."""

    def test_daily_revenue_counts_orders(self):
        orders = [
            make_order("o1", utc(2024, 5, 1), 10),
            make_order("o2", utc(2024, 5, 1), 5),
        ]
        assert to_time_series(calculate_daily_revenue(orders)) == [
            {"date": "May 1", "revenue": 15, "orders": 2}
        ]

    def test_daily_interactions_split_by_type(self):
        interactions = [
            Interaction("i1", "like", "u1", "v1", utc(2024, 5, 1)),
            Interaction("i2", "like", "u2", "v1", utc(2024, 5, 1)),
            Interaction("i3", "comment", "u1", "v1", utc(2024, 5, 1)),
            Interaction("i4", "view", "u3", "v2", utc(2024, 5, 2)),
        ]
        assert to_time_series(calculate_daily_interactions(interactions)) == [
            {"date": "May 1", "likes": 2, "comments": 1, "views": 0},
            {"date": "May 2", "likes": 0, "comments": 0, "views": 1},
        ]


class TestAccumulate:
    def test_counts_keep_first_seen_order(self):
        records = ["b", "a", "b", "c", "a", "b"]
        assert list(accumulate(records, lambda r: r).items()) == [("b", 3), ("a", 2), ("c", 1)]

    def test_sums_values_and_skips_missing_keys(self):
        items = [LineItem("Adobo", 2, 5.0), LineItem("Sinigang", 1, 8.0), LineItem("Adobo", 3, 5.0)]
        totals = accumulate(items, lambda i: i.name, lambda i: i.quantity)
        assert totals == {"Adobo": 5, "Sinigang": 1}
        assert accumulate([None, "x"], lambda r: r) == {"x": 1}


def test_format_day_label():
    assert format_day_label(date(2024, 5, 1)) == "May 1"
    assert format_day_label(datetime(2024, 11, 23, tzinfo=timezone.utc)) == "Nov 23"
