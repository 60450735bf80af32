"""
Reporting tests: today's window, date bounds, averages, top products.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from inventree.services import reporting_service
from inventree.time_utils import local_midnight_utc
from inventree.validation import ValidationError


NOW = datetime(2026, 3, 14, 15, 30)


class TestTodaysSales:

    def test_only_sales_since_local_midnight(self, make_sale):
        midnight = local_midnight_utc(NOW)
        make_sale([(1, "A", 1, "10.00")], created_at=midnight - timedelta(seconds=1))
        at_midnight = make_sale([(1, "A", 2, "10.00")], created_at=midnight)
        later = make_sale([(1, "A", 1, "5.00")], created_at=midnight + timedelta(hours=3))

        summary = reporting_service.todays_sales(now=NOW)

        assert [s.id for s in summary["sales"]] == [at_midnight.id, later.id]
        assert summary["total_transactions"] == 2
        assert summary["total_revenue"] == Decimal("22.00") + Decimal("5.50")

    def test_empty_day(self, db_session):
        summary = reporting_service.todays_sales(now=NOW)
        assert summary["sales"] == []
        assert summary["total_revenue"] == Decimal("0")
        assert summary["total_transactions"] == 0


class TestSalesReport:

    def test_bounds_are_inclusive(self, make_sale):
        start = datetime(2026, 3, 1)
        end = datetime(2026, 3, 31, 23, 59, 59)
        make_sale([(1, "A", 1, "1.00")], created_at=start - timedelta(seconds=1))
        first = make_sale([(1, "A", 1, "1.00")], created_at=start)
        last = make_sale([(1, "A", 1, "1.00")], created_at=end)
        make_sale([(1, "A", 1, "1.00")], created_at=end + timedelta(seconds=1))

        report = reporting_service.sales_report(start=start, end=end)

        assert [s.id for s in report["sales"]] == [first.id, last.id]
        assert report["total_transactions"] == 2

    def test_iso_string_bounds(self, make_sale):
        make_sale([(1, "A", 1, "1.00")], created_at=datetime(2026, 3, 10, 12, 0))
        report = reporting_service.sales_report(start="2026-03-10T00:00:00Z", end="2026-03-11T00:00:00Z")
        assert report["total_transactions"] == 1
        assert report["start"] == "2026-03-10T00:00:00Z"

    def test_average_transaction(self, make_sale):
        make_sale([(1, "A", 1, "10.00")], created_at=NOW, tax_rate="0")
        make_sale([(1, "A", 3, "10.00")], created_at=NOW, tax_rate="0")

        report = reporting_service.sales_report()

        assert report["total_revenue"] == Decimal("40")
        assert report["average_transaction"] == Decimal("20")

    def test_no_sales_gives_zero_average(self, db_session):
        report = reporting_service.sales_report(start="2020-01-01T00:00:00Z", end="2020-01-02T00:00:00Z")
        assert report["total_revenue"] == Decimal("0")
        assert report["total_transactions"] == 0
        assert report["average_transaction"] == Decimal("0")
        assert report["top_products"] == []

    def test_start_after_end_rejected(self, db_session):
        with pytest.raises(ValidationError):
            reporting_service.sales_report(start="2026-03-02T00:00:00Z", end="2026-03-01T00:00:00Z")

    def test_aware_datetime_bounds_are_converted_to_utc(self, make_sale):
        make_sale([(1, "A", 1, "1.00")], created_at=datetime(2026, 3, 10, 12, 0))
        eastern = timezone(timedelta(hours=-5))

        report = reporting_service.sales_report(
            start=datetime(2026, 3, 10, 6, 0, tzinfo=eastern),
            end=datetime(2026, 3, 10, 8, 0, tzinfo=eastern),
        )

        assert report["total_transactions"] == 1
        assert report["start"] == "2026-03-10T11:00:00Z"
        assert report["end"] == "2026-03-10T13:00:00Z"

    def test_aware_and_naive_bounds_can_be_mixed(self, make_sale):
        make_sale([(1, "A", 1, "1.00")], created_at=datetime(2026, 3, 10, 12, 0))
        eastern = timezone(timedelta(hours=-5))

        report = reporting_service.sales_report(
            start=datetime(2026, 3, 10, 6, 0, tzinfo=eastern),
            end=datetime(2026, 3, 10, 13, 0),
        )
        assert report["total_transactions"] == 1

        with pytest.raises(ValidationError):
            reporting_service.sales_report(
                start=datetime(2026, 3, 10, 9, 0, tzinfo=eastern),
                end=datetime(2026, 3, 10, 13, 0),
            )

    def test_malformed_bound_rejected(self, db_session):
        with pytest.raises(ValidationError):
            reporting_service.sales_report(start="yesterday")


class TestTopProducts:

    def test_ranked_by_revenue(self, make_sale):
        make_sale([(1, "A", 5, "10.00"), (2, "B", 1, "100.00")], created_at=NOW)
        make_sale([(3, "C", 2, "10.00"), (1, "A", 1, "10.00")], created_at=NOW + timedelta(minutes=1))

        top = reporting_service.sales_report()["top_products"]

        assert [t["name"] for t in top] == ["B", "A", "C"]
        assert top[1]["quantity"] == 6
        assert top[1]["revenue"] == Decimal("60.00")

    def test_ties_keep_first_seen_order(self, make_sale):
        make_sale([(7, "Late", 1, "5.00")], created_at=NOW + timedelta(minutes=5))
        make_sale([(8, "Early", 1, "5.00"), (9, "Second", 1, "5.00")], created_at=NOW)

        top = reporting_service.sales_report()["top_products"]

        assert [t["name"] for t in top] == ["Early", "Second", "Late"]

    def test_name_comes_from_snapshot(self, make_sale):
        make_sale([(1, "Original", 1, "3.00")], created_at=NOW)
        make_sale([(1, "Renamed", 1, "3.00")], created_at=NOW + timedelta(minutes=1))

        top = reporting_service.sales_report()["top_products"]

        assert len(top) == 1
        assert top[0]["name"] == "Original"
        assert top[0]["quantity"] == 2

    def test_limited_to_ten(self, make_sale):
        make_sale([(i, f"P{i}", 1, str(i)) for i in range(1, 13)], created_at=NOW)

        top = reporting_service.sales_report()["top_products"]

        assert len(top) == 10
        assert top[0]["name"] == "P12"
