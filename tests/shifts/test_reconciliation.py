from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from bookings.models import Booking
from core.clock import FixedClock
from shifts.exceptions import ValidationError
from shifts.models import VarianceStatus
from shifts.reconciliation import DateRange, list_reconciliation, resolve_date_range
from shifts.services import close_shift, open_shift


def _closed_shift(organization, cashier, clock, difference, *, hours_ago=0, opening="100.00"):
    at = FixedClock(clock.now() - timedelta(hours=hours_ago))
    shift = open_shift(organization, cashier, opening, clock=at)
    return close_shift(shift.pk, Decimal(opening) + Decimal(difference), clock=at)


@pytest.fixture
def week(clock):
    return resolve_date_range("7", clock)


class TestDateRange:
    def test_today(self, clock):
        date_range = resolve_date_range("today", clock)
        assert date_range.start == datetime(2026, 3, 10, tzinfo=dt_timezone.utc)
        assert date_range.end == datetime(2026, 3, 10, 23, 59, 59, 999999, tzinfo=dt_timezone.utc)

    def test_yesterday(self, clock):
        date_range = resolve_date_range("yesterday", clock)
        assert date_range.start == datetime(2026, 3, 9, tzinfo=dt_timezone.utc)
        assert date_range.end == datetime(2026, 3, 9, 23, 59, 59, 999999, tzinfo=dt_timezone.utc)

    def test_number_of_days_includes_today(self, clock):
        date_range = resolve_date_range("7", clock)
        assert date_range.start == datetime(2026, 3, 4, tzinfo=dt_timezone.utc)
        assert date_range.end == clock.end_of_today()

    @pytest.mark.parametrize("preset", ["0", "-3", "lastweek", None])
    def test_invalid_preset(self, clock, preset):
        with pytest.raises(ValidationError):
            resolve_date_range(preset, clock)

    def test_start_after_end(self, clock):
        with pytest.raises(ValidationError):
            DateRange(clock.now(), clock.now() - timedelta(seconds=1))


@pytest.mark.django_db
class TestListReconciliation:
    def test_only_closed_shifts_in_range(
        self, organization, other_organization, cashier_user, second_cashier, clock, week,
    ):
        inside = _closed_shift(organization, cashier_user, clock, "0.00", hours_ago=2)
        _closed_shift(organization, cashier_user, clock, "0.00", hours_ago=24 * 10)
        _closed_shift(other_organization, cashier_user, clock, "0.00", hours_ago=2)
        open_shift(organization, second_cashier, "50.00", clock=clock)

        report = list_reconciliation(organization, week)

        assert [row.shift.pk for row in report.rows] == [inside.pk]
        assert report.summary.total_shifts == 1

    def test_range_bounds_are_inclusive(self, organization, cashier_user, clock):
        start_clock = FixedClock(datetime(2026, 3, 9, 8, 0, tzinfo=dt_timezone.utc))
        end_clock = FixedClock(datetime(2026, 3, 9, 18, 0, tzinfo=dt_timezone.utc))
        first = _closed_shift(organization, cashier_user, start_clock, "0.00")
        last = _closed_shift(organization, cashier_user, end_clock, "0.00")

        report = list_reconciliation(
            organization,
            DateRange(first.started_at, last.started_at),
            sort_dir="asc",
        )

        assert [row.shift.pk for row in report.rows] == [first.pk, last.pk]

    def test_classification_boundary(self, organization, cashier_user, clock, week):
        balanced = _closed_shift(organization, cashier_user, clock, "0.99", hours_ago=3)
        over = _closed_shift(organization, cashier_user, clock, "1.00", hours_ago=2)
        short = _closed_shift(organization, cashier_user, clock, "-1.00", hours_ago=1)

        report = list_reconciliation(organization, week)
        by_id = {row.shift.pk: row.variance for row in report.rows}

        assert by_id[balanced.pk] == VarianceStatus.BALANCED
        assert by_id[over.pk] == VarianceStatus.OVER
        assert by_id[short.pk] == VarianceStatus.SHORT

        summary = report.summary
        assert (summary.balanced_count, summary.over_count, summary.short_count) == (1, 1, 1)
        assert summary.total_variance == Decimal("0.99")
        assert summary.over_amount == Decimal("1.00")
        assert summary.short_amount == Decimal("-1.00")

    def test_aggregate_consistency(self, organization, cashier_user, clock, week):
        differences = ["12.40", "-3.15", "0.50", "-0.75", "1.00", "-27.05", "4.44"]
        for index, difference in enumerate(differences):
            _closed_shift(organization, cashier_user, clock, difference, hours_ago=index + 1)

        report = list_reconciliation(organization, week)

        over = sum((row.cash_difference for row in report.rows if row.variance == "over"), Decimal("0"))
        short = sum((-row.cash_difference for row in report.rows if row.variance == "short"), Decimal("0"))
        balanced = sum((row.cash_difference for row in report.rows if row.variance == "balanced"), Decimal("0"))
        assert report.summary.total_variance == sum(Decimal(d) for d in differences)
        assert report.summary.total_variance == over - short + balanced
        assert report.summary.over_amount == over
        assert report.summary.short_amount == -short

        over_only = list_reconciliation(organization, week, variance_filter="over")
        assert over_only.summary.total_variance == over
        assert over_only.summary.total_shifts == over_only.summary.over_count

    def test_filter_applies_to_rows_and_summary(self, organization, cashier_user, clock, week):
        _closed_shift(organization, cashier_user, clock, "5.00", hours_ago=3)
        short = _closed_shift(organization, cashier_user, clock, "-2.00", hours_ago=2)
        _closed_shift(organization, cashier_user, clock, "0.00", hours_ago=1)

        report = list_reconciliation(organization, week, variance_filter="short")

        assert [row.shift.pk for row in report.rows] == [short.pk]
        assert report.summary.total_shifts == 1
        assert report.summary.short_count == 1
        assert report.summary.over_count == 0
        assert report.summary.total_variance == Decimal("-2.00")

    def test_actual_sales_from_counted_bookings(self, organization, cashier_user, clock, week, make_booking):
        shift = open_shift(organization, cashier_user, "100.00", clock=clock)
        make_booking(shift, "45.00")
        make_booking(shift, "30.00")
        make_booking(shift, "20.00", status=Booking.Status.CANCELLED)
        close_shift(shift.pk, "152.50", clock=clock)

        row = list_reconciliation(organization, week).rows[0]

        assert row.actual_sales == Decimal("75.00")
        assert row.actual_transactions == 2
        assert row.variance == VarianceStatus.BALANCED
        assert row.cashier.display_name == "Cashier User"

    def test_sort_by_date_default_newest_first(self, organization, cashier_user, clock, week):
        older = _closed_shift(organization, cashier_user, clock, "0.00", hours_ago=5)
        newer = _closed_shift(organization, cashier_user, clock, "0.00", hours_ago=1)

        report = list_reconciliation(organization, week)

        assert [row.shift.pk for row in report.rows] == [newer.pk, older.pk]

    def test_sort_by_cashier_name(self, organization, cashier_user, second_cashier, clock, week):
        mine = _closed_shift(organization, cashier_user, clock, "0.00", hours_ago=2)
        bobs = _closed_shift(organization, second_cashier, clock, "0.00", hours_ago=1)

        report = list_reconciliation(organization, week, sort_field="cashier", sort_dir="asc")

        assert [row.shift.pk for row in report.rows] == [bobs.pk, mine.pk]

    def test_sort_by_variance(self, organization, cashier_user, clock, week):
        small = _closed_shift(organization, cashier_user, clock, "-8.00", hours_ago=3)
        large = _closed_shift(organization, cashier_user, clock, "6.00", hours_ago=2)
        middle = _closed_shift(organization, cashier_user, clock, "0.10", hours_ago=1)

        desc = list_reconciliation(organization, week, sort_field="variance", sort_dir="desc")
        asc = list_reconciliation(organization, week, sort_field="variance", sort_dir="asc")

        assert [row.shift.pk for row in desc.rows] == [large.pk, middle.pk, small.pk]
        assert [row.shift.pk for row in asc.rows] == [small.pk, middle.pk, large.pk]

    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_ties_are_ordered_by_shift_id(self, organization, cashier_user, clock, week, direction):
        shifts = [
            _closed_shift(organization, cashier_user, clock, "3.00", hours_ago=hours)
            for hours in (1, 2, 3, 4)
        ]

        report = list_reconciliation(organization, week, sort_field="variance", sort_dir=direction)

        expected = sorted((shift.pk for shift in shifts), key=str)
        assert [row.shift.pk for row in report.rows] == expected

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"variance_filter": "huge"},
            {"sort_field": "amount"},
            {"sort_dir": "up"},
        ],
    )
    def test_invalid_options(self, organization, week, kwargs):
        with pytest.raises(ValidationError):
            list_reconciliation(organization, week, **kwargs)

    def test_empty_report(self, organization, week):
        report = list_reconciliation(organization, week)
        assert report.rows == []
        assert report.summary.total_shifts == 0
        assert report.summary.total_variance == Decimal("0")
