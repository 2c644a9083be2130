from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from bookings.models import Booking
from core.clock import FixedClock
from shifts.exceptions import ValidationError
from shifts.history import shift_history, window_cutoff
from shifts.models import Shift
from shifts.services import close_shift, open_shift


def _shift_started_at(organization, cashier, started_at):
    return Shift.objects.create(
        organization=organization,
        cashier=cashier,
        started_at=started_at,
        opening_cash=Decimal("10.00"),
        status=Shift.Status.CLOSED,
        ended_at=started_at + timedelta(hours=1),
        closing_cash=Decimal("10.00"),
        expected_cash=Decimal("10.00"),
        cash_difference=Decimal("0.00"),
    )


class TestWindowCutoff:
    def test_today_is_local_midnight(self, clock):
        assert window_cutoff("today", clock.now()) == datetime(2026, 3, 10, tzinfo=dt_timezone.utc)

    @pytest.mark.parametrize("window, days", [("7days", 7), ("30days", 30), ("90days", 90)])
    def test_rolling_windows(self, clock, window, days):
        assert window_cutoff(window, clock.now()) == clock.now() - timedelta(days=days)

    def test_unknown_window(self, clock):
        with pytest.raises(ValidationError):
            window_cutoff("year", clock.now())


@pytest.mark.django_db
class TestShiftHistory:
    def test_seven_day_boundary(self, organization, cashier_user, clock):
        cutoff = clock.now() - timedelta(days=7)
        at_cutoff = _shift_started_at(organization, cashier_user, cutoff)
        _shift_started_at(organization, cashier_user, cutoff - timedelta(microseconds=1))

        report = shift_history(organization, "7days", clock=clock)

        assert [row.shift.pk for row in report.rows] == [at_cutoff.pk]
        assert report.cutoff == cutoff

    def test_today_window(self, organization, cashier_user, clock):
        midnight = clock.start_of_today()
        today = _shift_started_at(organization, cashier_user, midnight)
        _shift_started_at(organization, cashier_user, midnight - timedelta(microseconds=1))

        report = shift_history(organization, "today", clock=clock)

        assert [row.shift.pk for row in report.rows] == [today.pk]

    def test_rows_cover_any_status_newest_first(
        self, organization, cashier_user, second_cashier, clock,
    ):
        earlier = FixedClock(clock.now() - timedelta(hours=6))
        closed = open_shift(organization, cashier_user, "10.00", clock=earlier)
        close_shift(closed.pk, "10.00", clock=earlier)
        active = open_shift(organization, second_cashier, "20.00", clock=clock)

        report = shift_history(organization, "7days", clock=clock)

        assert [row.shift.pk for row in report.rows] == [active.pk, closed.pk]
        assert report.rows[0].duration == timedelta(0)
        assert report.totals.shifts == 1

    def test_tickets_concessions_and_average(self, organization, cashier_user, clock, make_booking):
        shift = open_shift(organization, cashier_user, "100.00", clock=clock)
        make_booking(shift, "45.00", seats=3, concessions=[("Popcorn", 2), ("Soda", 1)])
        make_booking(shift, "30.00", seats=2, concessions=[("Popcorn", 1)])
        make_booking(
            shift, "99.00", status=Booking.Status.CANCELLED, seats=5, concessions=[("Soda", 9)],
        )
        clock.advance(hours=4)
        close_shift(shift.pk, "152.50", clock=clock)

        report = shift_history(organization, "7days", clock=clock)
        row = report.rows[0]

        assert row.tickets_sold == 5
        assert row.concessions_sold == 4
        assert row.avg_transaction_value == Decimal("37.50")
        assert row.duration == timedelta(hours=4)
        assert row.cashier.display_name == "Cashier User"

    def test_totals_over_closed_shifts_only(
        self, organization, cashier_user, second_cashier, clock, make_booking,
    ):
        earlier = FixedClock(clock.now() - timedelta(days=1))
        first = open_shift(organization, cashier_user, "100.00", clock=earlier)
        make_booking(first, "40.00", seats=1)
        close_shift(first.pk, "120.00", clock=earlier)

        second = open_shift(organization, cashier_user, "50.00", clock=clock)
        make_booking(second, "20.00", seats=2, concessions=[("Eau", 3)])
        close_shift(second.pk, "60.00", clock=clock)

        active = open_shift(organization, second_cashier, "10.00", clock=clock)
        make_booking(active, "500.00", seats=9)

        totals = shift_history(organization, "7days", clock=clock).totals

        assert totals.shifts == 2
        assert totals.cash_sales == Decimal("42.00")
        assert totals.card_sales == Decimal("18.00")
        assert totals.total_sales == Decimal("60.00")
        assert totals.transactions == 2
        assert totals.variance == Decimal("-12.00")
        assert totals.tickets_sold == 3
        assert totals.concessions_sold == 3
        assert totals.avg_transaction_value == Decimal("30.00")

    def test_average_is_zero_without_transactions(self, organization, cashier_user, clock):
        shift = open_shift(organization, cashier_user, "10.00", clock=clock)
        close_shift(shift.pk, "10.00", clock=clock)

        report = shift_history(organization, "today", clock=clock)

        assert report.rows[0].avg_transaction_value == Decimal("0")
        assert report.totals.avg_transaction_value == Decimal("0")

    def test_other_organization_is_excluded(self, organization, other_organization, cashier_user, clock):
        open_shift(other_organization, cashier_user, "10.00", clock=clock)
        assert shift_history(organization, "90days", clock=clock).rows == []

    def test_unknown_window(self, organization, clock):
        with pytest.raises(ValidationError):
            shift_history(organization, "forever", clock=clock)
