from datetime import timedelta
from decimal import Decimal

import pytest

from accounts.models import User
from accounts.services import CashierProfile
from bookings.models import Booking
from core.clock import FixedClock
from shifts.reconciliation import resolve_date_range
from shifts.services import close_shift, open_shift
from shifts.staff_revenue import staff_revenue, staff_shift_history


@pytest.mark.django_db
class TestStaffRevenue:
    def test_groups_by_cashier_sorted_by_revenue(
        self, organization, cashier_user, second_cashier, clock, make_booking,
    ):
        earlier = FixedClock(clock.now() - timedelta(hours=5))
        first = open_shift(organization, cashier_user, "0.00", clock=earlier)
        make_booking(first, "20.00")
        close_shift(first.pk, "14.00", clock=earlier)
        second = open_shift(organization, cashier_user, "0.00", clock=clock)
        make_booking(second, "10.00")
        make_booking(second, "99.00", status=Booking.Status.REFUNDED)

        bobs = open_shift(organization, second_cashier, "0.00", clock=clock)
        make_booking(bobs, "50.00")

        results = staff_revenue(organization, resolve_date_range("today", clock))

        assert [entry.cashier.id for entry in results] == [second_cashier.pk, cashier_user.pk]
        mine = results[1]
        assert mine.shifts == 2
        assert mine.revenue == Decimal("30.00")
        assert mine.transactions == 2
        assert mine.avg_per_shift == Decimal("15.00")

    def test_equal_revenue_sorted_by_name(self, organization, cashier_user, second_cashier, clock):
        open_shift(organization, cashier_user, "0.00", clock=clock)
        open_shift(organization, second_cashier, "0.00", clock=clock)

        results = staff_revenue(organization, resolve_date_range("today", clock))

        assert [entry.cashier.display_name for entry in results] == ["Bob Martin", "Cashier User"]

    def test_shifts_outside_range_are_ignored(self, organization, cashier_user, clock, make_booking):
        old = FixedClock(clock.now() - timedelta(days=3))
        shift = open_shift(organization, cashier_user, "0.00", clock=old)
        make_booking(shift, "80.00")

        assert staff_revenue(organization, resolve_date_range("today", clock)) == []


@pytest.mark.django_db
class TestStaffShiftHistory:
    def test_recent_shifts_with_revenue(self, organization, cashier_user, clock, make_booking):
        for hours in (30, 20, 10):
            at = FixedClock(clock.now() - timedelta(hours=hours))
            shift = open_shift(organization, cashier_user, "0.00", clock=at)
            make_booking(shift, str(hours))
            close_shift(shift.pk, "0.00", clock=at)

        history = staff_shift_history(organization, cashier_user)

        assert [entry.revenue for entry in history.entries] == [
            Decimal("10.00"), Decimal("20.00"), Decimal("30.00"),
        ]
        assert history.shift_count == 3
        assert history.total_revenue == Decimal("60.00")
        assert history.avg_per_shift == Decimal("20.00")
        assert history.cashier.email == cashier_user.email

    def test_limit(self, organization, cashier_user, clock, settings):
        settings.STAFF_HISTORY_LIMIT = 2
        for hours in (3, 2, 1):
            at = FixedClock(clock.now() - timedelta(hours=hours))
            shift = open_shift(organization, cashier_user, "0.00", clock=at)
            close_shift(shift.pk, "0.00", clock=at)

        assert staff_shift_history(organization, cashier_user).shift_count == 2
        assert staff_shift_history(organization, cashier_user, limit=1).shift_count == 1

    def test_other_cashier_is_excluded(self, organization, cashier_user, second_cashier, clock):
        open_shift(organization, second_cashier, "0.00", clock=clock)
        history = staff_shift_history(organization, cashier_user)
        assert history.entries == []
        assert history.avg_per_shift == Decimal("0")


def test_cashier_profile_falls_back_to_email():
    user = User(email="anon@test.com")
    assert CashierProfile.from_user(user).display_name == "anon@test.com"
