"""Revenue per cashier over a date range, and one cashier's recent shifts."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings

from accounts.services import CashierProfile, fetch_cashier_profiles, resolve_profile

from .history import average_transaction
from .models import Shift
from .reconciliation import DateRange
from .totals import ZERO, booking_totals_by_shift, empty_booking_totals


@dataclass
class StaffRevenue:
    cashier: CashierProfile
    shifts: int = 0
    revenue: Decimal = ZERO
    transactions: int = 0

    @property
    def avg_per_shift(self) -> Decimal:
        return average_transaction(self.revenue, self.shifts)


@dataclass
class StaffShiftEntry:
    shift: Shift
    revenue: Decimal
    transactions: int


@dataclass
class StaffShiftHistory:
    cashier: CashierProfile
    entries: list[StaffShiftEntry] = field(default_factory=list)

    @property
    def shift_count(self) -> int:
        return len(self.entries)

    @property
    def total_revenue(self) -> Decimal:
        return sum((entry.revenue for entry in self.entries), ZERO)

    @property
    def avg_per_shift(self) -> Decimal:
        return average_transaction(self.total_revenue, self.shift_count)


def staff_revenue(organization, date_range: DateRange) -> list[StaffRevenue]:
    """Group shifts started in *date_range* by cashier, highest revenue first."""
    shifts = list(
        Shift.objects
        .filter(
            organization=organization,
            started_at__gte=date_range.start,
            started_at__lte=date_range.end,
        )
        .only("id", "cashier_id")
    )
    totals = booking_totals_by_shift(shift.pk for shift in shifts)
    profiles = fetch_cashier_profiles(shift.cashier_id for shift in shifts)

    by_cashier: dict = {}
    for shift in shifts:
        entry = by_cashier.get(shift.cashier_id)
        if entry is None:
            entry = by_cashier[shift.cashier_id] = StaffRevenue(
                cashier=resolve_profile(profiles, shift.cashier_id)
            )
        booking_totals = totals.get(shift.pk) or empty_booking_totals()
        entry.shifts += 1
        entry.revenue += booking_totals.total_amount
        entry.transactions += booking_totals.transaction_count

    return sorted(
        by_cashier.values(),
        key=lambda item: (-item.revenue, item.cashier.display_name.casefold()),
    )


def staff_shift_history(organization, cashier, limit: int | None = None) -> StaffShiftHistory:
    """Most recent shifts of *cashier* in *organization* with revenue per shift."""
    if limit is None:
        limit = getattr(settings, "STAFF_HISTORY_LIMIT", 50)
    shifts = list(
        Shift.objects
        .filter(organization=organization, cashier=cashier)
        .order_by("-started_at")[:limit]
    )
    totals = booking_totals_by_shift(shift.pk for shift in shifts)
    history = StaffShiftHistory(cashier=CashierProfile.from_user(cashier))
    for shift in shifts:
        booking_totals = totals.get(shift.pk) or empty_booking_totals()
        history.entries.append(
            StaffShiftEntry(
                shift=shift,
                revenue=booking_totals.total_amount,
                transactions=booking_totals.transaction_count,
            )
        )
    return history
