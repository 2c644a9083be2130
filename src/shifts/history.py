"""Shift history over a rolling window, with per-shift ticket and concession counts."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from accounts.services import CashierProfile, fetch_cashier_profiles, resolve_profile
from bookings.models import BookedSeat, Booking, BookingConcession
from core.clock import Clock, get_clock

from .exceptions import ValidationError
from .models import Shift
from .totals import CENT, ZERO

WINDOW_DAYS = {"7days": 7, "30days": 30, "90days": 90}
WINDOWS = ("today", *WINDOW_DAYS)


def window_cutoff(window: str, now: datetime) -> datetime:
    """Earliest ``started_at`` included in *window* (inclusive bound)."""
    if window == "today":
        return timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        days = WINDOW_DAYS[window]
    except KeyError as exc:
        raise ValidationError(f"Fenetre inconnue : {window}.") from exc
    return now - timedelta(days=days)


def average_transaction(total: Decimal, transactions: int) -> Decimal:
    if not transactions:
        return ZERO
    return (total / transactions).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class ShiftHistoryRow:
    shift: Shift
    cashier: CashierProfile
    tickets_sold: int
    concessions_sold: int
    avg_transaction_value: Decimal
    duration: timedelta


@dataclass
class ShiftHistoryTotals:
    shifts: int = 0
    cash_sales: Decimal = ZERO
    card_sales: Decimal = ZERO
    transactions: int = 0
    variance: Decimal = ZERO
    tickets_sold: int = 0
    concessions_sold: int = 0

    @property
    def total_sales(self) -> Decimal:
        return self.cash_sales + self.card_sales

    @property
    def avg_transaction_value(self) -> Decimal:
        return average_transaction(self.total_sales, self.transactions)


@dataclass
class ShiftHistoryReport:
    window: str
    cutoff: datetime
    rows: list[ShiftHistoryRow] = field(default_factory=list)
    totals: ShiftHistoryTotals = field(default_factory=ShiftHistoryTotals)


def _counts_by_shift(model, shift_ids, aggregate) -> dict:
    rows = (
        model.objects
        .filter(booking__shift_id__in=shift_ids, booking__status__in=Booking.COUNTED_STATUSES)
        .values("booking__shift_id")
        .annotate(value=aggregate)
        .order_by()
    )
    return {row["booking__shift_id"]: row["value"] or 0 for row in rows}


def shift_history(organization, window: str = "7days", *, clock: Clock | None = None) -> ShiftHistoryReport:
    """Shifts of any status started since the window cutoff, newest first.

    Sales figures on each row are the frozen close-time totals, so active
    shifts show zero until they are closed. Totals cover closed shifts
    only.
    """
    clock = get_clock(clock)
    now = clock.now()
    cutoff = window_cutoff(window, now)

    shifts = list(
        Shift.objects
        .filter(organization=organization, started_at__gte=cutoff)
        .order_by("-started_at", "id")
    )
    shift_ids = [shift.pk for shift in shifts]
    profiles = fetch_cashier_profiles(shift.cashier_id for shift in shifts)
    tickets = _counts_by_shift(BookedSeat, shift_ids, Count("id")) if shift_ids else {}
    concessions = _counts_by_shift(BookingConcession, shift_ids, Sum("quantity")) if shift_ids else {}

    report = ShiftHistoryReport(window=window, cutoff=cutoff)
    totals = report.totals
    for shift in shifts:
        row = ShiftHistoryRow(
            shift=shift,
            cashier=resolve_profile(profiles, shift.cashier_id),
            tickets_sold=tickets.get(shift.pk, 0),
            concessions_sold=concessions.get(shift.pk, 0),
            avg_transaction_value=average_transaction(shift.total_sales, shift.total_transactions),
            duration=shift.duration_at(now),
        )
        report.rows.append(row)

        if shift.status != Shift.Status.CLOSED:
            continue
        totals.shifts += 1
        totals.cash_sales += shift.total_cash_sales
        totals.card_sales += shift.total_card_sales
        totals.transactions += shift.total_transactions
        totals.variance += shift.cash_difference or ZERO
        totals.tickets_sold += row.tickets_sold
        totals.concessions_sold += row.concessions_sold

    return report
