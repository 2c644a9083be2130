"""Cash reconciliation report over closed shifts.

Variance figures come from the values frozen at close; actual sales are
recomputed from counted bookings so that late status changes (a refund
after close) show up next to the frozen numbers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from accounts.services import CashierProfile, fetch_cashier_profiles, resolve_profile
from core.clock import Clock, get_clock

from .exceptions import ValidationError
from .models import Shift, VarianceStatus, balanced_threshold, classify_variance
from .totals import ZERO, booking_totals_by_shift, empty_booking_totals

VARIANCE_FILTERS = ("all", "balanced", "over", "short")
SORT_FIELDS = ("date", "cashier", "variance", "sales")
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``[start, end]`` interval of aware datetimes."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError("La date de debut doit preceder la date de fin.")


@dataclass
class ReconciliationRow:
    shift: Shift
    cashier: CashierProfile
    actual_sales: Decimal
    actual_transactions: int
    variance: str

    @property
    def cash_difference(self) -> Decimal:
        return self.shift.cash_difference or ZERO


@dataclass
class ReconciliationSummary:
    total_shifts: int = 0
    balanced_count: int = 0
    over_count: int = 0
    short_count: int = 0
    total_variance: Decimal = ZERO
    over_amount: Decimal = ZERO
    short_amount: Decimal = ZERO


@dataclass
class ReconciliationReport:
    date_range: DateRange
    rows: list[ReconciliationRow] = field(default_factory=list)
    summary: ReconciliationSummary = field(default_factory=ReconciliationSummary)


def resolve_date_range(preset: str | int, clock: Clock | None = None) -> DateRange:
    """Turn ``today``, ``yesterday`` or a number of days into a DateRange.

    ``"7"`` means from local midnight six days ago up to the end of today,
    i.e. seven calendar days including today.
    """
    clock = get_clock(clock)
    today_start = clock.start_of_today()
    today_end = clock.end_of_today()

    if preset == "today":
        return DateRange(today_start, today_end)
    if preset == "yesterday":
        start = today_start - timedelta(days=1)
        return DateRange(start, today_start - timedelta(microseconds=1))
    try:
        days = int(preset)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Periode inconnue : {preset}.") from exc
    if days < 1:
        raise ValidationError("La periode doit couvrir au moins un jour.")
    return DateRange(today_start - timedelta(days=days - 1), today_end)


def summarize(rows: list[ReconciliationRow]) -> ReconciliationSummary:
    summary = ReconciliationSummary(total_shifts=len(rows))
    for row in rows:
        difference = row.cash_difference
        summary.total_variance += difference
        if row.variance == VarianceStatus.BALANCED:
            summary.balanced_count += 1
        elif row.variance == VarianceStatus.OVER:
            summary.over_count += 1
            summary.over_amount += difference
        else:
            summary.short_count += 1
            summary.short_amount += difference
    return summary


_SORT_KEYS = {
    "date": lambda row: row.shift.started_at,
    "cashier": lambda row: row.cashier.display_name.casefold(),
    "variance": lambda row: row.cash_difference,
    "sales": lambda row: row.actual_sales,
}


def sort_rows(rows: list[ReconciliationRow], sort_field: str, sort_dir: str) -> list[ReconciliationRow]:
    """Sort rows; equal keys keep shift id ascending in both directions."""
    ordered = sorted(rows, key=lambda row: str(row.shift.pk))
    # reverse=True keeps equal elements in their original order.
    return sorted(ordered, key=_SORT_KEYS[sort_field], reverse=sort_dir == "desc")


def list_reconciliation(
    organization,
    date_range: DateRange,
    variance_filter: str = "all",
    sort_field: str = "date",
    sort_dir: str = "desc",
    *,
    threshold: Decimal | None = None,
) -> ReconciliationReport:
    """Closed shifts started within *date_range*, classified by variance.

    The summary is computed over the rows left after *variance_filter*.
    """
    if variance_filter not in VARIANCE_FILTERS:
        raise ValidationError(f"Filtre d'ecart inconnu : {variance_filter}.")
    if sort_field not in SORT_FIELDS:
        raise ValidationError(f"Tri inconnu : {sort_field}.")
    if sort_dir not in SORT_DIRECTIONS:
        raise ValidationError(f"Sens de tri inconnu : {sort_dir}.")
    if threshold is None:
        threshold = balanced_threshold()

    shifts = list(
        Shift.objects.filter(
            organization=organization,
            status=Shift.Status.CLOSED,
            started_at__gte=date_range.start,
            started_at__lte=date_range.end,
        )
    )
    profiles = fetch_cashier_profiles(shift.cashier_id for shift in shifts)
    totals = booking_totals_by_shift(shift.pk for shift in shifts)

    rows = []
    for shift in shifts:
        booking_totals = totals.get(shift.pk) or empty_booking_totals()
        variance = classify_variance(shift.cash_difference, threshold)
        if variance_filter != "all" and variance != variance_filter:
            continue
        rows.append(
            ReconciliationRow(
                shift=shift,
                cashier=resolve_profile(profiles, shift.cashier_id),
                actual_sales=booking_totals.total_amount,
                actual_transactions=booking_totals.transaction_count,
                variance=variance,
            )
        )

    rows = sort_rows(rows, sort_field, sort_dir)
    return ReconciliationReport(date_range=date_range, rows=rows, summary=summarize(rows))
