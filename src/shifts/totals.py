"""Transaction aggregation for shifts.

Only bookings in ``Booking.COUNTED_STATUSES`` contribute; every other
status (pending, cancelled, refunded) is ignored by every sum here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from django.conf import settings
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from bookings.models import Booking

from .exceptions import ValidationError
from .models import Shift

logger = logging.getLogger("shiftledger")

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class LiveTotals:
    cash_sales: Decimal
    card_sales: Decimal
    transaction_count: int
    total_amount: Decimal
    split_mode: str


@dataclass(frozen=True)
class BookingTotals:
    total_amount: Decimal
    transaction_count: int


def _money_sum(expression="total_amount", **extra):
    return Coalesce(
        Sum(expression, **extra),
        Value(ZERO),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def resolve_split_mode(split_mode: str | None = None) -> str:
    mode = split_mode or getattr(settings, "SHIFT_PAYMENT_SPLIT_MODE", Shift.SplitMode.ESTIMATED)
    if mode not in Shift.SplitMode.values:
        raise ValidationError(f"Mode de repartition inconnu : {mode}.")
    return mode


def estimated_cash_ratio() -> Decimal:
    return Decimal(str(getattr(settings, "SHIFT_ESTIMATED_CASH_RATIO", "0.70")))


def split_estimated(total: Decimal) -> tuple[Decimal, Decimal]:
    """Split *total* into (cash, card) with the configured cash ratio.

    Card is derived by subtraction so that cash + card == total exactly.
    """
    cash = (total * estimated_cash_ratio()).quantize(CENT, rounding=ROUND_HALF_UP)
    return cash, total - cash


def live_totals(shift_id, split_mode: str | None = None) -> LiveTotals:
    """Totals of the counted bookings currently attributed to a shift."""
    mode = resolve_split_mode(split_mode)
    qs = Booking.objects.counted().filter(shift_id=shift_id)

    if mode == Shift.SplitMode.RECORDED:
        agg = qs.aggregate(
            total=_money_sum(),
            count=Count("id"),
            cash=_money_sum(filter=Q(payment_method=Booking.PaymentMethod.CASH)),
            card=_money_sum(filter=Q(payment_method=Booking.PaymentMethod.CARD)),
        )
        cash, card = agg["cash"], agg["card"]
        unassigned = agg["total"] - cash - card
        if unassigned:
            logger.warning(
                "Shift %s: %s of sales have no payment method and are left out of cash/card totals",
                shift_id, unassigned,
            )
    else:
        agg = qs.aggregate(total=_money_sum(), count=Count("id"))
        cash, card = split_estimated(agg["total"])

    return LiveTotals(
        cash_sales=cash,
        card_sales=card,
        transaction_count=agg["count"],
        total_amount=agg["total"],
        split_mode=mode,
    )


def booking_totals_by_shift(shift_ids: Iterable) -> dict:
    """Return ``{shift_id: BookingTotals}`` for many shifts in one query.

    Shifts without counted bookings are absent from the result.
    """
    ids = list(shift_ids)
    if not ids:
        return {}
    rows = (
        Booking.objects.counted()
        .filter(shift_id__in=ids)
        .values("shift_id")
        .annotate(total=_money_sum(), count=Count("id"))
        .order_by()
    )
    return {
        row["shift_id"]: BookingTotals(total_amount=row["total"], transaction_count=row["count"])
        for row in rows
    }


def empty_booking_totals() -> BookingTotals:
    return BookingTotals(total_amount=ZERO, transaction_count=0)
