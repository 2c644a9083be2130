"""Business logic / service layer for the shifts app.

Opening and closing shifts go through these functions only; views stay
thin and the state machine can be tested without the HTTP layer.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from core.clock import Clock, get_clock
from organizations.services import create_audit_log

from .exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .models import Shift
from .totals import live_totals

logger = logging.getLogger("shiftledger")


def _coerce_amount(value, field: str) -> Decimal:
    """Return *value* as a non-negative Decimal with at most two decimals."""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"Montant invalide pour {field}.") from exc
    if not amount.is_finite():
        raise ValidationError(f"Montant invalide pour {field}.")
    if amount < 0:
        raise ValidationError(f"Le montant {field} ne peut pas etre negatif.")
    if amount.as_tuple().exponent < -2:
        raise ValidationError(f"Le montant {field} doit avoir au plus 2 decimales.")
    return amount


ACTIVE_SHIFT_CONSTRAINT = "uniq_active_shift_per_cashier"


def _is_active_shift_conflict(exc: IntegrityError) -> bool:
    """True when *exc* comes from the one-active-shift-per-cashier index.

    PostgreSQL names the constraint; SQLite only lists its columns.
    """
    message = str(exc)
    if ACTIVE_SHIFT_CONSTRAINT in message:
        return True
    table = Shift._meta.db_table
    columns = ", ".join(
        f"{table}.{Shift._meta.get_field(name).column}" for name in ("organization", "cashier")
    )
    return f"UNIQUE constraint failed: {columns}" in message


# ==================================================================
# open_shift
# ==================================================================

def open_shift(organization, cashier, opening_cash, *, clock: Clock | None = None) -> Shift:
    """Open a new shift for *cashier* in *organization*.

    Parameters
    ----------
    organization : organizations.models.Organization
    cashier : accounts.models.User
    opening_cash : Decimal | str | int
        Cash counted in the register at the start (the float).

    Returns
    -------
    Shift
        The newly created (active) shift.

    Raises
    ------
    ValidationError
        If *opening_cash* is negative or not a number.
    ConflictError
        If the cashier already has an active shift in this organization.
    """
    amount = _coerce_amount(opening_cash, "opening_cash")
    clock = get_clock(clock)

    # The partial unique index is the only guard; no exists() pre-check.
    try:
        with transaction.atomic():
            shift = Shift.objects.create(
                organization=organization,
                cashier=cashier,
                status=Shift.Status.ACTIVE,
                started_at=clock.now(),
                opening_cash=amount,
            )
    except IntegrityError as exc:
        if _is_active_shift_conflict(exc):
            raise ConflictError() from exc
        raise

    create_audit_log(
        actor=cashier,
        organization=organization,
        action="OPEN_SHIFT",
        entity_type="Shift",
        entity_id=str(shift.pk),
        after={
            "opening_cash": str(amount),
            "cashier": str(cashier.pk),
            "started_at": shift.started_at.isoformat(),
        },
    )

    logger.info(
        "Shift opened: %s by %s in %s (opening cash: %s)",
        shift.pk, cashier, organization, amount,
    )
    return shift


def get_active_shift(organization, cashier) -> Shift | None:
    """Return the cashier's active shift in *organization*, if any."""
    return (
        Shift.objects
        .filter(organization=organization, cashier=cashier, status=Shift.Status.ACTIVE)
        .select_related("organization", "cashier")
        .first()
    )


# ==================================================================
# close_shift
# ==================================================================

def close_shift(
    shift_id,
    closing_cash,
    notes: str | None = None,
    *,
    clock: Clock | None = None,
    split_mode: str | None = None,
    actor=None,
) -> Shift:
    """Close an active shift and freeze its totals.

    ``expected_cash = opening_cash + cash sales`` and
    ``cash_difference = closing_cash - expected_cash`` are computed once
    here and never recomputed afterwards.

    Parameters
    ----------
    shift_id : UUID | Shift
        The shift to close (a ``Shift`` instance is accepted too).
    closing_cash : Decimal | str | int
        The actual cash counted in the register.
    notes : str, optional
    actor : accounts.models.User, optional
        Who closed the shift (defaults to the cashier); recorded in the audit log.

    Raises
    ------
    ValidationError
        If *closing_cash* is negative or not a number.
    NotFoundError
        If no such shift exists.
    InvalidStateError
        If the shift is already closed (including a concurrent close).
    """
    if isinstance(shift_id, Shift):
        shift_id = shift_id.pk
    amount = _coerce_amount(closing_cash, "closing_cash")
    clock = get_clock(clock)

    with transaction.atomic():
        try:
            shift = Shift.objects.select_for_update().get(pk=shift_id)
        except (Shift.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise NotFoundError() from exc

        if shift.status != Shift.Status.ACTIVE:
            raise InvalidStateError()

        totals = live_totals(shift.pk, split_mode=split_mode)
        expected = shift.opening_cash + totals.cash_sales
        difference = amount - expected
        ended_at = clock.now()

        updated = Shift.objects.filter(pk=shift.pk, status=Shift.Status.ACTIVE).update(
            status=Shift.Status.CLOSED,
            ended_at=ended_at,
            closing_cash=amount,
            expected_cash=expected,
            cash_difference=difference,
            total_cash_sales=totals.cash_sales,
            total_card_sales=totals.card_sales,
            total_transactions=totals.transaction_count,
            payment_split_mode=totals.split_mode,
            notes=(notes or "").strip(),
            updated_at=ended_at,
        )
        if updated != 1:
            raise InvalidStateError()

        shift.refresh_from_db()

    create_audit_log(
        actor=actor or shift.cashier,
        organization=shift.organization,
        action="CLOSE_SHIFT",
        entity_type="Shift",
        entity_id=str(shift.pk),
        before={"status": Shift.Status.ACTIVE},
        after={
            "closing_cash": str(shift.closing_cash),
            "expected_cash": str(shift.expected_cash),
            "cash_difference": str(shift.cash_difference),
            "total_cash_sales": str(shift.total_cash_sales),
            "total_card_sales": str(shift.total_card_sales),
            "total_transactions": shift.total_transactions,
            "payment_split_mode": shift.payment_split_mode,
        },
    )

    logger.info(
        "Shift closed: %s (difference: %s %s)",
        shift.pk, shift.cash_difference, shift.organization.currency,
    )
    return shift
