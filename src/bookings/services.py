"""Service layer for recording bookings against the cashier's shift."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable

from django.db import transaction

from shifts.services import get_active_shift

from .models import BookedSeat, Booking, BookingConcession

logger = logging.getLogger("shiftledger")


def record_booking(
    organization,
    cashier,
    total_amount,
    *,
    status: str = Booking.Status.PAID,
    payment_method: str | None = None,
    seats: Iterable[str] = (),
    concessions: Iterable[tuple[str, int, Decimal]] = (),
    customer_email: str = "",
) -> Booking:
    """Record a booking and attribute it to *cashier*'s active shift.

    Bookings taken without an active shift are stored with no shift
    reference and are never attributed later.

    Parameters
    ----------
    concessions : iterable of ``(name, quantity, unit_price)``
    """
    try:
        amount = Decimal(str(total_amount))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError("Montant de reservation invalide.") from exc
    if amount < 0:
        raise ValueError("Le montant d'une reservation ne peut pas etre negatif.")
    if status not in Booking.Status.values:
        raise ValueError(f"Statut de reservation inconnu: {status}.")
    if payment_method and payment_method not in Booking.PaymentMethod.values:
        raise ValueError(f"Methode de paiement inconnue: {payment_method}.")

    shift = get_active_shift(organization, cashier) if cashier is not None else None

    with transaction.atomic():
        booking = Booking.objects.create(
            organization=organization,
            shift=shift,
            total_amount=amount,
            status=status,
            payment_method=payment_method or None,
            customer_email=customer_email,
        )
        BookedSeat.objects.bulk_create(
            [BookedSeat(booking=booking, seat_label=label) for label in seats]
        )
        BookingConcession.objects.bulk_create(
            [
                BookingConcession(
                    booking=booking,
                    name=name,
                    quantity=quantity,
                    unit_price=Decimal(str(unit_price)),
                )
                for name, quantity, unit_price in concessions
            ]
        )

    logger.info(
        "Booking %s recorded (%s, shift %s)",
        booking.pk, amount, shift.pk if shift else None,
    )
    return booking
