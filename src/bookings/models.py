"""Models for the bookings app (the transaction source read by shifts)."""
import uuid

from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel


# ---------------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------------

class BookingQuerySet(models.QuerySet):
    def counted(self):
        """Bookings whose amount counts toward shift sales."""
        return self.filter(status__in=Booking.COUNTED_STATUSES)


class Booking(TimeStampedModel):
    """A sale recorded at the box office or online.

    Only bookings taken while a cashier had an active shift carry a
    ``shift`` reference.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "En attente"
        CONFIRMED = "confirmed", "Confirmee"
        PAID = "paid", "Payee"
        COMPLETED = "completed", "Terminee"
        ACTIVATED = "activated", "Activee"
        CANCELLED = "cancelled", "Annulee"
        REFUNDED = "refunded", "Remboursee"

    class PaymentMethod(models.TextChoices):
        CASH = "cash", "Especes"
        CARD = "card", "Carte"

    COUNTED_STATUSES = (
        Status.CONFIRMED,
        Status.PAID,
        Status.COMPLETED,
        Status.ACTIVATED,
    )

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        related_name="bookings",
        verbose_name="organisation",
    )
    shift = models.ForeignKey(
        "shifts.Shift",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
        verbose_name="session de caisse",
    )
    customer_email = models.EmailField("e-mail client", blank=True, default="")
    total_amount = models.DecimalField(
        "montant total",
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    status = models.CharField(
        "statut",
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(
        "methode de paiement",
        max_length=10,
        choices=PaymentMethod.choices,
        null=True,
        blank=True,
    )

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Reservation"
        verbose_name_plural = "Reservations"
        indexes = [
            models.Index(fields=["shift", "status"], name="booking_shift_status_idx"),
        ]

    def __str__(self):
        return f"Reservation {self.pk} ({self.get_status_display()}) {self.total_amount}"

    @property
    def is_counted(self):
        return self.status in self.COUNTED_STATUSES


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------

class BookedSeat(models.Model):
    """One ticket (seat) sold as part of a booking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="seats",
        verbose_name="reservation",
    )
    seat_label = models.CharField("place", max_length=20, blank=True, default="")

    class Meta:
        verbose_name = "Place reservee"
        verbose_name_plural = "Places reservees"

    def __str__(self):
        return self.seat_label or str(self.pk)


class BookingConcession(models.Model):
    """Concession line item (snacks, drinks) attached to a booking."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="concessions",
        verbose_name="reservation",
    )
    name = models.CharField("article", max_length=150)
    quantity = models.PositiveIntegerField("quantite", default=1)
    unit_price = models.DecimalField(
        "prix unitaire",
        max_digits=14,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
    )

    class Meta:
        verbose_name = "Confiserie"
        verbose_name_plural = "Confiseries"

    def __str__(self):
        return f"{self.quantity} x {self.name}"
