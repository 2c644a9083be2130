"""Models for the shifts app."""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import TimeStampedModel

from .exceptions import InvalidStateError


class VarianceStatus(models.TextChoices):
    BALANCED = "balanced", "Equilibree"
    OVER = "over", "Excedent"
    SHORT = "short", "Manquant"


def balanced_threshold() -> Decimal:
    return Decimal(str(getattr(settings, "RECONCILIATION_BALANCED_THRESHOLD", "1")))


def classify_variance(cash_difference, threshold: Decimal | None = None) -> str:
    """Classify a cash difference as balanced, over or short.

    Anything strictly under one currency unit either way is balanced, so
    rounding noise at the register is not reported as a shortage.
    """
    if threshold is None:
        threshold = balanced_threshold()
    difference = cash_difference if cash_difference is not None else Decimal("0")
    if abs(difference) < threshold:
        return VarianceStatus.BALANCED
    if difference > 0:
        return VarianceStatus.OVER
    return VarianceStatus.SHORT


# ---------------------------------------------------------------------------
# Shift
# ---------------------------------------------------------------------------

class Shift(TimeStampedModel):
    """A cashier's work session at the register.

    Opened with a counted float, closed once with the counted cash. At
    close the ledger freezes the sales snapshot and the expected cash /
    difference; a closed shift never changes again.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "En cours"
        CLOSED = "closed", "Fermee"

    class SplitMode(models.TextChoices):
        ESTIMATED = "estimated", "Estimation 70/30"
        RECORDED = "recorded", "Methode enregistree"

    # Written only by shifts.services.close_shift (or at creation).
    FROZEN_FIELDS = (
        "status",
        "started_at",
        "ended_at",
        "opening_cash",
        "closing_cash",
        "expected_cash",
        "cash_difference",
        "total_cash_sales",
        "total_card_sales",
        "total_transactions",
        "payment_split_mode",
        "notes",
    )

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        related_name="shifts",
        verbose_name="organisation",
    )
    cashier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="shifts",
        verbose_name="caissier",
    )
    status = models.CharField(
        "statut",
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    started_at = models.DateTimeField("debut", default=timezone.now, db_index=True)
    ended_at = models.DateTimeField("fin", null=True, blank=True)

    # Money tracking
    opening_cash = models.DecimalField(
        "fond de caisse initial",
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        help_text="Montant en caisse au debut de la session.",
    )
    closing_cash = models.DecimalField(
        "especes comptees",
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Montant reel compte en caisse a la fermeture.",
    )
    expected_cash = models.DecimalField(
        "especes attendues",
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Fond initial + ventes especes, fige a la fermeture.",
    )
    cash_difference = models.DecimalField(
        "ecart",
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Especes comptees - especes attendues (positif = excedent).",
    )

    # Sales snapshot frozen at close
    total_cash_sales = models.DecimalField(
        "total ventes especes",
        max_digits=14,
        decimal_places=2,
        default=0,
    )
    total_card_sales = models.DecimalField(
        "total ventes carte",
        max_digits=14,
        decimal_places=2,
        default=0,
    )
    total_transactions = models.PositiveIntegerField("nombre de transactions", default=0)
    payment_split_mode = models.CharField(
        "repartition especes/carte",
        max_length=10,
        choices=SplitMode.choices,
        blank=True,
        default="",
    )

    notes = models.TextField("notes", blank=True, default="")

    class Meta:
        ordering = ["-started_at"]
        verbose_name = "Session de caisse"
        verbose_name_plural = "Sessions de caisse"
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "cashier"],
                condition=Q(status="active"),
                name="uniq_active_shift_per_cashier",
            ),
            models.CheckConstraint(
                condition=Q(opening_cash__gte=0),
                name="shift_opening_cash_gte_0",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "status", "started_at"], name="shift_org_status_start_idx"),
        ]

    def __str__(self):
        return (
            f"Session {self.cashier} @ {self.organization} "
            f"({self.get_status_display()}) - {self.started_at:%d/%m/%Y %H:%M}"
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            self._reject_frozen_changes()
        super().save(*args, **kwargs)

    def _reject_frozen_changes(self):
        # Check against the stored row: a stale instance may still say "active".
        stored = (
            type(self).objects
            .filter(pk=self.pk)
            .values(*self.FROZEN_FIELDS)
            .first()
        )
        if stored is None or stored["status"] != self.Status.CLOSED:
            return
        changed = [
            name for name in self.FROZEN_FIELDS
            if self._meta.get_field(name).to_python(getattr(self, name)) != stored[name]
        ]
        if changed:
            raise InvalidStateError(
                "Une session fermee ne peut plus etre modifiee "
                f"(champs: {', '.join(changed)})."
            )

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    @property
    def total_sales(self) -> Decimal:
        return (self.total_cash_sales or Decimal("0")) + (self.total_card_sales or Decimal("0"))

    @property
    def variance_status(self) -> str | None:
        if self.status != self.Status.CLOSED:
            return None
        return classify_variance(self.cash_difference)

    def duration_at(self, now):
        """Elapsed time at *now* (or until ``ended_at`` once closed)."""
        end = self.ended_at or now
        return end - self.started_at

    @property
    def duration(self):
        return self.duration_at(timezone.now())
