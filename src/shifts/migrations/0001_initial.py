import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Shift",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "En cours"), ("closed", "Fermee")],
                        db_index=True,
                        default="active",
                        max_length=10,
                        verbose_name="statut",
                    ),
                ),
                ("started_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name="debut")),
                ("ended_at", models.DateTimeField(blank=True, null=True, verbose_name="fin")),
                (
                    "opening_cash",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Montant en caisse au debut de la session.",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="fond de caisse initial",
                    ),
                ),
                (
                    "closing_cash",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Montant reel compte en caisse a la fermeture.",
                        max_digits=14,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="especes comptees",
                    ),
                ),
                (
                    "expected_cash",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Fond initial + ventes especes, fige a la fermeture.",
                        max_digits=14,
                        null=True,
                        verbose_name="especes attendues",
                    ),
                ),
                (
                    "cash_difference",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Especes comptees - especes attendues (positif = excedent).",
                        max_digits=14,
                        null=True,
                        verbose_name="ecart",
                    ),
                ),
                ("total_cash_sales", models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="total ventes especes")),
                ("total_card_sales", models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="total ventes carte")),
                ("total_transactions", models.PositiveIntegerField(default=0, verbose_name="nombre de transactions")),
                (
                    "payment_split_mode",
                    models.CharField(
                        blank=True,
                        choices=[("estimated", "Estimation 70/30"), ("recorded", "Methode enregistree")],
                        default="",
                        max_length=10,
                        verbose_name="repartition especes/carte",
                    ),
                ),
                ("notes", models.TextField(blank=True, default="", verbose_name="notes")),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to="organizations.organization",
                        verbose_name="organisation",
                    ),
                ),
                (
                    "cashier",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="caissier",
                    ),
                ),
            ],
            options={
                "verbose_name": "Session de caisse",
                "verbose_name_plural": "Sessions de caisse",
                "ordering": ["-started_at"],
                "indexes": [
                    models.Index(fields=["organization", "status", "started_at"], name="shift_org_status_start_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "active")),
                        fields=("organization", "cashier"),
                        name="uniq_active_shift_per_cashier",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("opening_cash__gte", 0)),
                        name="shift_opening_cash_gte_0",
                    ),
                ],
            },
        ),
    ]
