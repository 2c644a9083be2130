import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        ("shifts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("customer_email", models.EmailField(blank=True, default="", max_length=254, verbose_name="e-mail client")),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="montant total",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "En attente"),
                            ("confirmed", "Confirmee"),
                            ("paid", "Payee"),
                            ("completed", "Terminee"),
                            ("activated", "Activee"),
                            ("cancelled", "Annulee"),
                            ("refunded", "Remboursee"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="statut",
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True,
                        choices=[("cash", "Especes"), ("card", "Carte")],
                        max_length=10,
                        null=True,
                        verbose_name="methode de paiement",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="organizations.organization",
                        verbose_name="organisation",
                    ),
                ),
                (
                    "shift",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to="shifts.shift",
                        verbose_name="session de caisse",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["shift", "status"], name="booking_shift_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookedSeat",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("seat_label", models.CharField(blank=True, default="", max_length=20, verbose_name="place")),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="seats",
                        to="bookings.booking",
                        verbose_name="reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Place reservee",
                "verbose_name_plural": "Places reservees",
            },
        ),
        migrations.CreateModel(
            name="BookingConcession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=150, verbose_name="article")),
                ("quantity", models.PositiveIntegerField(default=1, verbose_name="quantite")),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="prix unitaire",
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="concessions",
                        to="bookings.booking",
                        verbose_name="reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Confiserie",
                "verbose_name_plural": "Confiseries",
            },
        ),
    ]
