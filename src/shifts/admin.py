"""Admin configuration for the shifts app."""
from django.contrib import admin

from .models import Shift


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = (
        "cashier",
        "organization",
        "status",
        "started_at",
        "ended_at",
        "opening_cash",
        "expected_cash",
        "closing_cash",
        "cash_difference",
    )
    list_filter = ("status", "organization", "started_at")
    search_fields = (
        "cashier__first_name",
        "cashier__last_name",
        "cashier__email",
        "organization__name",
    )
    date_hierarchy = "started_at"
    list_select_related = ("cashier", "organization")
    fieldsets = (
        (None, {
            "fields": ("id", "organization", "cashier", "status", "started_at", "ended_at"),
        }),
        ("Caisse", {
            "fields": ("opening_cash", "closing_cash", "expected_cash", "cash_difference"),
        }),
        ("Ventes", {
            "fields": (
                "total_cash_sales",
                "total_card_sales",
                "total_transactions",
                "payment_split_mode",
            ),
        }),
        ("Notes", {"fields": ("notes",)}),
        ("Dates", {"fields": ("created_at", "updated_at")}),
    )

    def get_readonly_fields(self, request, obj=None):
        # Closing goes through the ledger; the admin never edits amounts.
        return ("id", "created_at", "updated_at", *Shift.FROZEN_FIELDS, "organization", "cashier")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
