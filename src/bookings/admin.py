from django.contrib import admin

from .models import BookedSeat, Booking, BookingConcession


class BookedSeatInline(admin.TabularInline):
    model = BookedSeat
    extra = 0


class BookingConcessionInline(admin.TabularInline):
    model = BookingConcession
    extra = 0


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "organization", "shift", "total_amount", "status", "payment_method", "created_at")
    list_filter = ("status", "payment_method", "organization")
    search_fields = ("id", "customer_email")
    date_hierarchy = "created_at"
    list_select_related = ("organization", "shift")
    raw_id_fields = ("shift",)
    inlines = [BookedSeatInline, BookingConcessionInline]
