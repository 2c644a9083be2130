"""Serializers for the shift ledger API v1."""
from decimal import Decimal

from rest_framework import serializers

from shifts.history import WINDOWS
from shifts.models import Shift
from shifts.reconciliation import SORT_DIRECTIONS, SORT_FIELDS, VARIANCE_FILTERS


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------

class ShiftSerializer(serializers.ModelSerializer):
    """Read serializer for Shift with derived fields."""

    cashier_name = serializers.SerializerMethodField()
    variance_status = serializers.CharField(read_only=True, allow_null=True)
    duration_seconds = serializers.SerializerMethodField()

    class Meta:
        model = Shift
        fields = [
            'id', 'organization', 'cashier', 'cashier_name', 'status',
            'started_at', 'ended_at', 'duration_seconds',
            'opening_cash', 'closing_cash', 'expected_cash', 'cash_difference',
            'variance_status', 'total_cash_sales', 'total_card_sales',
            'total_transactions', 'payment_split_mode', 'notes',
        ]
        read_only_fields = [
            'id', 'organization', 'cashier', 'status', 'started_at', 'ended_at',
            'expected_cash', 'cash_difference', 'total_cash_sales',
            'total_card_sales', 'total_transactions', 'payment_split_mode',
        ]

    def get_cashier_name(self, obj):
        return obj.cashier.get_full_name() or obj.cashier.email

    def get_duration_seconds(self, obj):
        return int(obj.duration.total_seconds())


class ShiftOpenSerializer(serializers.Serializer):
    """Serializer for opening a new shift."""

    organization = serializers.UUIDField()
    opening_cash = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0.00'),
    )
    access_code = serializers.CharField(required=False, allow_blank=True, max_length=6)


class ShiftCloseSerializer(serializers.Serializer):
    """Serializer for closing an active shift."""

    closing_cash = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0.00'),
    )
    notes = serializers.CharField(required=False, default='', allow_blank=True)


class LiveTotalsSerializer(serializers.Serializer):
    cash_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    card_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_count = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    split_mode = serializers.CharField()


# ---------------------------------------------------------------------------
# Reporting query parameters
# ---------------------------------------------------------------------------

class OrganizationQuerySerializer(serializers.Serializer):
    organization = serializers.UUIDField()


class DateRangeQuerySerializer(OrganizationQuerySerializer):
    """``period`` preset (today, yesterday, N days) or explicit dates."""

    period = serializers.CharField(required=False, default='7')
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        if bool(attrs.get('date_from')) != bool(attrs.get('date_to')):
            raise serializers.ValidationError(
                'date_from et date_to doivent etre fournis ensemble.'
            )
        return attrs


class ReconciliationQuerySerializer(DateRangeQuerySerializer):
    variance = serializers.ChoiceField(choices=VARIANCE_FILTERS, required=False, default='all')
    sort = serializers.ChoiceField(choices=SORT_FIELDS, required=False, default='date')
    direction = serializers.ChoiceField(choices=SORT_DIRECTIONS, required=False, default='desc')
    export = serializers.ChoiceField(choices=('csv',), required=False)


class ShiftHistoryQuerySerializer(OrganizationQuerySerializer):
    window = serializers.ChoiceField(choices=WINDOWS, required=False, default='7days')


class AccessCodeSerializer(serializers.Serializer):
    code = serializers.CharField(required=False, allow_blank=True, max_length=6)


# ---------------------------------------------------------------------------
# Report rows
# ---------------------------------------------------------------------------

class CashierProfileSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    display_name = serializers.CharField()
    email = serializers.CharField()


class ReconciliationRowSerializer(serializers.Serializer):
    shift_id = serializers.UUIDField(source='shift.id')
    cashier = CashierProfileSerializer()
    started_at = serializers.DateTimeField(source='shift.started_at')
    ended_at = serializers.DateTimeField(source='shift.ended_at')
    opening_cash = serializers.DecimalField(source='shift.opening_cash', max_digits=14, decimal_places=2)
    closing_cash = serializers.DecimalField(source='shift.closing_cash', max_digits=14, decimal_places=2)
    expected_cash = serializers.DecimalField(source='shift.expected_cash', max_digits=14, decimal_places=2)
    cash_difference = serializers.DecimalField(source='shift.cash_difference', max_digits=14, decimal_places=2)
    actual_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    actual_transactions = serializers.IntegerField()
    variance = serializers.CharField()
    notes = serializers.CharField(source='shift.notes')


class ReconciliationSummarySerializer(serializers.Serializer):
    total_shifts = serializers.IntegerField()
    balanced_count = serializers.IntegerField()
    over_count = serializers.IntegerField()
    short_count = serializers.IntegerField()
    total_variance = serializers.DecimalField(max_digits=16, decimal_places=2)
    over_amount = serializers.DecimalField(max_digits=16, decimal_places=2)
    short_amount = serializers.DecimalField(max_digits=16, decimal_places=2)


class ShiftHistoryRowSerializer(serializers.Serializer):
    shift_id = serializers.UUIDField(source='shift.id')
    cashier = CashierProfileSerializer()
    status = serializers.CharField(source='shift.status')
    started_at = serializers.DateTimeField(source='shift.started_at')
    ended_at = serializers.DateTimeField(source='shift.ended_at')
    duration_seconds = serializers.SerializerMethodField()
    total_cash_sales = serializers.DecimalField(source='shift.total_cash_sales', max_digits=14, decimal_places=2)
    total_card_sales = serializers.DecimalField(source='shift.total_card_sales', max_digits=14, decimal_places=2)
    total_transactions = serializers.IntegerField(source='shift.total_transactions')
    cash_difference = serializers.DecimalField(source='shift.cash_difference', max_digits=14, decimal_places=2)
    tickets_sold = serializers.IntegerField()
    concessions_sold = serializers.IntegerField()
    avg_transaction_value = serializers.DecimalField(max_digits=14, decimal_places=2)

    def get_duration_seconds(self, obj):
        return int(obj.duration.total_seconds())


class ShiftHistoryTotalsSerializer(serializers.Serializer):
    shifts = serializers.IntegerField()
    cash_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    card_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    total_sales = serializers.DecimalField(max_digits=16, decimal_places=2)
    transactions = serializers.IntegerField()
    variance = serializers.DecimalField(max_digits=16, decimal_places=2)
    tickets_sold = serializers.IntegerField()
    concessions_sold = serializers.IntegerField()
    avg_transaction_value = serializers.DecimalField(max_digits=14, decimal_places=2)


class StaffRevenueSerializer(serializers.Serializer):
    cashier = CashierProfileSerializer()
    shifts = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=16, decimal_places=2)
    transactions = serializers.IntegerField()
    avg_per_shift = serializers.DecimalField(max_digits=16, decimal_places=2)


class StaffShiftEntrySerializer(serializers.Serializer):
    shift_id = serializers.UUIDField(source='shift.id')
    status = serializers.CharField(source='shift.status')
    started_at = serializers.DateTimeField(source='shift.started_at')
    ended_at = serializers.DateTimeField(source='shift.ended_at')
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    transactions = serializers.IntegerField()


class StaffShiftHistorySerializer(serializers.Serializer):
    cashier = CashierProfileSerializer()
    shift_count = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=16, decimal_places=2)
    avg_per_shift = serializers.DecimalField(max_digits=16, decimal_places=2)
    entries = StaffShiftEntrySerializer(many=True)
