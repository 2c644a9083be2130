"""ViewSets and API views for the shift ledger API v1."""
import logging
from datetime import datetime, time

from django.contrib.auth import get_user_model
from django.utils import timezone

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.export import rows_to_csv_response
from organizations.models import Organization
from organizations.services import (
    AccessCodeError,
    check_access_code,
    clear_access_code,
    is_access_code_current,
    is_member,
    set_access_code,
    user_organization_ids,
)
from shifts.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ShiftError,
    ValidationError as ShiftValidationError,
)
from shifts.history import shift_history
from shifts.models import Shift
from shifts.reconciliation import DateRange, list_reconciliation, resolve_date_range
from shifts.services import close_shift, get_active_shift, open_shift
from shifts.staff_revenue import staff_revenue, staff_shift_history
from shifts.totals import live_totals

from .permissions import IsCashierRole, IsManagerOrAdmin
from .serializers import (
    AccessCodeSerializer,
    DateRangeQuerySerializer,
    LiveTotalsSerializer,
    OrganizationQuerySerializer,
    ReconciliationQuerySerializer,
    ReconciliationRowSerializer,
    ReconciliationSummarySerializer,
    ShiftCloseSerializer,
    ShiftHistoryQuerySerializer,
    ShiftHistoryRowSerializer,
    ShiftHistoryTotalsSerializer,
    ShiftOpenSerializer,
    ShiftSerializer,
    StaffRevenueSerializer,
    StaffShiftHistorySerializer,
)

logger = logging.getLogger("shiftledger")
User = get_user_model()

SHIFT_ERROR_STATUS = (
    (ShiftValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
)


def _shift_error_response(exc, **extra):
    """Translate a ledger error into an API response."""
    http_status = status.HTTP_400_BAD_REQUEST
    for exc_type, mapped in SHIFT_ERROR_STATUS:
        if isinstance(exc, exc_type):
            http_status = mapped
            break
    return Response({'detail': exc.message, 'code': exc.code, **extra}, status=http_status)


def _resolve_organization(request, organization_id):
    """Return ``(organization, None)`` or ``(None, error_response)``."""
    organization = Organization.objects.filter(pk=organization_id, is_active=True).first()
    if organization is None:
        return None, Response(
            {'detail': 'Organisation introuvable.'},
            status=status.HTTP_404_NOT_FOUND,
        )
    if not is_member(request.user, organization):
        return None, Response(
            {'detail': "Vous n'avez pas acces a cette organisation."},
            status=status.HTTP_403_FORBIDDEN,
        )
    return organization, None


def _date_range_from_query(data):
    date_from = data.get('date_from')
    if date_from:
        start = timezone.make_aware(datetime.combine(date_from, time.min))
        end = timezone.make_aware(datetime.combine(data['date_to'], time.max))
        return DateRange(start, end)
    return resolve_date_range(data['period'])


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------

class ShiftViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for shifts with open/close workflow actions.

    - list/retrieve: filtered by the user's organizations.
    - open_shift: opens a new shift for the current user.
    - close_shift: closes an active shift (own shift, or any as manager).
    - current: returns the current active shift for the user.
    - live_totals: running totals of an active shift.
    """

    serializer_class = ShiftSerializer
    queryset = Shift.objects.select_related('organization', 'cashier')
    filterset_fields = ['organization', 'cashier', 'status']
    ordering_fields = ['started_at', 'ended_at']
    permission_classes = [IsAuthenticated, IsCashierRole]

    def get_queryset(self):
        qs = super().get_queryset()
        return qs.filter(organization_id__in=user_organization_ids(self.request.user))

    @action(detail=False, methods=['post'], url_path='open')
    def open_shift(self, request):
        """Open a new shift for the current user."""
        serializer = ShiftOpenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        organization, error = _resolve_organization(request, serializer.validated_data['organization'])
        if error:
            return error

        # Managers open without the daily code.
        if organization.require_access_code and not request.user.can_supervise:
            try:
                check_access_code(organization, serializer.validated_data.get('access_code'))
            except AccessCodeError as e:
                return Response(
                    {'detail': str(e), 'code': 'access_code_invalid'},
                    status=status.HTTP_403_FORBIDDEN,
                )

        try:
            shift = open_shift(organization, request.user, serializer.validated_data['opening_cash'])
        except ConflictError as e:
            existing = get_active_shift(organization, request.user)
            extra = {'shift': ShiftSerializer(existing).data} if existing else {}
            return _shift_error_response(e, **extra)
        except ShiftError as e:
            return _shift_error_response(e)

        return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='close')
    def close_shift(self, request, pk=None):
        """Close the specified shift."""
        shift = self.get_object()

        if shift.cashier_id != request.user.pk and not request.user.can_supervise:
            return Response(
                {'detail': 'Vous ne pouvez fermer que votre propre session.'},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = ShiftCloseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            shift = close_shift(
                shift.pk,
                serializer.validated_data['closing_cash'],
                serializer.validated_data.get('notes', ''),
                actor=request.user,
            )
        except ShiftError as e:
            return _shift_error_response(e)

        return Response(ShiftSerializer(shift).data)

    @action(detail=False, methods=['get'], url_path='current')
    def current(self, request):
        """Get the current active shift for the authenticated user."""
        organization_id = request.query_params.get('organization')
        if organization_id:
            query = OrganizationQuerySerializer(data=request.query_params)
            query.is_valid(raise_exception=True)
            organization, error = _resolve_organization(request, query.validated_data['organization'])
            if error:
                return error
            shift = get_active_shift(organization, request.user)
        else:
            shift = self.get_queryset().filter(
                cashier=request.user,
                status=Shift.Status.ACTIVE,
            ).first()

        if not shift:
            return Response(
                {'detail': 'Aucune session de caisse en cours.'},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=['get'], url_path='live-totals')
    def totals(self, request, pk=None):
        """Running cash/card totals of the bookings attributed to the shift."""
        shift = self.get_object()
        try:
            totals = live_totals(shift.pk)
        except ShiftError as e:
            return _shift_error_response(e)
        return Response(LiveTotalsSerializer(totals).data)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

RECONCILIATION_CSV_COLUMNS = [
    ('shift.started_at', 'Debut'),
    ('shift.ended_at', 'Fin'),
    ('cashier.display_name', 'Caissier'),
    ('shift.opening_cash', 'Fond initial'),
    ('shift.expected_cash', 'Especes attendues'),
    ('shift.closing_cash', 'Especes comptees'),
    ('shift.cash_difference', 'Ecart'),
    ('variance', 'Statut'),
    ('actual_sales', 'Ventes'),
    ('actual_transactions', 'Transactions'),
    ('shift.notes', 'Notes'),
]


class ReconciliationView(APIView):
    """
    GET closed shifts of an organization with variance classification.

    Query params:
        - organization (required)
        - period: today | yesterday | N days (default 7), or date_from + date_to
        - variance: all | balanced | over | short
        - sort: date | cashier | variance | sales, direction: asc | desc
        - export=csv to download the rows
    """

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    def get(self, request):
        query = ReconciliationQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data

        organization, error = _resolve_organization(request, data['organization'])
        if error:
            return error

        try:
            report = list_reconciliation(
                organization,
                _date_range_from_query(data),
                variance_filter=data['variance'],
                sort_field=data['sort'],
                sort_dir=data['direction'],
            )
        except ShiftError as e:
            return _shift_error_response(e)

        if data.get('export') == 'csv':
            filename = f"reconciliation_{organization.slug}_{report.date_range.start:%Y%m%d}"
            return rows_to_csv_response(report.rows, RECONCILIATION_CSV_COLUMNS, filename)

        return Response({
            'organization': str(organization.pk),
            'date_from': report.date_range.start,
            'date_to': report.date_range.end,
            'rows': ReconciliationRowSerializer(report.rows, many=True).data,
            'summary': ReconciliationSummarySerializer(report.summary).data,
        })


class ShiftHistoryView(APIView):
    """GET shifts started within a rolling window, with totals over closed shifts."""

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    def get(self, request):
        query = ShiftHistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        organization, error = _resolve_organization(request, query.validated_data['organization'])
        if error:
            return error

        try:
            report = shift_history(organization, query.validated_data['window'])
        except ShiftError as e:
            return _shift_error_response(e)

        return Response({
            'window': report.window,
            'cutoff': report.cutoff,
            'rows': ShiftHistoryRowSerializer(report.rows, many=True).data,
            'totals': ShiftHistoryTotalsSerializer(report.totals).data,
        })


class StaffRevenueView(APIView):
    """GET revenue per cashier over a date range."""

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    def get(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        organization, error = _resolve_organization(request, query.validated_data['organization'])
        if error:
            return error

        try:
            date_range = _date_range_from_query(query.validated_data)
        except ShiftError as e:
            return _shift_error_response(e)

        results = staff_revenue(organization, date_range)
        return Response({
            'date_from': date_range.start,
            'date_to': date_range.end,
            'results': StaffRevenueSerializer(results, many=True).data,
        })


class StaffShiftHistoryView(APIView):
    """GET the most recent shifts of one cashier."""

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    def get(self, request, cashier_id):
        query = OrganizationQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        organization, error = _resolve_organization(request, query.validated_data['organization'])
        if error:
            return error

        cashier = User.objects.filter(pk=cashier_id, memberships__organization=organization).first()
        if cashier is None:
            return Response(
                {'detail': 'Caissier introuvable.'},
                status=status.HTTP_404_NOT_FOUND,
            )

        history = staff_shift_history(organization, cashier)
        return Response(StaffShiftHistorySerializer(history).data)


# ---------------------------------------------------------------------------
# Daily access code
# ---------------------------------------------------------------------------

class OrganizationAccessCodeView(APIView):
    """GET / POST (set or generate) / DELETE today's access code."""

    permission_classes = [IsAuthenticated, IsManagerOrAdmin]

    def _payload(self, organization):
        current = is_access_code_current(organization)
        return {
            'organization': str(organization.pk),
            'require_access_code': organization.require_access_code,
            'code': organization.daily_access_code if current else None,
            'set_at': organization.daily_access_code_set_at,
            'is_current': current,
        }

    def get(self, request, pk):
        organization, error = _resolve_organization(request, pk)
        if error:
            return error
        return Response(self._payload(organization))

    def post(self, request, pk):
        organization, error = _resolve_organization(request, pk)
        if error:
            return error

        serializer = AccessCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            set_access_code(organization, serializer.validated_data.get('code'), actor=request.user)
        except AccessCodeError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self._payload(organization), status=status.HTTP_201_CREATED)

    def delete(self, request, pk):
        organization, error = _resolve_organization(request, pk)
        if error:
            return error
        clear_access_code(organization, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
