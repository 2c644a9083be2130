"""Main API URL router for /api/v1/."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from api.v1 import views as v1_views

router = DefaultRouter()
router.register(r'shifts', v1_views.ShiftViewSet, basename='shift')


app_name = 'api'
urlpatterns = [
    path('', include(router.urls)),

    # Auth endpoints
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Reports
    path('reconciliation/', v1_views.ReconciliationView.as_view(), name='reconciliation'),
    path('shift-history/', v1_views.ShiftHistoryView.as_view(), name='shift-history'),
    path('staff-revenue/', v1_views.StaffRevenueView.as_view(), name='staff-revenue'),
    path(
        'staff-revenue/<uuid:cashier_id>/',
        v1_views.StaffShiftHistoryView.as_view(),
        name='staff-shift-history',
    ),

    # Organizations
    path(
        'organizations/<uuid:pk>/access-code/',
        v1_views.OrganizationAccessCodeView.as_view(),
        name='organization-access-code',
    ),
]
