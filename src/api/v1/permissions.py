"""Custom DRF permissions for the shift ledger API."""
from rest_framework.permissions import BasePermission


class IsCashierRole(BasePermission):
    """Allow access to cashiers, managers, and admins."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.can_operate_register)


class IsManagerOrAdmin(BasePermission):
    """Allow access to users with the ADMIN or MANAGER role (or superusers)."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.can_supervise)
