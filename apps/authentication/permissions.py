"""Role-based permissions shared by the offboarding API."""
from rest_framework.permissions import BasePermission, SAFE_METHODS


def _is_elevated(user):
    return bool(user and user.is_authenticated and user.is_hr_or_admin)


class IsHROrAdmin(BasePermission):
    """Only HR and Admin users."""

    message = 'Only HR or Admin users can perform this action.'

    def has_permission(self, request, view):
        return _is_elevated(request.user)


class IsHROrAdminOrReadOnly(BasePermission):
    """Anyone authenticated may read; HR and Admin may write."""

    message = 'Only HR or Admin users can modify this resource.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return user.is_hr_or_admin
