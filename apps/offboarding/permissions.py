"""Offboarding app permissions."""
from django.db.models import Q
from rest_framework.permissions import BasePermission

from .models import ChecklistItem, OffboardingDocument, OffboardingProcess


def visible_processes(queryset, user):
    """
    Restrict a process queryset to what ``user`` may see.

    HR and Admin see everything. Other users see the processes they initiated,
    and department roles also see processes with tasks for their department.
    """
    if user.is_hr_or_admin:
        return queryset
    scope = Q(initiated_by__iexact=user.identifier)
    department = user.department_name
    if department:
        scope |= Q(items__department__iexact=department)
    return queryset.filter(scope).distinct()


def _process_of(obj):
    if isinstance(obj, OffboardingProcess):
        return obj
    if isinstance(obj, (ChecklistItem, OffboardingDocument)):
        return obj.process
    return None


class CanViewProcess(BasePermission):
    """Object-level access to a process and its tasks and documents."""

    message = 'You do not have access to this offboarding process.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.is_hr_or_admin:
            return True
        process = _process_of(obj)
        if process is None:
            return False
        if process.initiated_by.lower() == user.identifier.lower():
            return True
        department = user.department_name
        if not department:
            return False
        if isinstance(obj, ChecklistItem):
            return obj.department.lower() == department.lower()
        return process.items.filter(department__iexact=department).exists()
