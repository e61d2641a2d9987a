"""Department email routing"""
from __future__ import annotations

from typing import Mapping, Optional

from django.conf import settings

from apps.offboarding.models import Department


class DepartmentDirectory:
    """
    Resolve the address that receives a department's task emails.

    Lookup order: active ``Department`` row (case-insensitive name), then the
    fallback table, then the default address. The table and default come from
    settings unless injected.
    """

    def __init__(self, fallback: Optional[Mapping[str, str]] = None, default: Optional[str] = None):
        if fallback is None:
            fallback = getattr(settings, 'OFFBOARDING_DEPARTMENT_EMAILS', {})
        self.fallback = {key.lower(): value for key, value in fallback.items()}
        self.default = default if default is not None else getattr(
            settings, 'OFFBOARDING_DEFAULT_DEPARTMENT_EMAIL', ''
        )

    def email_for(self, department_name: str) -> str:
        name = (department_name or '').strip()
        if name:
            address = (
                Department.objects.filter(name__iexact=name, is_active=True)
                .values_list('email_address', flat=True)
                .first()
            )
            if address:
                return address
        return self.fallback.get(name.lower(), self.default)
