"""
Core Models - Abstract base classes shared by the offboarding apps
"""

from django.db import models
from django.db.models import F
from django.utils import timezone

from .exceptions import StaleObjectError


class TimeStampedModel(models.Model):
    """Abstract base model with timestamps"""

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class VersionedModel(TimeStampedModel):
    """
    Abstract base model carrying an optimistic concurrency token.

    Writers load a row, mutate it in memory and persist through
    ``save_versioned``. The UPDATE only matches while the row still carries the
    version that was read; otherwise ``StaleObjectError`` is raised and nothing
    is written.
    """

    version = models.PositiveIntegerField(default=1, editable=False)

    class Meta:
        abstract = True

    def save_versioned(self, update_fields):
        values = {name: getattr(self, name) for name in update_fields}
        values['updated_at'] = timezone.now()
        values['version'] = F('version') + 1

        updated = type(self)._default_manager.filter(
            pk=self.pk,
            version=self.version,
        ).update(**values)
        if not updated:
            raise StaleObjectError(
                f"{self._meta.verbose_name} {self.pk} was modified concurrently"
            )

        self.version += 1
        self.updated_at = values['updated_at']
