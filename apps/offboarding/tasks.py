"""Offboarding Celery tasks"""
import logging

from celery import shared_task
from django.conf import settings

from apps.core.logging import bind_correlation_id
from .services import ReminderSweep

logger = logging.getLogger(__name__)


@shared_task(bind=True, name='offboarding.reminder_sweep', max_retries=3)
def reminder_sweep(self):
    """Daily overdue reminders, completion notices and notification cleanup."""
    with bind_correlation_id(self.request.id):
        try:
            return ReminderSweep().run()
        except Exception as e:
            logger.exception("Reminder sweep failed (attempt %s)", self.request.retries + 1)
            retry_minutes = getattr(settings, 'OFFBOARDING_SWEEP_RETRY_MINUTES', 30)
            raise self.retry(exc=e, countdown=retry_minutes * 60)
