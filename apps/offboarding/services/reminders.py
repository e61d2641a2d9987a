"""Periodic overdue reminders and housekeeping"""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Dict, Iterable, Optional

from django.conf import settings
from django.utils import timezone

from apps.notifications.models import Notification
from apps.notifications.services import NotificationService
from apps.offboarding.models import ChecklistItem, OffboardingProcess
from .notifier import OffboardingNotifier

logger = logging.getLogger(__name__)


class ReminderSweep:
    """
    One pass of the daily reminder job.

    1. Notify about overdue tasks (once per task per day).
    2. Send a completion notice for processes closed within the last day.
    3. Purge read notifications past the retention window.
    4. Count processes old enough to archive.

    A failure on one task or process is logged and the pass continues.
    """

    def __init__(
        self,
        notifier: Optional[OffboardingNotifier] = None,
        escalation_emails: Optional[Iterable[str]] = None,
        retention_days: Optional[int] = None,
        archive_after_days: Optional[int] = None,
    ):
        self.notifier = notifier or OffboardingNotifier()
        if escalation_emails is None:
            escalation_emails = getattr(settings, 'OFFBOARDING_ESCALATION_EMAILS', ())
        self.escalation_emails = list(escalation_emails)
        self.retention_days = retention_days if retention_days is not None else getattr(
            settings, 'OFFBOARDING_NOTIFICATION_RETENTION_DAYS', 30
        )
        self.archive_after_days = archive_after_days if archive_after_days is not None else getattr(
            settings, 'OFFBOARDING_ARCHIVE_AFTER_DAYS', 730
        )

    def run(self, today=None) -> Dict[str, int]:
        today = today or timezone.localdate()
        logger.info("Reminder sweep started for %s", today)
        stats = {
            'overdue_notified': 0,
            'overdue_skipped': 0,
            'overdue_failed': 0,
            'emails_queued': 0,
            'completion_notices': 0,
            'completion_failed': 0,
            'notifications_purged': 0,
            'archivable_processes': 0,
        }
        self._overdue(today, stats)
        self._recently_closed(stats)
        stats['notifications_purged'] = NotificationService.cleanup_read(days_to_keep=self.retention_days)
        stats['archivable_processes'] = self._archivable_count()
        if stats['archivable_processes']:
            logger.info(
                "%s closed processes are older than %s days and can be archived",
                stats['archivable_processes'], self.archive_after_days,
            )
        logger.info("Reminder sweep finished: %s", stats)
        return stats

    def _overdue(self, today, stats):
        start_of_day = timezone.make_aware(datetime.combine(today, time.min))
        items = (
            ChecklistItem.objects.filter(
                is_completed=False,
                due_date__isnull=False,
                due_date__lte=today,
                process__is_closed=False,
                process__status=OffboardingProcess.STATUS_ACTIVE,
            )
            .select_related('process')
            .order_by('due_date', 'pk')
        )
        for item in items:
            if NotificationService.already_sent(
                Notification.TYPE_TASK_OVERDUE, since=start_of_day, related_task_id=item.pk,
            ):
                stats['overdue_skipped'] += 1
                continue
            try:
                stats['emails_queued'] += self.notifier.task_overdue(item, self.escalation_emails) or 0
            except Exception:
                logger.exception("Overdue reminder failed for task %s", item.pk)
                stats['overdue_failed'] += 1
                continue
            stats['overdue_notified'] += 1

    def _recently_closed(self, stats):
        since = timezone.now() - timedelta(days=1)
        processes = OffboardingProcess.objects.filter(is_closed=True, closed_at__gte=since)
        for process in processes:
            if NotificationService.already_sent(
                Notification.TYPE_REMINDER, since=process.closed_at, related_process_id=process.pk,
            ):
                continue
            try:
                self.notifier.process_completion_notice(process)
            except Exception:
                logger.exception("Completion notice failed for process %s", process.pk)
                stats['completion_failed'] += 1
                continue
            stats['completion_notices'] += 1

    def _archivable_count(self) -> int:
        cutoff = timezone.now() - timedelta(days=self.archive_after_days)
        return OffboardingProcess.objects.filter(is_closed=True, closed_at__lt=cutoff).count()
