"""In-app notification services"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, List

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.notifications.models import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Create, query and expire in-app notifications."""

    # --------------------------------------------------------------------- API
    @classmethod
    def notify(
        cls,
        *,
        recipient,
        title: str,
        message: str,
        notification_type: str = Notification.TYPE_SYSTEM_ALERT,
        priority: int = Notification.PRIORITY_NORMAL,
        action_url: str = '',
        action_text: str = '',
        related_process_id: int | None = None,
        related_task_id: int | None = None,
    ) -> Notification:
        notification = Notification.objects.create(
            recipient=recipient,
            recipient_email=getattr(recipient, 'email', '') or '',
            title=title[:200],
            message=message[:1000],
            notification_type=notification_type,
            priority=priority,
            action_url=action_url,
            action_text=action_text,
            related_process_id=related_process_id,
            related_task_id=related_task_id,
        )
        logger.debug(
            "Notification %s created for %s type=%s", notification.pk, notification.recipient_email, notification_type,
        )
        return notification

    @classmethod
    def notify_roles(cls, roles: Iterable[str], **payload) -> List[Notification]:
        """Fan a notification out to every active user holding one of ``roles``."""
        User = get_user_model()
        recipients = User.objects.with_role(*roles)
        return [cls.notify(recipient=user, **payload) for user in recipients]

    @classmethod
    def notify_identifier(cls, identifier: str, **payload) -> Notification | None:
        """Notify the user whose email matches ``identifier``, if one exists."""
        if not identifier:
            return None
        User = get_user_model()
        user = User.objects.filter(email__iexact=identifier, is_active=True).first()
        if not user:
            logger.info("No active user for identifier %s; in-app notification skipped", identifier)
            return None
        return cls.notify(recipient=user, **payload)

    @classmethod
    def for_user(cls, user, unread_only: bool = False, limit: int = 50):
        queryset = Notification.objects.filter(recipient=user)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return queryset.order_by('-created_at')[:limit]

    @classmethod
    def unread_count(cls, user) -> int:
        return Notification.objects.filter(recipient=user, is_read=False).count()

    @classmethod
    def mark_as_read(cls, notification_id, user) -> bool:
        notification = Notification.objects.filter(id=notification_id, recipient=user).first()
        if not notification:
            return False
        notification.mark_read()
        return True

    @classmethod
    def mark_all_as_read(cls, user) -> int:
        now = timezone.now()
        return Notification.objects.filter(recipient=user, is_read=False).update(
            is_read=True, read_at=now, updated_at=now,
        )

    @classmethod
    def delete_for_process(cls, process_id) -> int:
        deleted, _ = Notification.objects.filter(related_process_id=process_id).delete()
        return deleted

    @classmethod
    def cleanup_read(cls, days_to_keep: int = 30) -> int:
        cutoff = timezone.now() - timedelta(days=days_to_keep)
        deleted, _ = Notification.objects.filter(is_read=True, created_at__lt=cutoff).delete()
        if deleted:
            logger.info("Cleaned up %s old notifications", deleted)
        return deleted

    @classmethod
    def already_sent(
        cls,
        notification_type: str,
        *,
        since: datetime,
        related_process_id=None,
        related_task_id=None,
    ) -> bool:
        """Whether a notification of this type about this process/task exists since ``since``."""
        queryset = Notification.objects.filter(notification_type=notification_type, created_at__gte=since)
        if related_process_id is not None:
            queryset = queryset.filter(related_process_id=related_process_id)
        if related_task_id is not None:
            queryset = queryset.filter(related_task_id=related_task_id)
        return queryset.exists()

    @staticmethod
    def resolve_related_process(notification: Notification):
        """The process a notification mentions, or None when it no longer exists."""
        if not notification.related_process_id:
            return None
        from apps.offboarding.models import OffboardingProcess

        return OffboardingProcess.objects.filter(pk=notification.related_process_id).first()

