"""Notification Models"""
from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import TimeStampedModel


class Notification(TimeStampedModel):
    """
    In-app message addressed to one user.

    ``related_process_id`` and ``related_task_id`` are soft references: plain
    ids with no foreign key constraint, so a notification outlives the process
    or task it mentions. Resolve them with an explicit lookup.
    """

    TYPE_PROCESS_STARTED = 'process_started'
    TYPE_PROCESS_CLOSED = 'process_closed'
    TYPE_TASK_OVERDUE = 'task_overdue'
    TYPE_TASK_COMPLETED = 'task_completed'
    TYPE_SYSTEM_ALERT = 'system_alert'
    TYPE_REMINDER = 'reminder'

    TYPE_CHOICES = [
        (TYPE_PROCESS_STARTED, 'Process Started'),
        (TYPE_PROCESS_CLOSED, 'Process Closed'),
        (TYPE_TASK_OVERDUE, 'Task Overdue'),
        (TYPE_TASK_COMPLETED, 'Task Completed'),
        (TYPE_SYSTEM_ALERT, 'System Alert'),
        (TYPE_REMINDER, 'Reminder'),
    ]

    PRIORITY_LOW = 1
    PRIORITY_NORMAL = 2
    PRIORITY_HIGH = 3
    PRIORITY_CRITICAL = 4

    PRIORITY_CHOICES = [
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_NORMAL, 'Normal'),
        (PRIORITY_HIGH, 'High'),
        (PRIORITY_CRITICAL, 'Critical'),
    ]

    title = models.CharField(max_length=200)
    message = models.CharField(max_length=1000)
    notification_type = models.CharField(max_length=30, choices=TYPE_CHOICES, default=TYPE_SYSTEM_ALERT)
    priority = models.PositiveSmallIntegerField(choices=PRIORITY_CHOICES, default=PRIORITY_NORMAL)

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )
    recipient_email = models.EmailField(blank=True)

    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    action_url = models.CharField(max_length=500, blank=True)
    action_text = models.CharField(max_length=100, blank=True)

    related_process_id = models.PositiveBigIntegerField(null=True, blank=True, db_index=True)
    related_task_id = models.PositiveBigIntegerField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
            models.Index(fields=['notification_type', 'related_task_id', 'created_at'], name='notif_type_task_created_idx'),
        ]

    def __str__(self):
        return f"{self.recipient_email or self.recipient_id} - {self.title[:50]}"

    def mark_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=['is_read', 'read_at', 'updated_at'])
