"""Offboarding notification events"""
from __future__ import annotations

import logging
from typing import Iterable

from apps.authentication.models import User
from apps.notifications.models import Notification
from apps.notifications.services import EmailService, NotificationService
from .directory import DepartmentDirectory

logger = logging.getLogger(__name__)

ELEVATED = (User.ROLE_HR, User.ROLE_ADMIN)


def process_url(process_id) -> str:
    return f"/api/v1/offboarding/processes/{process_id}/"


def _day(value) -> str:
    return value.strftime('%b %d, %Y') if value else 'N/A'


class OffboardingNotifier:
    """
    In-app notifications and emails for lifecycle and checklist events.

    Each method records the in-app rows first and then queues emails. Callers
    run these after their transaction commits, through ``dispatch_on_commit``.
    """

    def __init__(self, directory: DepartmentDirectory | None = None):
        self.directory = directory or DepartmentDirectory()

    # ------------------------------------------------------------- lifecycle
    def process_pending_approval(self, process):
        title = 'Process Approval Required'
        message = (
            f"Offboarding process for {process.employee_name} ({process.job_title}) is pending approval. "
            f"Initiated by {process.initiated_by}."
        )
        NotificationService.notify_roles(
            ELEVATED,
            title=title,
            message=message,
            notification_type=Notification.TYPE_SYSTEM_ALERT,
            priority=Notification.PRIORITY_HIGH,
            action_url=process_url(process.pk),
            action_text='Review & Approve',
            related_process_id=process.pk,
        )
        self._email_users(
            User.objects.with_role(*ELEVATED), title, message, process_url(process.pk), 'Review & Approve',
        )

    def process_approved(self, process):
        title = 'Process Approved'
        message = (
            f"Offboarding process for {process.employee_name} has been approved by "
            f"{process.approved_by} and is now active."
        )
        payload = dict(
            title=title,
            message=message,
            notification_type=Notification.TYPE_PROCESS_STARTED,
            priority=Notification.PRIORITY_NORMAL,
            action_url=process_url(process.pk),
            action_text='View Process',
            related_process_id=process.pk,
        )
        NotificationService.notify_identifier(process.initiated_by, **payload)
        EmailService.send(process.initiated_by, 'process_update', {
            'title': title, 'message': message,
            'action_url': process_url(process.pk), 'action_text': 'View Process',
        })
        NotificationService.notify_roles([User.ROLE_HR], **payload)

    def task_assigned(self, process, item):
        NotificationService.notify_roles(
            [User.ROLE_HR],
            title=f"Task Assigned - {process.employee_name}",
            message=f"'{item.task_name}' assigned to {item.department}. Due: {_day(item.due_date)}.",
            notification_type=Notification.TYPE_PROCESS_STARTED,
            priority=Notification.PRIORITY_NORMAL,
            action_url=process_url(process.pk),
            action_text='View',
            related_process_id=process.pk,
            related_task_id=item.pk,
        )
        EmailService.send(self.directory.email_for(item.department), 'task_assigned', {
            'employee_name': process.employee_name,
            'task_name': item.task_name,
            'department': item.department,
            'due_date': item.due_date,
        })

    def process_rejected(self, process):
        title = 'Process Rejected'
        message = (
            f"Offboarding process for {process.employee_name} has been rejected by "
            f"{process.rejected_by}. Reason: {process.rejection_reason}"
        )
        NotificationService.notify_identifier(
            process.initiated_by,
            title=title,
            message=message,
            notification_type=Notification.TYPE_SYSTEM_ALERT,
            priority=Notification.PRIORITY_HIGH,
            action_url=process_url(process.pk),
            action_text='View Details',
            related_process_id=process.pk,
        )
        EmailService.send(process.initiated_by, 'process_update', {
            'title': title, 'message': message,
            'action_url': process_url(process.pk), 'action_text': 'View Details',
        })

    def process_closed(self, process):
        payload = dict(
            title='Offboarding Process Completed',
            message=(
                f"The offboarding process for {process.employee_name} has been successfully "
                f"completed by {process.closed_by}."
            ),
            notification_type=Notification.TYPE_PROCESS_CLOSED,
            priority=Notification.PRIORITY_NORMAL,
            action_url=process_url(process.pk),
            action_text='View Process',
            related_process_id=process.pk,
        )
        NotificationService.notify_roles([User.ROLE_HR], **payload)
        NotificationService.notify_identifier(process.initiated_by, **payload)
        self._completion_email(process)

    def process_completion_notice(self, process):
        """Follow-up sent by the reminder sweep for recently closed processes."""
        NotificationService.notify_identifier(
            process.initiated_by,
            title=f"Offboarding Complete - {process.employee_name}",
            message=f"All offboarding tasks for {process.employee_name} are complete and the process is closed.",
            notification_type=Notification.TYPE_REMINDER,
            priority=Notification.PRIORITY_LOW,
            action_url=process_url(process.pk),
            action_text='View Process',
            related_process_id=process.pk,
        )
        return self._completion_email(process)

    @staticmethod
    def _completion_email(process):
        return EmailService.send(process.initiated_by, 'process_completed', {
            'employee_name': process.employee_name,
            'completed_by': process.closed_by or 'System',
        })

    # ------------------------------------------------------------- checklist
    def task_completed(self, item):
        process = item.process
        NotificationService.notify_roles(
            [User.ROLE_HR],
            title=f"Task Completed - {process.employee_name}",
            message=f"'{item.task_name}' has been completed by {item.completed_by} in {item.department} department.",
            notification_type=Notification.TYPE_TASK_COMPLETED,
            priority=Notification.PRIORITY_LOW,
            action_url=process_url(process.pk),
            action_text='View Process',
            related_process_id=process.pk,
            related_task_id=item.pk,
        )
        EmailService.send(process.initiated_by, 'task_completed', {
            'employee_name': process.employee_name,
            'task_name': item.task_name,
            'completed_by': item.completed_by,
        })

    def task_overdue(self, item, escalation_emails: Iterable[str] = ()):
        process = item.process
        days = item.days_past_due
        NotificationService.notify_roles(
            ELEVATED,
            title=f"Task Overdue - {process.employee_name}",
            message=f"Task '{item.task_name}' is {days} day(s) overdue in {item.department} department.",
            notification_type=Notification.TYPE_TASK_OVERDUE,
            priority=Notification.PRIORITY_HIGH,
            action_url=process_url(process.pk),
            action_text='View Task',
            related_process_id=process.pk,
            related_task_id=item.pk,
        )
        recipients = [self.directory.email_for(item.department), *escalation_emails]
        return EmailService.send_many(recipients, 'task_overdue', {
            'employee_name': process.employee_name,
            'task_name': item.task_name,
            'department': item.department,
            'days_past_due': days,
        })

    # -------------------------------------------------------------- helpers
    @staticmethod
    def _email_users(users, title, message, action_url, action_text):
        EmailService.send_many((user.email for user in users), 'process_update', {
            'title': title, 'message': message, 'action_url': action_url, 'action_text': action_text,
        })

