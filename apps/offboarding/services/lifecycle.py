"""Offboarding Process Lifecycle - approval workflow transitions"""
from __future__ import annotations

import logging
from typing import Any, Dict

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import StaleObjectError
from apps.notifications.services import NotificationService, dispatch_on_commit
from apps.offboarding.models import (
    ChecklistItem, OffboardingDocument, OffboardingProcess, TaskComment,
)
from .generation import TaskGenerationService
from .notifier import OffboardingNotifier
from .outcome import Outcome, PROCESS_CONFLICT_MESSAGE

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('employee_name', 'job_title', 'employment_start_date', 'last_working_day')
DELETE_CONFIRMATION = 'DELETE'


class ProcessLifecycleService:
    """
    Drives an offboarding process through its states:

        pending_approval -> active -> closed
        pending_approval -> rejected

    Each transition is one transaction guarded by the process version. Blocked
    transitions and lost races come back as an ``Outcome`` rather than an
    exception; notifications go out only after the transaction commits.
    """

    notifier_class = OffboardingNotifier

    @classmethod
    def _notifier(cls):
        return cls.notifier_class()

    @classmethod
    @transaction.atomic
    def create(cls, *, actor, data: Dict[str, Any]) -> OffboardingProcess:
        """Open a process in ``pending_approval`` on behalf of ``actor``."""
        process = OffboardingProcess(
            **{field: data[field] for field in EDITABLE_FIELDS if field in data},
            initiated_by=actor.identifier,
            status=OffboardingProcess.STATUS_PENDING_APPROVAL,
            process_start_date=timezone.localdate(),
        )
        process.full_clean()
        process.save()
        logger.info(
            "Offboarding process %s created for %s by %s", process.pk, process.employee_name, process.initiated_by,
        )
        dispatch_on_commit(cls._notifier().process_pending_approval, process)
        return process

    @classmethod
    def update(cls, process: OffboardingProcess, *, actor, data: Dict[str, Any]) -> Outcome:
        if not process.can_be_edited:
            return Outcome.blocked('Only draft or pending processes can be edited.')
        if not (actor.is_hr_or_admin or process.initiated_by.lower() == actor.identifier.lower()):
            return Outcome.blocked('Only the initiator or HR/Admin can edit this process.')

        changed = [field for field in EDITABLE_FIELDS if field in data]
        for field in changed:
            setattr(process, field, data[field])
        process.full_clean()
        if not changed:
            return Outcome.success(process)

        with transaction.atomic():
            try:
                process.save_versioned(changed)
            except StaleObjectError:
                process.refresh_from_db()
                return Outcome.conflict(PROCESS_CONFLICT_MESSAGE)
        return Outcome.success(process)

    @classmethod
    def approve(cls, process: OffboardingProcess, *, actor) -> Outcome:
        if not actor.is_hr_or_admin:
            return Outcome.blocked('Only HR or Admin users can approve processes.')
        if not process.can_be_approved:
            return Outcome.blocked('Only processes pending approval can be approved.')

        with transaction.atomic():
            process.status = OffboardingProcess.STATUS_ACTIVE
            process.approved_by = actor.identifier
            process.approved_at = timezone.now()
            try:
                process.save_versioned(['status', 'approved_by', 'approved_at'])
            except StaleObjectError:
                process.refresh_from_db()
                return Outcome.conflict(PROCESS_CONFLICT_MESSAGE)

            items = TaskGenerationService.generate(process)

            notifier = cls._notifier()
            dispatch_on_commit(notifier.process_approved, process)
            for item in items:
                dispatch_on_commit(notifier.task_assigned, process, item)

        logger.info("Process %s approved by %s with %s tasks", process.pk, actor.identifier, len(items))
        return Outcome.success(items)

    @classmethod
    def reject(cls, process: OffboardingProcess, *, actor, reason: str = '') -> Outcome:
        if not actor.is_hr_or_admin:
            return Outcome.blocked('Only HR or Admin users can reject processes.')
        if not process.can_be_approved:
            return Outcome.blocked('Only processes pending approval can be rejected.')

        with transaction.atomic():
            process.status = OffboardingProcess.STATUS_REJECTED
            process.rejected_by = actor.identifier
            process.rejected_at = timezone.now()
            process.rejection_reason = (reason or '').strip()[:500] or 'No reason provided'
            try:
                process.save_versioned(['status', 'rejected_by', 'rejected_at', 'rejection_reason'])
            except StaleObjectError:
                process.refresh_from_db()
                return Outcome.conflict(PROCESS_CONFLICT_MESSAGE)
            dispatch_on_commit(cls._notifier().process_rejected, process)

        logger.info("Process %s rejected by %s", process.pk, actor.identifier)
        return Outcome.success(process)

    @classmethod
    def close(cls, process: OffboardingProcess, *, actor) -> Outcome:
        if not actor.is_hr_or_admin:
            return Outcome.blocked('Only HR or Admin users can close processes.')
        if not process.is_active:
            return Outcome.blocked('Only active processes can be closed.')

        with transaction.atomic():
            current = OffboardingProcess.objects.select_for_update().get(pk=process.pk)
            if not current.is_active:
                return Outcome.blocked('Only active processes can be closed.')
            pending = current.items.filter(is_completed=False).count()
            if pending:
                return Outcome.blocked(f"Cannot close process: {pending} task(s) still pending completion.")

            process.is_closed = True
            process.status = OffboardingProcess.STATUS_CLOSED
            process.closed_by = actor.identifier
            process.closed_at = timezone.now()
            try:
                process.save_versioned(['is_closed', 'status', 'closed_by', 'closed_at'])
            except StaleObjectError:
                process.refresh_from_db()
                return Outcome.conflict(PROCESS_CONFLICT_MESSAGE)
            dispatch_on_commit(cls._notifier().process_closed, process)

        logger.info("Process %s closed by %s", process.pk, actor.identifier)
        return Outcome.success(process)

    @classmethod
    def delete(cls, process: OffboardingProcess, *, actor, confirmation: str = '') -> Outcome:
        """
        Permanently remove a process with its comments, items, documents and
        any notifications that mention it.
        """
        if not actor.is_hr_or_admin:
            return Outcome.blocked('Only HR or Admin users can delete processes.')
        if (confirmation or '').strip().upper() != DELETE_CONFIRMATION:
            return Outcome.blocked('Please type DELETE to confirm deletion.')
        if process.is_closed or process.status == OffboardingProcess.STATUS_CLOSED:
            return Outcome.blocked('Closed processes cannot be deleted.')
        if process.status == OffboardingProcess.STATUS_ACTIVE and process.items.filter(is_completed=True).exists():
            return Outcome.blocked('Active processes with completed tasks cannot be deleted.')

        process_id = process.pk
        employee_name = process.employee_name
        with transaction.atomic():
            if not OffboardingProcess.objects.filter(pk=process_id, version=process.version).exists():
                return Outcome.conflict(PROCESS_CONFLICT_MESSAGE)

            TaskComment.objects.filter(item__process_id=process_id).delete()
            items = ChecklistItem.objects.filter(process_id=process_id)
            items.update(depends_on_task=None)
            items.delete()

            documents = list(OffboardingDocument.objects.filter(process_id=process_id))
            stored_files = [document.file.name for document in documents if document.file]
            OffboardingDocument.objects.filter(process_id=process_id).delete()

            NotificationService.delete_for_process(process_id)
            process.delete()

            if stored_files:
                storage = OffboardingDocument._meta.get_field('file').storage
                dispatch_on_commit(_delete_stored_files, storage, stored_files)

        logger.warning(
            "Offboarding process %s for %s permanently deleted by %s", process_id, employee_name, actor.identifier,
        )
        return Outcome.success()


def _delete_stored_files(storage, names):
    for name in names:
        storage.delete(name)
