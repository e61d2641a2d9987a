"""Checklist completion with dependency gating"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import StaleObjectError
from apps.notifications.services import dispatch_on_commit
from apps.offboarding.dependencies import would_create_cycle
from apps.offboarding.models import ChecklistItem, OffboardingProcess, TaskComment
from .notifier import OffboardingNotifier
from .outcome import Outcome

logger = logging.getLogger(__name__)

COMPLETION_FIELDS = ['is_completed', 'completed_by', 'completed_at', 'comments']


class ChecklistService:
    """Complete, reopen and annotate checklist items."""

    notifier_class = OffboardingNotifier

    @classmethod
    def complete(cls, item: ChecklistItem, *, actor, comment: Optional[str] = None) -> Outcome:
        comment = (comment or '').strip()
        with transaction.atomic():
            item.process = cls._lock_process(item)
            if not item.process.is_active:
                return Outcome.blocked('Tasks can only be completed on active processes.')
            if item.is_completed:
                return Outcome.blocked('This task is already completed.')

            if item.depends_on_task_id:
                dependency = ChecklistItem.objects.select_for_update().get(pk=item.depends_on_task_id)
                if not dependency.is_completed:
                    return Outcome.blocked(
                        f"This task cannot be completed until '{dependency.task_name}' is completed first."
                    )

            cls._mark_completed(item, actor, comment)
            try:
                item.save_versioned(COMPLETION_FIELDS)
            except StaleObjectError:
                item.refresh_from_db()
                return Outcome.conflict()
            if comment:
                TaskComment.objects.create(item=item, comment=comment, created_by=actor.identifier)
            dispatch_on_commit(cls.notifier_class().task_completed, item)

        logger.info("Task %s (%s) completed by %s", item.pk, item.task_name, actor.identifier)
        return Outcome.success(item)

    @classmethod
    def uncomplete(cls, item: ChecklistItem, *, actor) -> Outcome:
        with transaction.atomic():
            item.process = cls._lock_process(item)
            if not item.process.is_active:
                return Outcome.blocked('Tasks can only be updated on active processes.')
            if not item.is_completed:
                return Outcome.blocked('This task is not completed.')
            if not (actor.is_hr_or_admin or item.completed_by.lower() == actor.identifier.lower()):
                return Outcome.blocked('Only the user who completed this task or HR/Admin can mark it as incomplete.')

            # A dependent being completed holds the same row lock
            list(ChecklistItem.objects.select_for_update().filter(pk=item.pk).values_list('pk', flat=True))
            dependents = list(
                item.dependent_tasks.filter(is_completed=True)
                .order_by('task_name')
                .values_list('task_name', flat=True)
            )
            if dependents:
                return Outcome.blocked(
                    'Cannot mark as incomplete: the following dependent task(s) are already completed: '
                    + ', '.join(dependents)
                )

            item.is_completed = False
            item.completed_by = ''
            item.completed_at = None
            item.comments = ''
            try:
                item.save_versioned(COMPLETION_FIELDS)
            except StaleObjectError:
                item.refresh_from_db()
                return Outcome.conflict()

        logger.info("Task %s (%s) reopened by %s", item.pk, item.task_name, actor.identifier)
        return Outcome.success(item)

    @classmethod
    def bulk_complete(cls, task_ids: Iterable[int], *, actor, comment: Optional[str] = None) -> dict:
        """
        Complete every eligible item in ``task_ids``.

        Eligible means incomplete and on an active process; non-HR actors are
        further limited to processes they initiated. Dependencies are not
        checked here. Items that lose a version race are reported as conflicts.
        """
        requested = set(task_ids)
        queryset = ChecklistItem.objects.filter(
            pk__in=requested,
            is_completed=False,
            process__status=OffboardingProcess.STATUS_ACTIVE,
            process__is_closed=False,
        ).select_related('process')
        if not actor.is_hr_or_admin:
            queryset = queryset.filter(process__initiated_by__iexact=actor.identifier)

        comment = (comment or '').strip()
        notifier = cls.notifier_class()
        completed, conflicts = [], []
        for item in queryset:
            with transaction.atomic():
                if not cls._lock_process(item).is_active:
                    continue
                cls._mark_completed(item, actor, comment)
                try:
                    item.save_versioned(COMPLETION_FIELDS)
                except StaleObjectError:
                    conflicts.append(item.pk)
                    continue
                if comment:
                    TaskComment.objects.create(item=item, comment=comment, created_by=actor.identifier)
                dispatch_on_commit(notifier.task_completed, item)
            completed.append(item.pk)

        skipped = len(requested) - len(completed) - len(conflicts)
        logger.info(
            "Bulk completion by %s: %s completed, %s skipped, %s conflicts",
            actor.identifier, len(completed), skipped, len(conflicts),
        )
        return {
            'completed': len(completed),
            'completed_ids': completed,
            'skipped': skipped,
            'conflicts': conflicts,
        }

    @staticmethod
    def add_comment(item: ChecklistItem, *, actor, text: str) -> TaskComment:
        text = (text or '').strip()
        if not text:
            raise ValueError('Comment text is required.')
        return TaskComment.objects.create(item=item, comment=text[:1000], created_by=actor.identifier)

    @staticmethod
    def set_dependency(item: ChecklistItem, depends_on: Optional[ChecklistItem]) -> Outcome:
        """Point ``item`` at another task of the same process, or clear the edge."""
        if depends_on is not None:
            if depends_on.process_id != item.process_id:
                return Outcome.blocked('A task can only depend on a task of the same process.')
            if would_create_cycle(item, depends_on.pk, 'depends_on_task'):
                return Outcome.blocked('This dependency would create a circular chain of tasks.')

        item.depends_on_task = depends_on
        try:
            with transaction.atomic():
                item.save_versioned(['depends_on_task'])
        except StaleObjectError:
            return Outcome.conflict()
        return Outcome.success(item)

    @staticmethod
    def _mark_completed(item, actor, comment):
        item.is_completed = True
        item.completed_by = actor.identifier
        item.completed_at = timezone.now()
        item.comments = comment[:1000]

    @staticmethod
    def _lock_process(item):
        return OffboardingProcess.objects.select_for_update().get(pk=item.process_id)
