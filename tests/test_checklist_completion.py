"""
Completing and reopening checklist tasks with dependency gating.
"""
from unittest import mock

from django.core import mail
from django.test import TestCase

from apps.notifications.models import Notification
from apps.offboarding.models import ChecklistItem, OffboardingProcess, TaskComment
from apps.offboarding.services import ChecklistService, ProcessLifecycleService
from .factories import (
    ActiveProcessFactory, ChecklistItemFactory, HRUserFactory, OffboardingProcessFactory, UserFactory,
)


class CompleteTaskTests(TestCase):

    def setUp(self):
        self.hr = HRUserFactory(email='hr.lead@company.co.za')
        self.it_user = UserFactory(email='it.support@company.co.za', role='it')
        self.process = ActiveProcessFactory(employee_name='Lerato Mokoena', initiated_by='manager@company.co.za')
        self.laptop = ChecklistItemFactory(process=self.process, task_name='Return laptop')
        self.cards = ChecklistItemFactory(
            process=self.process, task_name='Disable access cards', depends_on_task=self.laptop,
        )

    def test_complete_records_who_and_when(self):
        outcome = ChecklistService.complete(self.laptop, actor=self.it_user, comment='Collected at desk')

        self.assertTrue(outcome.ok)
        self.laptop.refresh_from_db()
        self.assertTrue(self.laptop.is_completed)
        self.assertEqual(self.laptop.completed_by, 'it.support@company.co.za')
        self.assertIsNotNone(self.laptop.completed_at)
        self.assertEqual(self.laptop.comments, 'Collected at desk')
        self.assertEqual(self.laptop.version, 2)
        self.assertEqual(TaskComment.objects.get(item=self.laptop).comment, 'Collected at desk')

    def test_dependency_must_be_completed_first(self):
        outcome = ChecklistService.complete(self.cards, actor=self.it_user)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(
            outcome.reason,
            "This task cannot be completed until 'Return laptop' is completed first.",
        )
        self.cards.refresh_from_db()
        self.assertFalse(self.cards.is_completed)

    def test_dependent_can_complete_after_dependency(self):
        ChecklistService.complete(self.laptop, actor=self.it_user)

        outcome = ChecklistService.complete(self.cards, actor=self.it_user)

        self.assertTrue(outcome.ok)

    def test_already_completed_task_is_blocked(self):
        ChecklistService.complete(self.laptop, actor=self.it_user)

        outcome = ChecklistService.complete(self.laptop, actor=self.hr)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'This task is already completed.')

    def test_tasks_on_inactive_process_are_frozen(self):
        pending = OffboardingProcessFactory(status=OffboardingProcess.STATUS_PENDING_APPROVAL)
        item = ChecklistItemFactory(process=pending)

        outcome = ChecklistService.complete(item, actor=self.hr)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'Tasks can only be completed on active processes.')

    def test_concurrent_completion_reports_conflict(self):
        stale = ChecklistItem.objects.get(pk=self.laptop.pk)
        ChecklistService.complete(self.laptop, actor=self.it_user)
        ChecklistService.uncomplete(self.laptop, actor=self.it_user)

        outcome = ChecklistService.complete(stale, actor=self.hr)

        self.assertTrue(outcome.is_conflict)
        self.assertFalse(stale.is_completed)
        self.assertEqual(stale.completed_by, '')
        self.laptop.refresh_from_db()
        self.assertFalse(self.laptop.is_completed)

    def test_completion_notifies_hr_and_initiator(self):
        with self.captureOnCommitCallbacks(execute=True):
            ChecklistService.complete(self.laptop, actor=self.it_user)

        note = Notification.objects.get(recipient=self.hr)
        self.assertEqual(note.notification_type, Notification.TYPE_TASK_COMPLETED)
        self.assertEqual(note.related_task_id, self.laptop.pk)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['manager@company.co.za'])
        self.assertEqual(mail.outbox[0].subject, 'Task Completed - Lerato Mokoena')


class UncompleteTaskTests(TestCase):

    def setUp(self):
        self.hr = HRUserFactory()
        self.it_user = UserFactory(role='it')
        self.process = ActiveProcessFactory()
        self.laptop = ChecklistItemFactory(process=self.process, task_name='Return laptop')
        self.cards = ChecklistItemFactory(
            process=self.process, task_name='Disable access cards', depends_on_task=self.laptop,
        )
        self.lists = ChecklistItemFactory(
            process=self.process, task_name='Update distribution lists', depends_on_task=self.laptop,
        )
        ChecklistService.complete(self.laptop, actor=self.it_user)

    def test_completer_can_reopen(self):
        outcome = ChecklistService.uncomplete(self.laptop, actor=self.it_user)

        self.assertTrue(outcome.ok)
        self.laptop.refresh_from_db()
        self.assertFalse(self.laptop.is_completed)
        self.assertEqual(self.laptop.completed_by, '')
        self.assertIsNone(self.laptop.completed_at)

    def test_other_users_cannot_reopen(self):
        outcome = ChecklistService.uncomplete(self.laptop, actor=UserFactory(role='finance'))

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(
            outcome.reason,
            'Only the user who completed this task or HR/Admin can mark it as incomplete.',
        )

    def test_reopen_blocked_by_completed_dependents(self):
        ChecklistService.complete(self.lists, actor=self.it_user)
        ChecklistService.complete(self.cards, actor=self.it_user)

        outcome = ChecklistService.uncomplete(self.laptop, actor=self.hr)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(
            outcome.reason,
            'Cannot mark as incomplete: the following dependent task(s) are already completed: '
            'Disable access cards, Update distribution lists',
        )

    def test_open_task_cannot_be_reopened(self):
        outcome = ChecklistService.uncomplete(self.cards, actor=self.hr)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'This task is not completed.')


class BulkCompleteTests(TestCase):

    def setUp(self):
        self.hr = HRUserFactory()
        self.manager = UserFactory(email='manager@company.co.za')
        self.process = ActiveProcessFactory(initiated_by='manager@company.co.za')
        self.first = ChecklistItemFactory(process=self.process)
        self.second = ChecklistItemFactory(process=self.process, depends_on_task=self.first)
        self.done = ChecklistItemFactory(process=self.process, is_completed=True, completed_by='x@company.co.za')

    def test_bulk_completes_open_tasks(self):
        result = ChecklistService.bulk_complete(
            [self.first.pk, self.second.pk, self.done.pk], actor=self.hr, comment='Cleared in batch',
        )

        self.assertEqual(result['completed'], 2)
        self.assertEqual(sorted(result['completed_ids']), sorted([self.first.pk, self.second.pk]))
        self.assertEqual(result['skipped'], 1)
        self.assertEqual(result['conflicts'], [])
        self.assertEqual(TaskComment.objects.filter(comment='Cleared in batch').count(), 2)

    def test_unknown_ids_are_skipped(self):
        result = ChecklistService.bulk_complete([self.first.pk, 999999], actor=self.hr)

        self.assertEqual(result['completed'], 1)
        self.assertEqual(result['skipped'], 1)

    def test_non_hr_limited_to_own_processes(self):
        foreign = ChecklistItemFactory(process=ActiveProcessFactory(initiated_by='someone@company.co.za'))

        result = ChecklistService.bulk_complete([self.first.pk, foreign.pk], actor=self.manager)

        self.assertEqual(result['completed_ids'], [self.first.pk])
        foreign.refresh_from_db()
        self.assertFalse(foreign.is_completed)


class TaskDependencyTests(TestCase):

    def setUp(self):
        self.process = ActiveProcessFactory()
        self.a = ChecklistItemFactory(process=self.process, task_name='A')
        self.b = ChecklistItemFactory(process=self.process, task_name='B', depends_on_task=self.a)

    def test_link_and_clear(self):
        c = ChecklistItemFactory(process=self.process, task_name='C')

        self.assertTrue(ChecklistService.set_dependency(c, self.b).ok)
        c.refresh_from_db()
        self.assertEqual(c.depends_on_task, self.b)

        self.assertTrue(ChecklistService.set_dependency(c, None).ok)
        c.refresh_from_db()
        self.assertIsNone(c.depends_on_task)

    def test_cycle_is_refused(self):
        outcome = ChecklistService.set_dependency(self.a, self.b)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'This dependency would create a circular chain of tasks.')
        self.a.refresh_from_db()
        self.assertIsNone(self.a.depends_on_task_id)

    def test_self_dependency_is_refused(self):
        self.assertTrue(ChecklistService.set_dependency(self.a, self.a).is_blocked)

    def test_cross_process_link_is_refused(self):
        other = ChecklistItemFactory()

        outcome = ChecklistService.set_dependency(self.a, other)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'A task can only depend on a task of the same process.')


class CommentTests(TestCase):

    def test_comments_are_appended(self):
        item = ChecklistItemFactory()
        user = UserFactory()

        ChecklistService.add_comment(item, actor=user, text='Waiting on courier')
        ChecklistService.add_comment(item, actor=user, text='  Delivered  ')

        self.assertEqual(
            list(item.task_comments.values_list('comment', flat=True)),
            ['Waiting on courier', 'Delivered'],
        )

    def test_empty_comment_is_rejected(self):
        with self.assertRaises(ValueError):
            ChecklistService.add_comment(ChecklistItemFactory(), actor=UserFactory(), text='   ')


class ProcessStateRecheckTests(TestCase):
    """Copies loaded before the process or a prerequisite changed must not write."""

    def setUp(self):
        self.hr = HRUserFactory()
        self.it_user = UserFactory(role='it')
        self.process = ActiveProcessFactory()
        self.laptop = ChecklistItemFactory(process=self.process, task_name='Return laptop')

    def test_reopen_after_process_closed_is_blocked(self):
        ChecklistService.complete(self.laptop, actor=self.it_user)
        loaded = ChecklistItem.objects.select_related('process').get(pk=self.laptop.pk)

        closed = ProcessLifecycleService.close(
            OffboardingProcess.objects.get(pk=self.process.pk), actor=self.hr,
        )
        outcome = ChecklistService.uncomplete(loaded, actor=self.hr)

        self.assertTrue(closed.ok)
        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'Tasks can only be updated on active processes.')
        self.assertFalse(self.process.items.filter(is_completed=False).exists())

    def test_complete_after_process_closed_elsewhere_is_blocked(self):
        loaded = ChecklistItem.objects.select_related('process').get(pk=self.laptop.pk)
        OffboardingProcess.objects.filter(pk=self.process.pk).update(
            status=OffboardingProcess.STATUS_CLOSED, is_closed=True,
        )

        outcome = ChecklistService.complete(loaded, actor=self.hr)

        self.assertTrue(outcome.is_blocked)
        self.assertEqual(outcome.reason, 'Tasks can only be completed on active processes.')
        self.laptop.refresh_from_db()
        self.assertFalse(self.laptop.is_completed)

    def test_prerequisite_reopened_after_load_blocks_completion(self):
        cards = ChecklistItemFactory(
            process=self.process, task_name='Disable access cards', depends_on_task=self.laptop,
        )
        ChecklistService.complete(self.laptop, actor=self.it_user)
        loaded = ChecklistItem.objects.get(pk=cards.pk)
        ChecklistService.uncomplete(self.laptop, actor=self.it_user)

        outcome = ChecklistService.complete(loaded, actor=self.hr)

        self.assertTrue(outcome.is_blocked)
        cards.refresh_from_db()
        self.assertFalse(cards.is_completed)

    def test_bulk_complete_skips_process_closed_after_lookup(self):
        other = ChecklistItemFactory(process=ActiveProcessFactory())
        original = ChecklistService._lock_process

        def close_first_process(item):
            OffboardingProcess.objects.filter(pk=self.process.pk).update(
                status=OffboardingProcess.STATUS_CLOSED, is_closed=True,
            )
            return original(item)

        with mock.patch.object(ChecklistService, '_lock_process', side_effect=close_first_process):
            result = ChecklistService.bulk_complete([self.laptop.pk, other.pk], actor=self.hr)

        self.assertEqual(result['completed_ids'], [other.pk])
        self.assertEqual(result['skipped'], 1)
        self.laptop.refresh_from_db()
        self.assertFalse(self.laptop.is_completed)
