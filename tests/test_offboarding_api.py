"""
Offboarding REST API: visibility, workflow actions and response envelopes.
"""
import datetime
import io
import zipfile

from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework import status
from rest_framework.test import APITestCase

from apps.offboarding.models import ChecklistItem, OffboardingDocument, OffboardingProcess, TaskTemplate
from apps.offboarding.services import ChecklistService
from .factories import (
    ActiveProcessFactory, ChecklistItemFactory, HRUserFactory, OffboardingProcessFactory,
    TaskTemplateFactory, UserFactory,
)

PROCESSES = '/api/v1/offboarding/processes/'
TASKS = '/api/v1/offboarding/tasks/'
TEMPLATES = '/api/v1/offboarding/templates/'


class ProcessApiTests(APITestCase):

    def setUp(self):
        self.hr = HRUserFactory(email='hr.lead@company.co.za')
        self.manager = UserFactory(email='manager@company.co.za')
        TaskTemplateFactory(task_name='Return laptop', department='IT')
        TaskTemplateFactory(task_name='Process final pay', department='Payroll')

    def test_requires_authentication(self):
        response = self.client.get(PROCESSES)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_any_user_can_submit_a_process(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(PROCESSES, {
            'employee_name': 'Bongani Mthembu',
            'job_title': 'Accountant',
            'employment_start_date': '2018-04-03',
            'last_working_day': '2026-12-15',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['status'], OffboardingProcess.STATUS_PENDING_APPROVAL)
        self.assertEqual(response.data['data']['initiated_by'], 'manager@company.co.za')

    def test_invalid_dates_are_rejected(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(PROCESSES, {
            'employee_name': 'Bongani Mthembu',
            'job_title': 'Accountant',
            'employment_start_date': '2026-12-15',
            'last_working_day': '2018-04-03',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_users_see_only_their_own_processes(self):
        mine = OffboardingProcessFactory(initiated_by='manager@company.co.za')
        OffboardingProcessFactory(initiated_by='someone.else@company.co.za')
        self.client.force_authenticate(self.manager)

        response = self.client.get(PROCESSES)

        self.assertEqual([row['id'] for row in response.data['data']], [mine.pk])

    def test_department_users_see_processes_with_their_tasks(self):
        process = ActiveProcessFactory(initiated_by='someone.else@company.co.za')
        ChecklistItemFactory(process=process, department='IT')
        ActiveProcessFactory(initiated_by='someone.else@company.co.za')
        self.client.force_authenticate(UserFactory(role='it'))

        response = self.client.get(PROCESSES)

        self.assertEqual([row['id'] for row in response.data['data']], [process.pk])

    def test_hidden_process_is_not_found(self):
        process = OffboardingProcessFactory(initiated_by='someone.else@company.co.za')
        self.client.force_authenticate(self.manager)

        response = self.client.get(f'{PROCESSES}{process.pk}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_hr_approves_and_gets_the_checklist(self):
        process = OffboardingProcessFactory(initiated_by='manager@company.co.za')
        self.client.force_authenticate(self.hr)

        response = self.client.post(f'{PROCESSES}{process.pk}/approve/', {'version': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], OffboardingProcess.STATUS_ACTIVE)
        self.assertEqual(len(response.data['data']['items']), 2)
        self.assertEqual(response.data['data']['version'], 2)

    def test_initiator_cannot_approve(self):
        process = OffboardingProcessFactory(initiated_by='manager@company.co.za')
        self.client.force_authenticate(self.manager)

        response = self.client.post(f'{PROCESSES}{process.pk}/approve/', format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Only HR or Admin users can approve processes.')

    def test_stale_version_is_a_conflict(self):
        process = OffboardingProcessFactory(initiated_by='manager@company.co.za')
        OffboardingProcess.objects.filter(pk=process.pk).update(version=4)
        self.client.force_authenticate(self.hr)

        response = self.client.post(f'{PROCESSES}{process.pk}/approve/', {'version': 3}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(ChecklistItem.objects.filter(process=process).exists())

    def test_reject_then_edit_is_blocked(self):
        process = OffboardingProcessFactory(initiated_by='manager@company.co.za')
        self.client.force_authenticate(self.hr)
        self.client.post(f'{PROCESSES}{process.pk}/reject/', {'reason': 'Counter offer accepted'}, format='json')

        self.client.force_authenticate(self.manager)
        response = self.client.patch(f'{PROCESSES}{process.pk}/', {'job_title': 'Lead'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Only draft or pending processes can be edited.')

    def test_close_requires_all_tasks(self):
        process = ActiveProcessFactory()
        item = ChecklistItemFactory(process=process)
        self.client.force_authenticate(self.hr)

        blocked = self.client.post(f'{PROCESSES}{process.pk}/close/', format='json')
        ChecklistService.complete(item, actor=self.hr)
        closed = self.client.post(f'{PROCESSES}{process.pk}/close/', format='json')

        self.assertEqual(blocked.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(closed.status_code, status.HTTP_200_OK)
        self.assertTrue(closed.data['data']['is_closed'])

    def test_delete_needs_typed_confirmation(self):
        process = OffboardingProcessFactory()
        self.client.force_authenticate(self.hr)

        refused = self.client.post(f'{PROCESSES}{process.pk}/delete/', {'confirmation': 'ok'}, format='json')
        deleted = self.client.post(f'{PROCESSES}{process.pk}/delete/', {'confirmation': 'DELETE'}, format='json')

        self.assertEqual(refused.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(deleted.status_code, status.HTTP_200_OK)
        self.assertFalse(OffboardingProcess.objects.filter(pk=process.pk).exists())

    def test_filter_by_status_and_search(self):
        ActiveProcessFactory(employee_name='Ayanda Zulu')
        OffboardingProcessFactory(employee_name='Ayanda Smith')
        self.client.force_authenticate(self.hr)

        response = self.client.get(PROCESSES, {'status': 'active', 'search': 'ayanda'})

        self.assertEqual([row['employee_name'] for row in response.data['data']], ['Ayanda Zulu'])

    def test_export_csv(self):
        ActiveProcessFactory(employee_name='Ayanda Zulu')
        self.client.force_authenticate(self.hr)

        response = self.client.get(f'{PROCESSES}export/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('Ayanda Zulu', response.content.decode())


class TaskApiTests(APITestCase):

    def setUp(self):
        self.hr = HRUserFactory()
        self.it_user = UserFactory(role='it')
        self.process = ActiveProcessFactory()
        self.laptop = ChecklistItemFactory(process=self.process, task_name='Return laptop', department='IT')
        self.cards = ChecklistItemFactory(
            process=self.process, task_name='Disable access cards', department='IT',
            depends_on_task=self.laptop,
        )

    def test_complete_with_comment(self):
        self.client.force_authenticate(self.it_user)

        response = self.client.post(
            f'{TASKS}{self.laptop.pk}/complete/', {'comment': 'Collected', 'version': 1}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['is_completed'])
        self.assertEqual(response.data['data']['version'], 2)

    def test_complete_blocked_by_dependency(self):
        self.client.force_authenticate(self.it_user)

        response = self.client.post(f'{TASKS}{self.cards.pk}/complete/', format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data['error']['message'],
            "This task cannot be completed until 'Return laptop' is completed first.",
        )

    def test_complete_with_stale_version(self):
        self.client.force_authenticate(self.it_user)
        self.client.post(f'{TASKS}{self.laptop.pk}/complete/', {'version': 1}, format='json')
        self.client.post(f'{TASKS}{self.laptop.pk}/uncomplete/', {'version': 2}, format='json')

        response = self.client.post(f'{TASKS}{self.laptop.pk}/complete/', {'version': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_other_departments_cannot_see_the_task(self):
        self.client.force_authenticate(UserFactory(role='finance'))

        response = self.client.post(f'{TASKS}{self.laptop.pk}/complete/', format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_bulk_complete(self):
        self.client.force_authenticate(self.hr)

        response = self.client.post(
            f'{TASKS}bulk-complete/', {'task_ids': [self.laptop.pk, self.cards.pk]}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['completed'], 2)
        self.assertEqual(response.data['message'], '2 task(s) marked as completed.')

    def test_comments_round_trip(self):
        self.client.force_authenticate(self.it_user)

        created = self.client.post(f'{TASKS}{self.laptop.pk}/comments/', {'comment': 'Courier booked'}, format='json')
        listed = self.client.get(f'{TASKS}{self.laptop.pk}/comments/')

        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual([c['comment'] for c in listed.data['data']], ['Courier booked'])

    def test_dependency_cycle_is_refused(self):
        self.client.force_authenticate(self.hr)

        response = self.client.post(
            f'{TASKS}{self.laptop.pk}/dependency/', {'depends_on_task': self.cards.pk}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_hr_edits_dependencies(self):
        self.client.force_authenticate(self.it_user)

        response = self.client.post(
            f'{TASKS}{self.cards.pk}/dependency/', {'depends_on_task': None}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_open_tasks_for_selected_processes(self):
        other = ActiveProcessFactory()
        ChecklistItemFactory(process=other)
        self.client.force_authenticate(self.hr)

        response = self.client.get(f'{PROCESSES}tasks/', {'ids': str(self.process.pk)})

        self.assertEqual(
            {row['id'] for row in response.data['data']}, {self.laptop.pk, self.cards.pk},
        )


class TemplateApiTests(APITestCase):

    def setUp(self):
        self.hr = HRUserFactory()
        self.laptop = TaskTemplateFactory(task_name='Return laptop')

    def test_regular_users_can_read_but_not_write(self):
        self.client.force_authenticate(UserFactory())

        listed = self.client.get(TEMPLATES)
        created = self.client.post(TEMPLATES, {'task_name': 'X', 'department': 'IT'}, format='json')

        self.assertEqual(listed.status_code, status.HTTP_200_OK)
        self.assertEqual(created.status_code, status.HTTP_403_FORBIDDEN)

    def test_cycle_is_rejected(self):
        cards = TaskTemplateFactory(task_name='Disable access cards', depends_on_template=self.laptop)
        self.client.force_authenticate(self.hr)

        response = self.client.patch(
            f'{TEMPLATES}{self.laptop.pk}/', {'depends_on_template': cards.pk}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_with_dependents_is_refused(self):
        TaskTemplateFactory(task_name='Disable access cards', depends_on_template=self.laptop)
        self.client.force_authenticate(self.hr)

        response = self.client.delete(f'{TEMPLATES}{self.laptop.pk}/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(TaskTemplate.objects.filter(pk=self.laptop.pk).exists())

    def test_import_csv_upload(self):
        self.client.force_authenticate(self.hr)
        upload = SimpleUploadedFile(
            'templates.csv',
            b'TaskName,Department,DaysFromLastWorkingDay,DependsOn\nDisable access cards,IT,0,Return laptop\n',
            content_type='text/csv',
        )

        response = self.client.post(f'{TEMPLATES}import/', {'file': upload}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['created'], 1)
        self.assertEqual(
            TaskTemplate.objects.get(task_name='Disable access cards').depends_on_template, self.laptop,
        )


class DocumentApiTests(APITestCase):

    def setUp(self):
        self.hr = HRUserFactory()
        self.process = ActiveProcessFactory(employee_name='Zanele Dube')
        self.client.force_authenticate(self.hr)

    def _upload(self, name, content, document_type):
        return self.client.post(
            f'{PROCESSES}{self.process.pk}/documents/',
            {'file': SimpleUploadedFile(name, content, content_type='text/plain'), 'document_type': document_type},
            format='multipart',
        )

    def test_upload_marks_required_document_complete(self):
        response = self._upload('exit.txt', b'Exit interview notes', OffboardingDocument.TYPE_EXIT_INTERVIEW)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['data']['is_required'])
        self.assertTrue(response.data['data']['is_completed'])

        listed = self.client.get(f'{PROCESSES}{self.process.pk}/documents/')
        self.assertEqual(
            listed.data['data']['missing_required'],
            [OffboardingDocument.TYPE_ASSET_RETURN_FORM, OffboardingDocument.TYPE_CLEARANCE_CERTIFICATE],
        )

    def test_disallowed_extension_is_rejected(self):
        response = self._upload('payload.exe', b'MZ....', OffboardingDocument.TYPE_OTHER)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(OffboardingDocument.objects.exists())

    def test_download_all_zips_every_document(self):
        self._upload('notes.txt', b'first', OffboardingDocument.TYPE_OTHER)
        self._upload('notes.txt', b'second', OffboardingDocument.TYPE_OTHER)

        response = self.client.get(f'{PROCESSES}{self.process.pk}/documents/download-all/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/zip')
        archive = zipfile.ZipFile(io.BytesIO(response.content))
        self.assertEqual(len(archive.namelist()), 2)
        self.assertIn('notes.txt', archive.namelist())


class AnalyticsApiTests(APITestCase):

    def test_overview_for_hr(self):
        process = ActiveProcessFactory()
        ChecklistItemFactory(process=process, due_date=datetime.date(2020, 1, 1))
        ChecklistItemFactory(process=process, is_completed=True)
        OffboardingProcessFactory()
        self.client.force_authenticate(HRUserFactory())

        response = self.client.get('/api/v1/offboarding/analytics/overview/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['active'], 1)
        self.assertEqual(data['pending'], 1)
        self.assertEqual(data['overdue_tasks'], 1)
        self.assertEqual(data['average_progress'], 50.0)

    def test_hidden_from_regular_users(self):
        self.client.force_authenticate(UserFactory())

        response = self.client.get('/api/v1/offboarding/analytics/overview/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
