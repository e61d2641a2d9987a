"""
Task template maintenance: dependency validation, retirement and CSV exchange.
"""
from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.offboarding.models import TaskTemplate
from apps.offboarding.services import TemplateService
from apps.offboarding.services.templates import CSV_HEADER
from .factories import DepartmentFactory, HRUserFactory, TaskTemplateFactory


class TemplateDependencyTests(TestCase):

    def setUp(self):
        self.hr = HRUserFactory()
        self.laptop = TaskTemplateFactory(task_name='Return laptop')
        self.cards = TaskTemplateFactory(task_name='Disable access cards', depends_on_template=self.laptop)
        self.lists = TaskTemplateFactory(task_name='Update distribution lists', depends_on_template=self.cards)

    def test_create_records_author(self):
        template = TemplateService.create(
            actor=self.hr,
            data={'task_name': 'Exit interview', 'department': 'Human Capital', 'days_from_last_working_day': -2},
        )

        self.assertEqual(template.created_by, self.hr.email)
        self.assertTrue(template.is_active)

    def test_direct_cycle_is_rejected(self):
        with self.assertRaises(ValidationError):
            TemplateService.update(self.laptop, {'depends_on_template': self.cards})

        self.laptop.refresh_from_db()
        self.assertIsNone(self.laptop.depends_on_template_id)

    def test_long_cycle_is_rejected(self):
        with self.assertRaises(ValidationError):
            TemplateService.update(self.laptop, {'depends_on_template': self.lists})

    def test_self_dependency_is_rejected(self):
        with self.assertRaises(ValidationError):
            TemplateService.update(self.laptop, {'depends_on_template': self.laptop})

    def test_template_with_dependents_cannot_be_deleted(self):
        with self.assertRaisesMessage(ValidationError, 'Cannot delete template: 1 other template(s) depend on it.'):
            TemplateService.delete(self.laptop)

    def test_leaf_template_can_be_deleted(self):
        TemplateService.delete(self.lists)

        self.assertFalse(TaskTemplate.objects.filter(pk=self.lists.pk).exists())

    def test_deactivate_keeps_the_row(self):
        TemplateService.deactivate(self.cards)

        self.cards.refresh_from_db()
        self.assertFalse(self.cards.is_active)


class DepartmentDeletionTests(TestCase):

    def test_department_owning_active_templates_is_kept(self):
        department = DepartmentFactory(name='Finance')
        TaskTemplateFactory(department='finance')

        with self.assertRaisesMessage(ValidationError, '1 active template(s) are assigned to it'):
            TemplateService.delete_department(department)

    def test_department_with_only_retired_templates_can_go(self):
        department = DepartmentFactory(name='Finance')
        TaskTemplateFactory(department='Finance', is_active=False)

        TemplateService.delete_department(department)

        self.assertFalse(type(department).objects.filter(pk=department.pk).exists())


class TemplateCsvTests(TestCase):

    def setUp(self):
        self.hr = HRUserFactory()

    def test_export_writes_header_and_dependency_names(self):
        laptop = TaskTemplateFactory(task_name='Return laptop', department='IT', days_from_last_working_day=-1)
        TaskTemplateFactory(task_name='Disable access cards', department='IT', depends_on_template=laptop)

        lines = TemplateService.export_csv(TaskTemplate.objects.order_by('pk')).splitlines()

        self.assertEqual(lines[0], ','.join(CSV_HEADER))
        self.assertEqual(lines[1], 'Return laptop,IT,,-1,True,True,')
        self.assertEqual(lines[2], 'Disable access cards,IT,,0,True,True,Return laptop')

    def test_import_creates_updates_and_links(self):
        TaskTemplateFactory(task_name='Return laptop', department='IT', days_from_last_working_day=0)
        content = (
            '\ufeffTaskName,Department,Description,DaysFromLastWorkingDay,IsRequired,IsActive,DependsOn\n'
            'return laptop,IT,Hand in at service desk,-1,true,true,\n'
            'Disable access cards,IT,,0,yes,1,Return laptop\n'
            'Process final pay,Payroll,,7,false,,\n'
        )

        result = TemplateService.import_csv(content, actor=self.hr)

        self.assertEqual(result['created'], 2)
        self.assertEqual(result['updated'], 1)
        self.assertEqual(result['errors'], [])
        laptop = TaskTemplate.objects.get(task_name='Return laptop')
        self.assertEqual(laptop.days_from_last_working_day, -1)
        self.assertEqual(laptop.description, 'Hand in at service desk')
        cards = TaskTemplate.objects.get(task_name='Disable access cards')
        self.assertEqual(cards.depends_on_template, laptop)
        pay = TaskTemplate.objects.get(task_name='Process final pay')
        self.assertFalse(pay.is_required)
        self.assertTrue(pay.is_active)

    def test_bad_rows_are_reported_and_skipped(self):
        content = (
            'TaskName,Department,DaysFromLastWorkingDay,DependsOn\n'
            ',IT,0,\n'
            'Return laptop,IT,soon,\n'
            'Disable access cards,IT,0,Nonexistent\n'
        )

        result = TemplateService.import_csv(content, actor=self.hr)

        self.assertEqual(result['created'], 1)
        self.assertEqual(result['skipped'], 2)
        self.assertEqual(len(result['errors']), 3)
        self.assertIn("dependency 'Nonexistent' not found", result['errors'][2])

    def test_import_refuses_cycles(self):
        a = TaskTemplateFactory(task_name='A', department='IT')
        TaskTemplateFactory(task_name='B', department='IT', depends_on_template=a)
        content = 'TaskName,Department,DependsOn\nA,IT,B\n'

        result = TemplateService.import_csv(content, actor=self.hr)

        self.assertEqual(result['updated'], 1)
        self.assertEqual(len(result['errors']), 1)
        a.refresh_from_db()
        self.assertIsNone(a.depends_on_template_id)

    def test_missing_columns_fail_the_whole_file(self):
        with self.assertRaises(ValidationError):
            TemplateService.import_csv('Name,Dept\nx,y\n', actor=self.hr)
