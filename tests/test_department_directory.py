"""
Department email routing.
"""
from django.test import TestCase, override_settings

from apps.offboarding.services import DepartmentDirectory
from .factories import DepartmentFactory


class DepartmentDirectoryTests(TestCase):

    def test_active_department_row_wins(self):
        DepartmentFactory(name='IT', email_address='servicedesk@company.co.za')

        self.assertEqual(DepartmentDirectory().email_for('it'), 'servicedesk@company.co.za')

    def test_inactive_department_falls_back_to_table(self):
        DepartmentFactory(name='IT', email_address='servicedesk@company.co.za', is_active=False)

        self.assertEqual(DepartmentDirectory().email_for('IT'), 'it@company.co.za')

    def test_fallback_table_is_case_insensitive(self):
        self.assertEqual(DepartmentDirectory().email_for('Human Capital'), 'hr@company.co.za')
        self.assertEqual(DepartmentDirectory().email_for('  FINANCE '), 'finance@company.co.za')

    def test_unknown_department_uses_default(self):
        self.assertEqual(DepartmentDirectory().email_for('Facilities'), 'hr@company.co.za')
        self.assertEqual(DepartmentDirectory().email_for(''), 'hr@company.co.za')

    def test_injected_table_and_default(self):
        directory = DepartmentDirectory(
            fallback={'Legal': 'legal@company.co.za'}, default='ops@company.co.za',
        )

        self.assertEqual(directory.email_for('legal'), 'legal@company.co.za')
        self.assertEqual(directory.email_for('IT'), 'ops@company.co.za')

    @override_settings(OFFBOARDING_DEPARTMENT_EMAILS={'it': 'helpdesk@company.co.za'})
    def test_table_comes_from_settings(self):
        self.assertEqual(DepartmentDirectory().email_for('IT'), 'helpdesk@company.co.za')
