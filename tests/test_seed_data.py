"""
Default departments and templates.
"""
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from apps.authentication.models import User
from apps.offboarding.models import Department, TaskTemplate


class SeedOffboardingTests(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_offboarding', stdout=StringIO())
        call_command('seed_offboarding', stdout=StringIO())

        self.assertEqual(Department.objects.count(), 4)
        self.assertEqual(TaskTemplate.objects.count(), 10)
        cards = TaskTemplate.objects.get(task_name='Disable access cards and accounts')
        self.assertEqual(cards.depends_on_template.task_name, 'Return laptop and hardware')

    def test_demo_users(self):
        call_command('seed_offboarding', '--with-users', stdout=StringIO())

        self.assertEqual(
            dict(User.objects.values_list('email', 'role')),
            {'admin@company.co.za': 'admin', 'hr@company.co.za': 'hr', 'user@company.co.za': 'user'},
        )
        self.assertTrue(User.objects.get(email='hr@company.co.za').check_password('ChangeMe123!'))
