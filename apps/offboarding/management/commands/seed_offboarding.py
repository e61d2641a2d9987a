"""
Seed Offboarding - default departments and task templates
Run with: python manage.py seed_offboarding
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.authentication.models import User
from apps.offboarding.models import Department, TaskTemplate

DEPARTMENTS = [
    ('IT', 'it@company.co.za', 'Information Technology Department'),
    ('Human Capital', 'hr@company.co.za', 'Human Resources Department'),
    ('Finance', 'finance@company.co.za', 'Finance Department'),
    ('Payroll', 'payroll@company.co.za', 'Payroll Department'),
]

# (task name, department, days from last working day, depends on)
TEMPLATES = [
    ('Return laptop and hardware', 'IT', 0, None),
    ('Disable access cards and accounts', 'IT', 0, 'Return laptop and hardware'),
    ('Update team distribution lists', 'IT', 1, 'Disable access cards and accounts'),
    ('Clear staff advances', 'Payroll', -5, None),
    ('Process final pay calculation', 'Payroll', 0, 'Clear staff advances'),
    ('Credit card reconciliation', 'Finance', 0, None),
    ('Knowledge transfer documentation', 'Human Capital', -3, None),
    ('Conduct exit interview', 'Human Capital', -1, None),
    ('Collect company property', 'Human Capital', 0, None),
    ('Update termination on SAP & ESS', 'Human Capital', 0, 'Conduct exit interview'),
]

DEMO_USERS = [
    ('admin@company.co.za', 'System', 'Administrator', User.ROLE_ADMIN),
    ('hr@company.co.za', 'HR', 'Manager', User.ROLE_HR),
    ('user@company.co.za', 'Regular', 'User', User.ROLE_USER),
]


class Command(BaseCommand):
    help = 'Create the default offboarding departments and task templates (safe to re-run)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--with-users',
            action='store_true',
            help='Also create admin, HR and regular demo accounts',
        )
        parser.add_argument(
            '--password',
            type=str,
            default='ChangeMe123!',
            help='Password for newly created demo accounts',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created_departments = 0
        for name, email, description in DEPARTMENTS:
            _, created = Department.objects.get_or_create(
                name=name,
                defaults={'email_address': email, 'description': description, 'created_by': 'System'},
            )
            created_departments += int(created)

        templates = {}
        created_templates = 0
        for task_name, department, offset, _ in TEMPLATES:
            template, created = TaskTemplate.objects.get_or_create(
                task_name=task_name,
                department=department,
                defaults={
                    'days_from_last_working_day': offset,
                    'is_required': True,
                    'created_by': 'System',
                },
            )
            templates[task_name] = template
            created_templates += int(created)

        for task_name, _, _, parent in TEMPLATES:
            template = templates[task_name]
            if parent and template.depends_on_template_id is None:
                template.depends_on_template = templates[parent]
                template.full_clean()
                template.save(update_fields=['depends_on_template', 'updated_at'])

        self.stdout.write(self.style.SUCCESS(
            f'Departments: {created_departments} created, templates: {created_templates} created'
        ))

        if options['with_users']:
            for email, first_name, last_name, role in DEMO_USERS:
                if User.objects.filter(email__iexact=email).exists():
                    continue
                User.objects.create_user(
                    email=email,
                    password=options['password'],
                    first_name=first_name,
                    last_name=last_name,
                    role=role,
                    is_staff=role == User.ROLE_ADMIN,
                )
                self.stdout.write(f'  Created {role} user {email}')
