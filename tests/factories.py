import datetime

import factory
from django.utils import timezone

from apps.authentication.models import User
from apps.offboarding.models import ChecklistItem, Department, OffboardingProcess, TaskTemplate


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        django_get_or_create = ('email',)

    email = factory.Sequence(lambda n: f'user{n}@company.co.za')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    role = User.ROLE_USER
    password = factory.django.Password('testpass123')


class HRUserFactory(UserFactory):
    email = factory.Sequence(lambda n: f'hr{n}@company.co.za')
    role = User.ROLE_HR


class AdminUserFactory(UserFactory):
    email = factory.Sequence(lambda n: f'admin{n}@company.co.za')
    role = User.ROLE_ADMIN


class DepartmentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Department
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f'Department {n}')
    email_address = factory.LazyAttribute(lambda o: f"{o.name.lower().replace(' ', '.')}@company.co.za")


class TaskTemplateFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = TaskTemplate

    task_name = factory.Sequence(lambda n: f'Task {n}')
    department = 'IT'
    days_from_last_working_day = 0
    is_required = True
    is_active = True


class OffboardingProcessFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OffboardingProcess

    employee_name = factory.Faker('name')
    job_title = 'Analyst'
    employment_start_date = datetime.date(2020, 1, 6)
    last_working_day = factory.LazyFunction(lambda: timezone.localdate() + datetime.timedelta(days=14))
    initiated_by = factory.Sequence(lambda n: f'manager{n}@company.co.za')
    status = OffboardingProcess.STATUS_PENDING_APPROVAL


class ActiveProcessFactory(OffboardingProcessFactory):
    status = OffboardingProcess.STATUS_ACTIVE
    approved_by = 'hr@company.co.za'
    approved_at = factory.LazyFunction(timezone.now)


class ChecklistItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ChecklistItem

    process = factory.SubFactory(ActiveProcessFactory)
    task_name = factory.Sequence(lambda n: f'Checklist task {n}')
    department = 'IT'
    due_date = factory.LazyAttribute(lambda o: o.process.last_working_day)
