"""
Offboarding Models - Employee Departure Checklists

- Department routing directory
- Reusable task templates with optional dependencies
- Offboarding processes moving through an approval workflow
- Department-owned checklist items with dependency gating
- Completion comments and document attachments
"""

import os
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.core.models import TimeStampedModel, VersionedModel
from .dependencies import would_create_cycle


class Department(TimeStampedModel):
    """Department that owns checklist tasks and receives their emails."""

    name = models.CharField(max_length=100, unique=True)
    email_address = models.EmailField(max_length=200)
    manager_name = models.CharField(max_length=100, blank=True)
    manager_email = models.EmailField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)
    description = models.CharField(max_length=500, blank=True)
    created_by = models.CharField(max_length=256, blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class TaskTemplate(TimeStampedModel):
    """
    Reusable task definition. Approving a process copies every active
    template into a checklist item due ``days_from_last_working_day`` days
    after the employee's last working day.
    """

    task_name = models.CharField(max_length=200)
    department = models.CharField(max_length=100, db_index=True)
    description = models.CharField(max_length=1000, blank=True)
    days_from_last_working_day = models.IntegerField(
        default=0,
        help_text="Negative values schedule the task before the last working day."
    )
    is_required = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True, db_index=True)
    depends_on_template = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='dependent_templates'
    )
    created_by = models.CharField(max_length=256, blank=True)

    class Meta:
        ordering = ['department', 'task_name']

    def __str__(self):
        return f"{self.department} - {self.task_name}"

    def clean(self):
        super().clean()
        if self.depends_on_template_id and would_create_cycle(
            self, self.depends_on_template_id, 'depends_on_template'
        ):
            raise ValidationError({
                'depends_on_template': 'This dependency would create a circular chain of templates.'
            })


class OffboardingProcess(VersionedModel):
    """One employee's departure, from request through closure."""

    STATUS_DRAFT = 'draft'
    STATUS_PENDING_APPROVAL = 'pending_approval'
    STATUS_APPROVED = 'approved'
    STATUS_ACTIVE = 'active'
    STATUS_CLOSED = 'closed'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PENDING_APPROVAL, 'Pending Approval'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_CLOSED, 'Closed'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    EDITABLE_STATUSES = (STATUS_DRAFT, STATUS_PENDING_APPROVAL)

    employee_name = models.CharField(max_length=100)
    job_title = models.CharField(max_length=50)
    employment_start_date = models.DateField()
    last_working_day = models.DateField()
    process_start_date = models.DateField(default=timezone.localdate)
    initiated_by = models.CharField(max_length=256, db_index=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING_APPROVAL,
        db_index=True
    )
    is_closed = models.BooleanField(default=False)

    approved_by = models.CharField(max_length=256, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.CharField(max_length=256, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)
    closed_by = models.CharField(max_length=256, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ['-process_start_date', '-id']
        verbose_name_plural = 'Offboarding processes'

    def __str__(self):
        return f"{self.employee_name} ({self.get_status_display()})"

    def clean(self):
        super().clean()
        if (
            self.employment_start_date
            and self.last_working_day
            and self.last_working_day <= self.employment_start_date
        ):
            raise ValidationError({
                'last_working_day': 'Last working day must be after the employment start date.'
            })

    # ---------------------------------------------------------------- derived
    @property
    def years_of_service(self):
        if self.is_closed and self.closed_at:
            end = timezone.localdate(self.closed_at)
        else:
            end = timezone.localdate()
        return round((end - self.employment_start_date).days / 365.25, 1)

    @property
    def process_duration_days(self):
        return (timezone.localdate() - self.process_start_date).days

    @property
    def total_tasks_count(self):
        return len(self.items.all())

    @property
    def completed_tasks_count(self):
        return sum(1 for item in self.items.all() if item.is_completed)

    @property
    def progress_percent(self):
        total = self.total_tasks_count
        if not total:
            return 0.0
        return round(self.completed_tasks_count / total * 100, 1)

    @property
    def overdue_tasks_count(self):
        return sum(1 for item in self.items.all() if item.is_overdue)

    @property
    def status_text(self):
        if self.status == self.STATUS_ACTIVE:
            if self.is_closed:
                return 'Completed'
            return 'Overdue' if self.overdue_tasks_count else 'On Track'
        return self.get_status_display()

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE and not self.is_closed

    @property
    def can_be_edited(self):
        return self.status in self.EDITABLE_STATUSES

    @property
    def can_be_approved(self):
        return self.status == self.STATUS_PENDING_APPROVAL

    @property
    def can_be_activated(self):
        return self.status == self.STATUS_APPROVED


class ChecklistItem(VersionedModel):
    """
    Department-owned task generated for a process.

    ``depends_on_task`` gates completion: the item cannot be completed while
    its dependency is open, and cannot be reopened while a dependent item is
    completed.
    """

    process = models.ForeignKey(
        OffboardingProcess,
        on_delete=models.CASCADE,
        related_name='items'
    )
    template = models.ForeignKey(
        TaskTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='generated_items'
    )
    task_name = models.CharField(max_length=200)
    department = models.CharField(max_length=100, db_index=True)
    description = models.CharField(max_length=1000, blank=True)
    is_required = models.BooleanField(default=True)
    due_date = models.DateField(null=True, blank=True, db_index=True)

    is_completed = models.BooleanField(default=False, db_index=True)
    completed_by = models.CharField(max_length=256, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    comments = models.CharField(max_length=1000, blank=True)

    depends_on_task = models.ForeignKey(
        'self',
        on_delete=models.RESTRICT,
        null=True,
        blank=True,
        related_name='dependent_tasks'
    )

    class Meta:
        ordering = ['department', 'task_name', 'id']

    def __str__(self):
        return f"{self.process.employee_name} - {self.task_name}"

    def clean(self):
        super().clean()
        if not self.depends_on_task_id:
            return
        if self.depends_on_task.process_id != self.process_id:
            raise ValidationError({'depends_on_task': 'A task can only depend on a task of the same process.'})
        if would_create_cycle(self, self.depends_on_task_id, 'depends_on_task'):
            raise ValidationError({'depends_on_task': 'This dependency would create a circular chain of tasks.'})

    @property
    def is_overdue(self):
        return bool(self.due_date) and self.due_date < timezone.localdate() and not self.is_completed

    @property
    def can_be_completed(self):
        return self.depends_on_task_id is None or self.depends_on_task.is_completed

    @property
    def days_past_due(self):
        if not self.due_date:
            return 0
        return max((timezone.localdate() - self.due_date).days, 0)


class TaskComment(models.Model):
    """Append-only audit entry for a checklist item."""

    item = models.ForeignKey(
        ChecklistItem,
        on_delete=models.CASCADE,
        related_name='task_comments'
    )
    comment = models.CharField(max_length=1000)
    created_by = models.CharField(max_length=256)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.created_by}: {self.comment[:40]}"


def document_upload_path(instance, filename):
    return os.path.join('offboarding', str(instance.process_id), filename)


class OffboardingDocument(models.Model):
    """File attached to a process (exit interview, clearance, etc.)."""

    TYPE_EXIT_INTERVIEW = 'exit_interview'
    TYPE_ASSET_RETURN_FORM = 'asset_return_form'
    TYPE_CLEARANCE_CERTIFICATE = 'clearance_certificate'
    TYPE_RESIGNATION_LETTER = 'resignation_letter'
    TYPE_OTHER = 'other'

    TYPE_CHOICES = [
        (TYPE_EXIT_INTERVIEW, 'Exit Interview'),
        (TYPE_ASSET_RETURN_FORM, 'Asset Return Form'),
        (TYPE_CLEARANCE_CERTIFICATE, 'Clearance Certificate'),
        (TYPE_RESIGNATION_LETTER, 'Resignation Letter'),
        (TYPE_OTHER, 'Other'),
    ]

    REQUIRED_TYPES = (TYPE_EXIT_INTERVIEW, TYPE_ASSET_RETURN_FORM, TYPE_CLEARANCE_CERTIFICATE)

    process = models.ForeignKey(
        OffboardingProcess,
        on_delete=models.CASCADE,
        related_name='documents'
    )
    file = models.FileField(upload_to=document_upload_path, max_length=500)
    file_name = models.CharField(max_length=255)
    document_type = models.CharField(max_length=50, choices=TYPE_CHOICES, default=TYPE_OTHER)
    file_size = models.PositiveBigIntegerField(default=0)
    content_type = models.CharField(max_length=100, blank=True)
    description = models.CharField(max_length=500, blank=True)
    is_required = models.BooleanField(default=False)
    is_completed = models.BooleanField(default=False)
    uploaded_by = models.CharField(max_length=256)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at', '-id']

    def __str__(self):
        return self.file_name

    @property
    def file_size_display(self):
        if self.file_size < 1024:
            return f"{self.file_size} B"
        if self.file_size < 1024 * 1024:
            return f"{self.file_size / 1024:.1f} KB"
        return f"{self.file_size / (1024 * 1024):.1f} MB"

