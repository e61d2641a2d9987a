"""Offboarding Admin Configuration"""

from django.contrib import admin
from .models import (
    Department, TaskTemplate, OffboardingProcess, ChecklistItem,
    TaskComment, OffboardingDocument
)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'email_address', 'manager_name', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'email_address', 'manager_name']


@admin.register(TaskTemplate)
class TaskTemplateAdmin(admin.ModelAdmin):
    list_display = [
        'task_name', 'department', 'days_from_last_working_day',
        'is_required', 'is_active', 'depends_on_template'
    ]
    list_filter = ['department', 'is_required', 'is_active']
    search_fields = ['task_name', 'description']
    raw_id_fields = ['depends_on_template']


class ChecklistItemInline(admin.TabularInline):
    model = ChecklistItem
    fk_name = 'process'
    extra = 0
    fields = ['task_name', 'department', 'due_date', 'is_completed', 'completed_by', 'depends_on_task']
    readonly_fields = ['task_name', 'department', 'due_date', 'completed_by', 'depends_on_task']
    can_delete = False


class OffboardingDocumentInline(admin.TabularInline):
    model = OffboardingDocument
    extra = 0
    fields = ['file_name', 'document_type', 'file_size', 'uploaded_by']
    readonly_fields = ['file_name', 'file_size', 'uploaded_by']


@admin.register(OffboardingProcess)
class OffboardingProcessAdmin(admin.ModelAdmin):
    list_display = [
        'employee_name', 'job_title', 'last_working_day', 'status',
        'is_closed', 'initiated_by', 'process_start_date'
    ]
    list_filter = ['status', 'is_closed', 'process_start_date']
    search_fields = ['employee_name', 'job_title', 'initiated_by']
    date_hierarchy = 'process_start_date'
    readonly_fields = [
        'version', 'approved_by', 'approved_at', 'rejected_by', 'rejected_at',
        'closed_by', 'closed_at', 'created_at', 'updated_at'
    ]
    inlines = [ChecklistItemInline, OffboardingDocumentInline]

    fieldsets = (
        ('Employee', {
            'fields': ('employee_name', 'job_title', 'employment_start_date', 'last_working_day')
        }),
        ('Workflow', {
            'fields': ('status', 'is_closed', 'initiated_by', 'process_start_date', 'rejection_reason')
        }),
        ('Audit', {
            'fields': (
                'approved_by', 'approved_at', 'rejected_by', 'rejected_at',
                'closed_by', 'closed_at', 'version', 'created_at', 'updated_at'
            ),
            'classes': ('collapse',)
        }),
    )


class TaskCommentInline(admin.TabularInline):
    model = TaskComment
    extra = 0
    readonly_fields = ['comment', 'created_by', 'created_at']
    can_delete = False


@admin.register(ChecklistItem)
class ChecklistItemAdmin(admin.ModelAdmin):
    list_display = ['task_name', 'process', 'department', 'due_date', 'is_completed', 'completed_by']
    list_filter = ['department', 'is_completed', 'is_required']
    search_fields = ['task_name', 'process__employee_name']
    raw_id_fields = ['process', 'template', 'depends_on_task']
    readonly_fields = ['version']
    inlines = [TaskCommentInline]
