"""Offboarding Serializers"""

from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field
from drf_spectacular.types import OpenApiTypes

from apps.core.upload_validators import validate_upload as _validate_upload
from .dependencies import would_create_cycle
from .models import (
    Department, TaskTemplate, OffboardingProcess, ChecklistItem,
    TaskComment, OffboardingDocument
)


class DepartmentSerializer(serializers.ModelSerializer):
    """Serializer for departments"""

    class Meta:
        model = Department
        fields = [
            'id', 'name', 'email_address', 'manager_name', 'manager_email',
            'is_active', 'description', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']


class TaskTemplateSerializer(serializers.ModelSerializer):
    """Serializer for task templates"""
    depends_on_template_name = serializers.CharField(
        source='depends_on_template.task_name', read_only=True, allow_null=True
    )
    dependent_count = serializers.SerializerMethodField()

    class Meta:
        model = TaskTemplate
        fields = [
            'id', 'task_name', 'department', 'description',
            'days_from_last_working_day', 'is_required', 'is_active',
            'depends_on_template', 'depends_on_template_name', 'dependent_count',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    @extend_schema_field(OpenApiTypes.INT)
    def get_dependent_count(self, obj):
        return obj.dependent_templates.count()

    def validate(self, attrs):
        parent = attrs.get('depends_on_template')
        if parent is not None:
            node = self.instance or TaskTemplate()
            if node.pk is not None and parent.pk == node.pk:
                raise serializers.ValidationError({
                    'depends_on_template': 'A template cannot depend on itself.'
                })
            if would_create_cycle(node, parent.pk, 'depends_on_template'):
                raise serializers.ValidationError({
                    'depends_on_template': 'This dependency would create a circular chain of templates.'
                })
        return attrs


class TemplateImportSerializer(serializers.Serializer):
    file = serializers.FileField()


class TaskCommentSerializer(serializers.ModelSerializer):

    class Meta:
        model = TaskComment
        fields = ['id', 'item', 'comment', 'created_by', 'created_at']
        read_only_fields = ['id', 'item', 'created_by', 'created_at']


class ChecklistItemSerializer(serializers.ModelSerializer):
    """Serializer for checklist items"""
    process_employee_name = serializers.CharField(source='process.employee_name', read_only=True)
    depends_on_task_name = serializers.CharField(
        source='depends_on_task.task_name', read_only=True, allow_null=True
    )
    is_overdue = serializers.BooleanField(read_only=True)
    can_be_completed = serializers.BooleanField(read_only=True)
    days_past_due = serializers.IntegerField(read_only=True)

    class Meta:
        model = ChecklistItem
        fields = [
            'id', 'process', 'process_employee_name', 'template',
            'task_name', 'department', 'description', 'is_required', 'due_date',
            'is_completed', 'completed_by', 'completed_at', 'comments',
            'depends_on_task', 'depends_on_task_name',
            'is_overdue', 'can_be_completed', 'days_past_due',
            'version', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ChecklistItemDetailSerializer(ChecklistItemSerializer):
    """Detail serializer with comment history"""
    task_comments = TaskCommentSerializer(many=True, read_only=True)

    class Meta(ChecklistItemSerializer.Meta):
        fields = ChecklistItemSerializer.Meta.fields + ['task_comments']
        read_only_fields = fields


class CompleteTaskSerializer(serializers.Serializer):
    comment = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    version = serializers.IntegerField(required=False, min_value=1)


class VersionSerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=1)


class CommentCreateSerializer(serializers.Serializer):
    comment = serializers.CharField(max_length=1000)


class BulkCompleteSerializer(serializers.Serializer):
    task_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
    comment = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class DependencySerializer(serializers.Serializer):
    depends_on_task = serializers.PrimaryKeyRelatedField(
        queryset=ChecklistItem.objects.all(), allow_null=True
    )


class OffboardingDocumentSerializer(serializers.ModelSerializer):
    """Serializer for process documents"""
    document_type_display = serializers.CharField(source='get_document_type_display', read_only=True)
    file_size_display = serializers.CharField(read_only=True)

    class Meta:
        model = OffboardingDocument
        fields = [
            'id', 'process', 'file_name', 'document_type', 'document_type_display',
            'file_size', 'file_size_display', 'content_type', 'description',
            'is_required', 'is_completed', 'uploaded_by', 'uploaded_at'
        ]
        read_only_fields = fields


class DocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField(validators=[_validate_upload])
    document_type = serializers.ChoiceField(
        choices=OffboardingDocument.TYPE_CHOICES, default=OffboardingDocument.TYPE_OTHER
    )
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)


class OffboardingProcessListSerializer(serializers.ModelSerializer):
    """List serializer for offboarding processes"""
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    status_text = serializers.CharField(read_only=True)
    total_tasks_count = serializers.IntegerField(read_only=True)
    completed_tasks_count = serializers.IntegerField(read_only=True)
    progress_percent = serializers.FloatField(read_only=True)
    overdue_tasks_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = OffboardingProcess
        fields = [
            'id', 'employee_name', 'job_title', 'employment_start_date',
            'last_working_day', 'process_start_date', 'initiated_by',
            'status', 'status_display', 'status_text', 'is_closed',
            'total_tasks_count', 'completed_tasks_count', 'progress_percent',
            'overdue_tasks_count', 'version', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OffboardingProcessDetailSerializer(OffboardingProcessListSerializer):
    """Detail serializer with checklist and documents"""
    years_of_service = serializers.FloatField(read_only=True)
    process_duration_days = serializers.IntegerField(read_only=True)
    can_be_edited = serializers.BooleanField(read_only=True)
    can_be_approved = serializers.BooleanField(read_only=True)
    can_be_activated = serializers.BooleanField(read_only=True)
    items = ChecklistItemSerializer(many=True, read_only=True)
    documents = OffboardingDocumentSerializer(many=True, read_only=True)
    missing_documents = serializers.SerializerMethodField()

    class Meta(OffboardingProcessListSerializer.Meta):
        fields = OffboardingProcessListSerializer.Meta.fields + [
            'years_of_service', 'process_duration_days',
            'can_be_edited', 'can_be_approved', 'can_be_activated',
            'approved_by', 'approved_at', 'rejected_by', 'rejected_at',
            'rejection_reason', 'closed_by', 'closed_at',
            'items', 'documents', 'missing_documents'
        ]
        read_only_fields = fields

    @extend_schema_field(serializers.ListField(child=serializers.CharField()))
    def get_missing_documents(self, obj):
        from .services import DocumentService

        return DocumentService.missing_required_types(obj)


class OffboardingProcessWriteSerializer(serializers.ModelSerializer):
    """Create/update serializer; workflow fields are set by the lifecycle service"""

    class Meta:
        model = OffboardingProcess
        fields = ['employee_name', 'job_title', 'employment_start_date', 'last_working_day']

    def validate(self, attrs):
        start = attrs.get('employment_start_date', getattr(self.instance, 'employment_start_date', None))
        last_day = attrs.get('last_working_day', getattr(self.instance, 'last_working_day', None))
        if start and last_day and last_day <= start:
            raise serializers.ValidationError({
                'last_working_day': 'Last working day must be after the employment start date.'
            })
        return attrs


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)
    version = serializers.IntegerField(required=False, min_value=1)


class DeleteProcessSerializer(serializers.Serializer):
    confirmation = serializers.CharField(max_length=20)
    version = serializers.IntegerField(required=False, min_value=1)
