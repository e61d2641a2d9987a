"""Offboarding Views - API Endpoints"""

import csv
import logging

from django.http import FileResponse, HttpResponse
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.authentication.permissions import IsHROrAdmin, IsHROrAdminOrReadOnly
from apps.core.exceptions import BusinessRuleException
from apps.core.response import created_response, outcome_response, success_response
from .filters import (
    ChecklistItemFilter, OffboardingDocumentFilter, OffboardingProcessFilter, TaskTemplateFilter,
)
from .models import ChecklistItem, Department, OffboardingDocument, OffboardingProcess, TaskTemplate
from .permissions import CanViewProcess, visible_processes
from .serializers import (
    BulkCompleteSerializer, ChecklistItemDetailSerializer, ChecklistItemSerializer,
    CommentCreateSerializer, CompleteTaskSerializer, DeleteProcessSerializer, DependencySerializer,
    DepartmentSerializer, DocumentUploadSerializer, OffboardingDocumentSerializer,
    OffboardingProcessDetailSerializer, OffboardingProcessListSerializer,
    OffboardingProcessWriteSerializer, RejectSerializer, TaskCommentSerializer,
    TaskTemplateSerializer, TemplateImportSerializer, VersionSerializer,
)
from .services import (
    ChecklistService, DocumentService, OffboardingAnalyticsService,
    ProcessLifecycleService, TemplateService,
)

logger = logging.getLogger(__name__)

PROCESS_EXPORT_HEADER = [
    'Employee Name', 'Job Title', 'Initiated By', 'Status',
    'Start Date', 'Last Working Day', 'Tasks Completed', 'Total Tasks',
]


def _apply_version(instance, data):
    """Use the client's concurrency token when it sent one."""
    version = data.get('version')
    if version:
        instance.version = version


def _version_data(request):
    serializer = VersionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class DepartmentViewSet(viewsets.ModelViewSet):
    """
    Departments that own checklist tasks.

    Deleting a department that still owns active templates is refused.
    """
    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    permission_classes = [IsAuthenticated, IsHROrAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'manager_name']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user.identifier)

    def perform_destroy(self, instance):
        TemplateService.delete_department(instance)


class TaskTemplateViewSet(viewsets.ModelViewSet):
    """
    ViewSet for managing task templates.

    list: Get all templates
    create: Create a template (dependency cycles are rejected)
    destroy: Delete a template nothing depends on
    deactivate: Retire a template from future checklists
    export / import: CSV exchange
    """
    queryset = TaskTemplate.objects.select_related('depends_on_template')
    serializer_class = TaskTemplateSerializer
    permission_classes = [IsAuthenticated, IsHROrAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = TaskTemplateFilter
    search_fields = ['task_name', 'department', 'description']
    ordering_fields = ['task_name', 'department', 'days_from_last_working_day', 'created_at']
    ordering = ['department', 'task_name']

    def perform_create(self, serializer):
        serializer.instance = TemplateService.create(actor=self.request.user, data=serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = TemplateService.update(serializer.instance, serializer.validated_data)

    def perform_destroy(self, instance):
        TemplateService.delete(instance)

    @action(detail=True, methods=['post'])
    def deactivate(self, request, pk=None):
        template = TemplateService.deactivate(self.get_object())
        return success_response(self.get_serializer(template).data, message='Template deactivated.')

    @action(detail=False, methods=['get'])
    def export(self, request):
        content = TemplateService.export_csv(self.filter_queryset(self.get_queryset()))
        response = HttpResponse(content, content_type='text/csv')
        response['Content-Disposition'] = (
            f'attachment; filename="task_templates_{timezone.localdate():%Y%m%d}.csv"'
        )
        return response

    @action(
        detail=False, methods=['post'], url_path='import',
        parser_classes=[MultiPartParser, FormParser], serializer_class=TemplateImportSerializer,
    )
    def import_templates(self, request):
        serializer = TemplateImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        raw = serializer.validated_data['file'].read()
        try:
            content = raw.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise BusinessRuleException('The file must be UTF-8 encoded CSV.')
        result = TemplateService.import_csv(content, actor=request.user)
        return success_response(result, message='Templates imported.')


class OffboardingProcessViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Offboarding processes and their approval workflow.

    Any authenticated user may open a process; HR and Admin approve, reject,
    close and delete.
    """
    queryset = OffboardingProcess.objects.none()
    permission_classes = [IsAuthenticated, CanViewProcess]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OffboardingProcessFilter

    def get_queryset(self):
        queryset = OffboardingProcess.objects.prefetch_related('items', 'documents')
        return visible_processes(queryset, self.request.user)

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return OffboardingProcessWriteSerializer
        if self.action == 'list':
            return OffboardingProcessListSerializer
        return OffboardingProcessDetailSerializer

    def _detail(self, process):
        process = self.get_queryset().get(pk=process.pk) if process.pk else process
        return OffboardingProcessDetailSerializer(process, context=self.get_serializer_context()).data

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        process = ProcessLifecycleService.create(actor=request.user, data=serializer.validated_data)
        return created_response(
            OffboardingProcessDetailSerializer(process, context=self.get_serializer_context()).data,
            message='Offboarding process submitted for approval.',
        )

    def update(self, request, *args, **kwargs):
        process = self.get_object()
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(process, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        _apply_version(process, _version_data(request))
        outcome = ProcessLifecycleService.update(process, actor=request.user, data=serializer.validated_data)
        return outcome_response(outcome, data=self._detail(process) if outcome.ok else None,
                                message='Process updated.')

    @action(detail=True, methods=['post'], serializer_class=VersionSerializer)
    def approve(self, request, pk=None):
        process = self.get_object()
        _apply_version(process, _version_data(request))
        outcome = ProcessLifecycleService.approve(process, actor=request.user)
        return outcome_response(
            outcome,
            data=self._detail(process) if outcome.ok else None,
            message='Process approved and tasks generated.',
        )

    @action(detail=True, methods=['post'], serializer_class=RejectSerializer)
    def reject(self, request, pk=None):
        process = self.get_object()
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        _apply_version(process, serializer.validated_data)
        outcome = ProcessLifecycleService.reject(
            process, actor=request.user, reason=serializer.validated_data.get('reason', ''),
        )
        return outcome_response(outcome, data=self._detail(process) if outcome.ok else None,
                                message='Process rejected.')

    @action(detail=True, methods=['post'], serializer_class=VersionSerializer)
    def close(self, request, pk=None):
        process = self.get_object()
        _apply_version(process, _version_data(request))
        outcome = ProcessLifecycleService.close(process, actor=request.user)
        return outcome_response(outcome, data=self._detail(process) if outcome.ok else None,
                                message='Process closed.')

    @action(detail=True, methods=['post'], url_path='delete', serializer_class=DeleteProcessSerializer)
    def delete_process(self, request, pk=None):
        process = self.get_object()
        serializer = DeleteProcessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        _apply_version(process, serializer.validated_data)
        outcome = ProcessLifecycleService.delete(
            process, actor=request.user, confirmation=serializer.validated_data['confirmation'],
        )
        return outcome_response(outcome, message='Process permanently deleted.')

    @action(detail=False, methods=['get'])
    def export(self, request):
        processes = self.filter_queryset(self.get_queryset())
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = (
            f'attachment; filename="offboarding_processes_{timezone.localdate():%Y%m%d}.csv"'
        )
        writer = csv.writer(response)
        writer.writerow(PROCESS_EXPORT_HEADER)
        for process in processes:
            writer.writerow([
                process.employee_name,
                process.job_title,
                process.initiated_by,
                process.status_text,
                process.process_start_date.isoformat(),
                process.last_working_day.isoformat(),
                process.completed_tasks_count,
                process.total_tasks_count,
            ])
        return response

    @action(detail=False, methods=['get'])
    def tasks(self, request):
        """Open tasks across the selected processes, for bulk completion."""
        ids = [value for value in request.query_params.get('ids', '').split(',') if value.strip().isdigit()]
        processes = self.get_queryset().filter(is_closed=False, status=OffboardingProcess.STATUS_ACTIVE)
        if ids:
            processes = processes.filter(pk__in=ids)
        items = (
            ChecklistItem.objects.filter(process__in=processes, is_completed=False)
            .select_related('process', 'depends_on_task')
            .order_by('process__employee_name', 'department', 'task_name')
        )
        return success_response(ChecklistItemSerializer(items, many=True).data)

    @action(
        detail=True, methods=['get', 'post'], url_path='documents',
        parser_classes=[MultiPartParser, FormParser, JSONParser],
        serializer_class=DocumentUploadSerializer,
    )
    def documents(self, request, pk=None):
        process = self.get_object()
        if request.method == 'GET':
            documents = process.documents.all()
            return success_response({
                'documents': OffboardingDocumentSerializer(documents, many=True).data,
                'missing_required': DocumentService.missing_required_types(process),
            })

        serializer = DocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        document = DocumentService.upload(
            process,
            serializer.validated_data['file'],
            actor=request.user,
            document_type=serializer.validated_data['document_type'],
            description=serializer.validated_data.get('description', ''),
        )
        return created_response(OffboardingDocumentSerializer(document).data, message='Document uploaded.')

    @action(detail=True, methods=['get'], url_path='documents/download-all')
    def download_all(self, request, pk=None):
        process = self.get_object()
        if not process.documents.exists():
            raise BusinessRuleException('This process has no documents to download.')
        response = HttpResponse(DocumentService.zip_all(process), content_type='application/zip')
        safe_name = ''.join(ch if ch.isalnum() else '_' for ch in process.employee_name)
        response['Content-Disposition'] = f'attachment; filename="{safe_name}_documents.zip"'
        return response


class ChecklistItemViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Checklist tasks.

    complete / uncomplete honour task dependencies and the item version;
    bulk-complete completes many open tasks at once.
    """
    queryset = ChecklistItem.objects.none()
    permission_classes = [IsAuthenticated, CanViewProcess]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ChecklistItemFilter
    search_fields = ['task_name', 'process__employee_name']
    ordering_fields = ['due_date', 'department', 'task_name', 'completed_at']
    ordering = ['process', 'department', 'task_name']

    def get_queryset(self):
        processes = visible_processes(OffboardingProcess.objects.all(), self.request.user)
        return ChecklistItem.objects.filter(process__in=processes).select_related('process', 'depends_on_task')

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ChecklistItemDetailSerializer
        return ChecklistItemSerializer

    @action(detail=True, methods=['post'], serializer_class=CompleteTaskSerializer)
    def complete(self, request, pk=None):
        item = self.get_object()
        serializer = CompleteTaskSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        _apply_version(item, serializer.validated_data)
        outcome = ChecklistService.complete(
            item, actor=request.user, comment=serializer.validated_data.get('comment'),
        )
        return outcome_response(
            outcome,
            data=ChecklistItemSerializer(item).data if outcome.ok else None,
            message='Task marked as completed.',
        )

    @action(detail=True, methods=['post'], serializer_class=VersionSerializer)
    def uncomplete(self, request, pk=None):
        item = self.get_object()
        _apply_version(item, _version_data(request))
        outcome = ChecklistService.uncomplete(item, actor=request.user)
        return outcome_response(
            outcome,
            data=ChecklistItemSerializer(item).data if outcome.ok else None,
            message='Task marked as incomplete.',
        )

    @action(detail=True, methods=['get', 'post'], serializer_class=CommentCreateSerializer)
    def comments(self, request, pk=None):
        item = self.get_object()
        if request.method == 'GET':
            return success_response(TaskCommentSerializer(item.task_comments.all(), many=True).data)
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            comment = ChecklistService.add_comment(
                item, actor=request.user, text=serializer.validated_data['comment'],
            )
        except ValueError as e:
            raise BusinessRuleException(str(e))
        return created_response(TaskCommentSerializer(comment).data, message='Comment added.')

    @action(detail=False, methods=['post'], url_path='bulk-complete', serializer_class=BulkCompleteSerializer)
    def bulk_complete(self, request):
        serializer = BulkCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = ChecklistService.bulk_complete(
            serializer.validated_data['task_ids'],
            actor=request.user,
            comment=serializer.validated_data.get('comment'),
        )
        return success_response(result, message=f"{result['completed']} task(s) marked as completed.")

    @action(
        detail=True, methods=['post'], serializer_class=DependencySerializer,
        permission_classes=[IsAuthenticated, IsHROrAdmin],
    )
    def dependency(self, request, pk=None):
        item = self.get_object()
        serializer = DependencySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = ChecklistService.set_dependency(item, serializer.validated_data['depends_on_task'])
        return outcome_response(
            outcome,
            data=ChecklistItemSerializer(item).data if outcome.ok else None,
            message='Task dependency updated.',
        )


class OffboardingDocumentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Documents attached to visible processes; uploads go through the process."""
    queryset = OffboardingDocument.objects.none()
    serializer_class = OffboardingDocumentSerializer
    permission_classes = [IsAuthenticated, CanViewProcess]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OffboardingDocumentFilter

    def get_queryset(self):
        processes = visible_processes(OffboardingProcess.objects.all(), self.request.user)
        return OffboardingDocument.objects.filter(process__in=processes).select_related('process')

    def perform_destroy(self, instance):
        DocumentService.delete(instance, actor=self.request.user)

    @action(detail=True, methods=['get'])
    def download(self, request, pk=None):
        document = self.get_object()
        try:
            handle = document.file.open('rb')
        except FileNotFoundError:
            return Response({'detail': 'File not found.'}, status=status.HTTP_404_NOT_FOUND)
        return FileResponse(handle, as_attachment=True, filename=document.file_name)


class OffboardingAnalyticsViewSet(viewsets.ViewSet):
    """Reporting for HR and Admin."""
    permission_classes = [IsAuthenticated, IsHROrAdmin]

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=['get'])
    def overview(self, request):
        return success_response(OffboardingAnalyticsService.overview())

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=['get'])
    def departments(self, request):
        return success_response(OffboardingAnalyticsService.departments())

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=['get'])
    def trends(self, request):
        try:
            months = max(1, min(int(request.query_params.get('months', 6)), 24))
        except ValueError:
            months = 6
        return success_response(OffboardingAnalyticsService.trends(months=months))
