"""Offboarding app filters."""
import django_filters
from django.db.models import Count, Exists, ExpressionWrapper, F, FloatField, OuterRef, Q
from django.db.models.functions import NullIf
from django.utils import timezone

from .models import TaskTemplate, OffboardingProcess, ChecklistItem, OffboardingDocument

PROCESS_STATUS_FILTERS = [
    ('pending', 'Pending Approval'),
    ('approved', 'Approved'),
    ('active', 'Active'),
    ('closed', 'Closed'),
    ('rejected', 'Rejected'),
    ('overdue', 'Overdue'),
]


class NumberInFilter(django_filters.BaseInFilter, django_filters.NumberFilter):
    pass


class TaskTemplateFilter(django_filters.FilterSet):
    task_name = django_filters.CharFilter(lookup_expr='icontains')
    department = django_filters.CharFilter(lookup_expr='iexact')
    is_active = django_filters.BooleanFilter()
    is_required = django_filters.BooleanFilter()

    class Meta:
        model = TaskTemplate
        fields = ['department', 'is_active', 'is_required']


class OffboardingProcessFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    status = django_filters.ChoiceFilter(choices=PROCESS_STATUS_FILTERS, method='filter_status')
    department = django_filters.CharFilter(method='filter_department')
    start_from = django_filters.DateFilter(field_name='process_start_date', lookup_expr='gte')
    start_to = django_filters.DateFilter(field_name='process_start_date', lookup_expr='lte')
    sort = django_filters.ChoiceFilter(
        choices=[('name', 'Name'), ('date', 'Date'), ('progress', 'Progress')],
        method='filter_sort',
    )

    class Meta:
        model = OffboardingProcess
        fields = ['is_closed']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(employee_name__icontains=value)
            | Q(job_title__icontains=value)
            | Q(initiated_by__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        if value == 'pending':
            return queryset.filter(status=OffboardingProcess.STATUS_PENDING_APPROVAL)
        if value == 'active':
            return queryset.filter(status=OffboardingProcess.STATUS_ACTIVE, is_closed=False)
        if value == 'closed':
            return queryset.filter(is_closed=True)
        if value == 'overdue':
            overdue_items = ChecklistItem.objects.filter(
                process=OuterRef('pk'),
                is_completed=False,
                due_date__lt=timezone.localdate(),
            )
            return queryset.filter(
                Exists(overdue_items), status=OffboardingProcess.STATUS_ACTIVE, is_closed=False,
            )
        return queryset.filter(status=value)

    def filter_department(self, queryset, name, value):
        departments = ChecklistItem.objects.filter(process=OuterRef('pk'), department__iexact=value.strip())
        return queryset.filter(Exists(departments))

    def filter_sort(self, queryset, name, value):
        if value == 'name':
            return queryset.order_by('employee_name', 'id')
        if value == 'progress':
            return queryset.annotate(
                total_items=Count('items', distinct=True),
                done_items=Count('items', filter=Q(items__is_completed=True), distinct=True),
            ).annotate(
                progress=ExpressionWrapper(
                    F('done_items') * 100.0 / NullIf(F('total_items'), 0), output_field=FloatField()
                )
            ).order_by(F('progress').desc(nulls_last=True), 'id')
        return queryset.order_by('-process_start_date', '-id')


class ChecklistItemFilter(django_filters.FilterSet):
    process = django_filters.NumberFilter()
    department = django_filters.CharFilter(lookup_expr='iexact')
    is_completed = django_filters.BooleanFilter()
    is_required = django_filters.BooleanFilter()
    overdue = django_filters.BooleanFilter(method='filter_overdue')
    due_before = django_filters.DateFilter(field_name='due_date', lookup_expr='lte')
    process_ids = NumberInFilter(field_name='process_id', lookup_expr='in')

    class Meta:
        model = ChecklistItem
        fields = ['process', 'department', 'is_completed', 'is_required']

    def filter_overdue(self, queryset, name, value):
        overdue = Q(is_completed=False, due_date__lt=timezone.localdate())
        return queryset.filter(overdue) if value else queryset.exclude(overdue)


class OffboardingDocumentFilter(django_filters.FilterSet):
    process = django_filters.NumberFilter()
    document_type = django_filters.ChoiceFilter(choices=OffboardingDocument.TYPE_CHOICES)
    is_required = django_filters.BooleanFilter()

    class Meta:
        model = OffboardingDocument
        fields = ['process', 'document_type', 'is_required']
