"""Notifications app filters."""
import django_filters

from .models import Notification


class NotificationFilter(django_filters.FilterSet):
    notification_type = django_filters.ChoiceFilter(choices=Notification.TYPE_CHOICES)
    priority = django_filters.ChoiceFilter(choices=Notification.PRIORITY_CHOICES)
    is_read = django_filters.BooleanFilter()
    unread_only = django_filters.BooleanFilter(method='filter_unread_only')
    related_process_id = django_filters.NumberFilter()
    created_after = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')

    class Meta:
        model = Notification
        fields = ['notification_type', 'priority', 'is_read', 'related_process_id']

    def filter_unread_only(self, queryset, name, value):
        if value:
            return queryset.filter(is_read=False)
        return queryset
