"""Notification Serializers"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import Notification
from .services import NotificationService


class NotificationSerializer(serializers.ModelSerializer):
    priority_label = serializers.CharField(source='get_priority_display', read_only=True)
    type_label = serializers.CharField(source='get_notification_type_display', read_only=True)
    related_process_name = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id', 'title', 'message', 'notification_type', 'type_label',
            'priority', 'priority_label', 'is_read', 'read_at',
            'action_url', 'action_text', 'related_process_id', 'related_task_id',
            'related_process_name', 'created_at',
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.STR)
    def get_related_process_name(self, obj):
        # None once the process has been deleted
        process = NotificationService.resolve_related_process(obj)
        return process.employee_name if process else None


class MarkReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
