from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'recipient', 'notification_type', 'priority', 'is_read', 'created_at']
    list_filter = ['notification_type', 'priority', 'is_read']
    search_fields = ['title', 'message', 'recipient__email']
    raw_id_fields = ['recipient']
    readonly_fields = ['related_process_id', 'related_task_id', 'read_at']
