from django.contrib import admin
from base.admin import BaseAdminClass
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(BaseAdminClass):
    list_display = ('recipient', 'notification_type', 'priority', 'title', 'is_read', 'created_at')
    list_filter = ('notification_type', 'priority', 'is_read', 'created_at')
    search_fields = ('recipient__email', 'recipient__username', 'title', 'message')
    list_editable = ('is_read',)
    list_display_links = ('recipient', 'notification_type', 'title', 'created_at')
    readonly_fields = ('data', 'content_type', 'object_id', 'created_at')
