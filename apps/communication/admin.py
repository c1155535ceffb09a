from django.contrib import admin, messages
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """
    Admin interface for Notification model.
    """
    list_display = ('title', 'notification_type', 'teacher', 'student', 'status', 'created_at')
    list_filter = ('notification_type', 'status', 'is_deleted', 'created_at')
    search_fields = ('title', 'message', 'teacher__email', 'student__email')
    readonly_fields = ('read_at', 'created_at', 'updated_at', 'deleted_at')
    raw_id_fields = ('teacher', 'student', 'related_course')
    actions = ['mark_as_read']

    def get_queryset(self, request):
        return Notification.all_objects.select_related('teacher', 'student')

    def mark_as_read(self, request, queryset):
        updated = queryset.filter(status=Notification.Status.UNREAD).update(
            status=Notification.Status.READ, read_at=timezone.now()
        )
        self.message_user(request, f'{updated} notifications marked as read.', messages.SUCCESS)
    mark_as_read.short_description = _('Mark selected notifications as read')
