# apps/attendance/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Attendance


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    """
    Admin interface for Attendance model.
    """
    list_display = ('student', 'batch', 'date', 'status', 'teacher')
    list_filter = ('status', 'date')
    search_fields = ('student__fullname', 'student__email', 'batch__name', 'course__title')
    date_hierarchy = 'date'
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('student', 'teacher', 'batch', 'course')

    fieldsets = (
        (_('Attendance'), {
            'fields': ('batch', 'course', 'teacher', 'student', 'date', 'status', 'notes')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
