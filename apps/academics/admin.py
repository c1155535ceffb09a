# apps/academics/admin.py

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from .models import Course, Batch, BatchEnrollment, CourseApplication


class BatchInline(admin.TabularInline):
    """
    Inline admin for the batches of a course.
    """
    model = Batch
    extra = 0
    fields = ('name', 'start_date', 'time', 'mode', 'max_strength', 'current_strength', 'status')
    readonly_fields = ('current_strength',)
    verbose_name_plural = _('Batches')


class BatchEnrollmentInline(admin.TabularInline):
    model = BatchEnrollment
    extra = 0
    fields = ('student', 'status', 'enrolled_at', 'approved_at')
    readonly_fields = ('enrolled_at', 'approved_at')
    raw_id_fields = ('student',)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    """
    Admin interface for Course model.
    """
    list_display = ('title', 'teacher', 'fee', 'duration', 'is_deleted', 'created_at')
    list_filter = ('is_deleted', 'created_at')
    search_fields = ('title', 'description', 'teacher__email', 'teacher__fullname')
    readonly_fields = ('created_at', 'updated_at', 'deleted_at')
    raw_id_fields = ('teacher',)
    inlines = [BatchInline]

    fieldsets = (
        (_('Course Information'), {
            'fields': ('teacher', 'title', 'subtitle', 'description', 'prerequisites')
        }),
        (_('Details'), {
            'fields': ('category', 'fee', 'duration', 'syllabus')
        }),
        (_('Status'), {
            'fields': ('is_deleted', 'deleted_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return Course.all_objects.select_related('teacher')


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    """
    Admin interface for Batch model.
    """
    list_display = ('name', 'course', 'start_date', 'time', 'mode', 'current_strength', 'max_strength', 'status')
    list_filter = ('mode', 'status', 'requires_approval', 'is_deleted')
    search_fields = ('name', 'course__title')
    readonly_fields = ('current_strength', 'created_at', 'updated_at', 'deleted_at')
    raw_id_fields = ('course',)
    inlines = [BatchEnrollmentInline]
    actions = ['restore_batches']

    def get_queryset(self, request):
        return Batch.all_objects.select_related('course')

    def restore_batches(self, request, queryset):
        """Admin action to undo a soft delete."""
        updated = queryset.filter(is_deleted=True).update(is_deleted=False, deleted_at=None)
        self.message_user(request, f'{updated} batches restored.', messages.SUCCESS)
    restore_batches.short_description = _('Restore selected batches')


@admin.register(BatchEnrollment)
class BatchEnrollmentAdmin(admin.ModelAdmin):
    list_display = ('student', 'batch', 'status', 'enrolled_at', 'approved_at')
    list_filter = ('status', 'enrolled_at')
    search_fields = ('student__email', 'student__fullname', 'batch__name')
    readonly_fields = ('enrolled_at', 'approved_at', 'created_at', 'updated_at')
    raw_id_fields = ('student', 'batch')


@admin.register(CourseApplication)
class CourseApplicationAdmin(admin.ModelAdmin):
    list_display = ('student', 'course', 'applied_at')
    search_fields = ('student__email', 'course__title')
    readonly_fields = ('applied_at',)
    raw_id_fields = ('student', 'course')
