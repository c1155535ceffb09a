# apps/attendance/models.py

from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class Attendance(CoreBaseModel):
    """
    A student's attendance in one batch on one date.

    Marking the same (batch, student, date) again updates this row in place.
    """
    class Status(models.TextChoices):
        PRESENT = 'present', _('Present')
        ABSENT = 'absent', _('Absent')
        LATE = 'late', _('Late')
        EXCUSED = 'excused', _('Excused')

    teacher = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='marked_attendance',
        verbose_name=_('teacher')
    )
    course = models.ForeignKey(
        'academics.Course',
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('course')
    )
    batch = models.ForeignKey(
        'academics.Batch',
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('batch')
    )
    student = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('student')
    )
    date = models.DateField(_('date'), db_index=True)
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=Status.choices,
        default=Status.PRESENT
    )
    notes = models.CharField(_('notes'), max_length=255, blank=True)

    class Meta:
        verbose_name = _('Attendance')
        verbose_name_plural = _('Attendance Records')
        ordering = ['-date', 'student__fullname']
        constraints = [
            models.UniqueConstraint(
                fields=['batch', 'student', 'date'],
                name='unique_attendance_per_batch_student_date',
            ),
        ]
        indexes = [
            models.Index(fields=['batch', 'date'], name='attendance_batch_date_idx'),
            models.Index(fields=['student', 'date'], name='attendance_student_date_idx'),
        ]

    def __str__(self):
        return f"{self.student.fullname} - {self.date} - {self.get_status_display()}"

    @classmethod
    def breakdown(cls, queryset):
        """
        Count records per status; ``percentage`` is the share marked present.
        """
        counts = {status: 0 for status in cls.Status.values}
        for row in queryset.order_by().values('status').annotate(count=models.Count('id')):
            counts[row['status']] = row['count']

        total = sum(counts.values())
        percentage = round(counts[cls.Status.PRESENT.value] / total * 100) if total else 0
        return {
            **counts,
            'total': total,
            'percentage': percentage,
            'summary': f"{counts[cls.Status.PRESENT.value]}/{total} attended ({percentage}%)",
        }
