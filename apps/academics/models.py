from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator, MaxLengthValidator
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel, SoftDeleteModel


class Course(SoftDeleteModel):
    """
    A teacher's course. The monthly ``fee`` is what each billing period costs.
    """
    teacher = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='courses',
        verbose_name=_('teacher')
    )
    title = models.CharField(_('title'), max_length=200)
    subtitle = models.CharField(_('subtitle'), max_length=200, blank=True)
    description = models.TextField(_('description'), validators=[MaxLengthValidator(500)])
    prerequisites = models.TextField(_('prerequisites'), blank=True)
    category = models.JSONField(_('categories'), default=list, blank=True)
    fee = models.DecimalField(
        _('monthly fee'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )
    # Free text such as "3 months" or "12 weeks"
    duration = models.CharField(_('duration'), max_length=50)
    syllabus = models.JSONField(_('syllabus'), default=list, blank=True)

    class Meta:
        verbose_name = _('Course')
        verbose_name_plural = _('Courses')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['teacher', 'is_deleted'], name='course_teacher_deleted_idx'),
        ]

    def __str__(self):
        return self.title


class Batch(SoftDeleteModel):
    """
    A scheduled class section of a course with its own calendar and capacity.
    """
    class Mode(models.TextChoices):
        ONLINE = 'online', _('Online')
        OFFLINE = 'offline', _('Offline')
        HYBRID = 'hybrid', _('Hybrid')

    class Status(models.TextChoices):
        UPCOMING = 'upcoming', _('Upcoming')
        ONGOING = 'ongoing', _('Ongoing')
        COMPLETED = 'completed', _('Completed')
        CANCELLED = 'cancelled', _('Cancelled')

    OPEN_STATUSES = (Status.UPCOMING, Status.ONGOING)

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='batches',
        verbose_name=_('course')
    )
    name = models.CharField(_('batch name'), max_length=100)
    subjects = models.JSONField(_('subjects'), default=list, blank=True)
    start_date = models.DateField(_('start date'))
    days_of_week = models.JSONField(_('days of week'), default=list)
    time = models.CharField(_('class time'), max_length=20)
    mode = models.CharField(_('mode'), max_length=10, choices=Mode.choices, default=Mode.OFFLINE)
    max_strength = models.PositiveIntegerField(_('maximum strength'), validators=[MinValueValidator(1)])
    current_strength = models.PositiveIntegerField(_('current strength'), default=0)
    description = models.CharField(_('description'), max_length=100, blank=True)
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=Status.choices,
        default=Status.UPCOMING,
        db_index=True
    )
    requires_approval = models.BooleanField(_('requires approval'), default=False)

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['start_date', 'name']
        constraints = [
            models.UniqueConstraint(
                fields=['course', 'name'],
                condition=Q(is_deleted=False),
                name='unique_active_batch_name_per_course',
            ),
        ]

    def __str__(self):
        return f"{self.course.title} - {self.name}"

    @property
    def is_full(self):
        return self.current_strength >= self.max_strength

    @property
    def available_seats(self):
        return max(self.max_strength - self.current_strength, 0)

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES


class BatchEnrollment(CoreBaseModel):
    """
    Single source of truth for a student's membership in a batch.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending Approval')
        ACTIVE = 'active', _('Active')

    batch = models.ForeignKey(
        Batch,
        on_delete=models.CASCADE,
        related_name='enrollments',
        verbose_name=_('batch')
    )
    student = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='batch_enrollments',
        verbose_name=_('student')
    )
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )
    enrolled_at = models.DateTimeField(_('enrolled at'), auto_now_add=True)
    approved_at = models.DateTimeField(_('approved at'), null=True, blank=True)

    class Meta:
        verbose_name = _('Batch Enrollment')
        verbose_name_plural = _('Batch Enrollments')
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(fields=['batch', 'student'], name='unique_batch_enrollment'),
        ]

    def __str__(self):
        return f"{self.student.fullname} in {self.batch.name}"


class CourseApplication(CoreBaseModel):
    """
    Record that a student applied to a course; blocks removal of its batches.
    """
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='applications',
        verbose_name=_('course')
    )
    student = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='course_applications',
        verbose_name=_('student')
    )
    applied_at = models.DateTimeField(_('applied at'), auto_now_add=True)

    class Meta:
        verbose_name = _('Course Application')
        verbose_name_plural = _('Course Applications')
        ordering = ['-applied_at']
        constraints = [
            models.UniqueConstraint(fields=['course', 'student'], name='unique_course_application'),
        ]

    def __str__(self):
        return f"{self.student.fullname} -> {self.course.title}"
