from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import SoftDeleteModel


class Notification(SoftDeleteModel):
    """
    In-app notification addressed to exactly one teacher or one student.
    """
    class NotificationType(models.TextChoices):
        BATCH_REMINDER = 'batch_reminder', _('Batch Reminder')
        COURSE_UPDATE = 'course_update', _('Course Update')
        UPCOMING_BATCH = 'upcoming_batch', _('Upcoming Batch')
        FEE_REMINDER = 'fee_reminder', _('Fee Reminder')
        GENERAL = 'general', _('General')

    class Status(models.TextChoices):
        UNREAD = 'unread', _('Unread')
        READ = 'read', _('Read')

    title = models.CharField(_('title'), max_length=200)
    message = models.TextField(_('message'))
    notification_type = models.CharField(
        _('notification type'),
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL,
    )
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=Status.choices,
        default=Status.UNREAD,
        db_index=True,
    )
    read_at = models.DateTimeField(_('read at'), null=True, blank=True)

    teacher = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='teacher_notifications',
        verbose_name=_('teacher'),
    )
    student = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='student_notifications',
        verbose_name=_('student'),
    )
    related_course = models.ForeignKey(
        'academics.Course',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
        verbose_name=_('related course'),
    )

    class Meta:
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['teacher', 'status', 'created_at'], name='notif_teacher_status_idx'),
            models.Index(fields=['student', 'status', 'created_at'], name='notif_student_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (Q(teacher__isnull=False) & Q(student__isnull=True))
                    | (Q(teacher__isnull=True) & Q(student__isnull=False))
                ),
                name='notification_single_recipient',
            ),
        ]

    def __str__(self):
        return f"{self.notification_type}: {self.title} -> {self.recipient}"

    @property
    def recipient(self):
        return self.teacher or self.student

    def mark_as_read(self):
        """Mark notification as read."""
        if self.status != self.Status.READ:
            self.status = self.Status.READ
            self.read_at = timezone.now()
            self.save(update_fields=['status', 'read_at', 'updated_at'])

    @staticmethod
    def recipient_filter(user):
        return {'teacher': user} if user.is_teacher else {'student': user}

    @classmethod
    def for_user(cls, user):
        return cls.objects.filter(**cls.recipient_filter(user))

    @classmethod
    def create_notification(cls, recipient, title, message,
                            notification_type=NotificationType.GENERAL, related_course=None):
        """
        Class method to create a notification for a teacher or student.
        """
        return cls.objects.create(
            title=title,
            message=message,
            notification_type=notification_type,
            related_course=related_course,
            **cls.recipient_filter(recipient),
        )

    @classmethod
    def get_unread_count(cls, user):
        """Get count of unread notifications for a user."""
        return cls.for_user(user).filter(status=cls.Status.UNREAD).count()

    @classmethod
    def mark_all_read(cls, user):
        """Mark all notifications as read for a user."""
        return cls.for_user(user).filter(status=cls.Status.UNREAD).update(
            status=cls.Status.READ,
            read_at=timezone.now(),
            updated_at=timezone.now(),
        )
