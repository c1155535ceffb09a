"""
Email delivery and in-app notification services.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from apps.core import exceptions
from apps.core.pagination import paginate
from .models import Notification

logger = logging.getLogger(__name__)

WEEKDAYS = {
    'mon': 0, 'tue': 1, 'wed': 2, 'thu': 3, 'fri': 4, 'sat': 5, 'sun': 6,
}
TIME_FORMATS = ('%H:%M', '%H:%M:%S', '%I:%M %p', '%I:%M%p', '%I %p', '%I%p')
SCHEDULE_WINDOW_DAYS = 7

NOTIFICATION_SORT_FIELDS = {
    'created_at': 'created_at',
    'status': 'status',
    'type': 'notification_type',
}


class EmailService:
    """
    Service class for handling email operations.
    """

    @staticmethod
    def send_email(
        recipient_email: str,
        subject: str,
        body: str,
        html_content: Optional[str] = None,
        from_email: Optional[str] = None,
    ) -> Tuple[bool, str]:
        """
        Send a plain-text email.

        Returns:
            Tuple of (success: bool, message: str)
        """
        try:
            sent = send_mail(
                subject=subject,
                message=body,
                from_email=from_email or settings.DEFAULT_FROM_EMAIL,
                recipient_list=[recipient_email],
                html_message=html_content,
            )
        except Exception as e:
            error_msg = f"Error sending email to {recipient_email}: {str(e)}"
            logger.error(error_msg)
            return False, error_msg

        if sent > 0:
            logger.info(f"Email sent successfully to {recipient_email}")
            return True, "Email sent successfully"
        logger.error(f"Failed to send email to {recipient_email}")
        return False, "Failed to send email"


def parse_class_time(value):
    """Parse a batch time such as ``"18:30"`` or ``"6:30 PM"``; None if unreadable."""
    if not value:
        return None
    text = value.strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def parse_weekdays(days):
    numbers = set()
    for day in days or []:
        number = WEEKDAYS.get(str(day).strip().lower()[:3])
        if number is not None:
            numbers.add(number)
    return numbers


def next_class_datetime(batch, now=None):
    """
    Next concrete class start for ``batch``.

    Today counts only if the class time is still ahead; otherwise the following
    days are scanned up to a week out. Returns None when nothing resolves.
    """
    class_time = parse_class_time(batch.time)
    weekdays = parse_weekdays(batch.days_of_week)
    if class_time is None or not weekdays:
        return None

    now = timezone.localtime(now or timezone.now())
    for offset in range(SCHEDULE_WINDOW_DAYS + 1):
        day = now.date() + timedelta(days=offset)
        if day.weekday() not in weekdays:
            continue
        if batch.start_date and day < batch.start_date:
            continue
        candidate = timezone.make_aware(datetime.combine(day, class_time), now.tzinfo)
        if candidate > now:
            return candidate
    return None


class NotificationService:
    """
    Read models and state changes for in-app notifications.
    """

    @staticmethod
    def notify(recipient, title, message, notification_type=Notification.NotificationType.GENERAL,
               related_course=None):
        notification = Notification.create_notification(
            recipient, title, message,
            notification_type=notification_type,
            related_course=related_course,
        )
        logger.debug(f"Notification '{title}' created for {recipient.email}")
        return notification

    @staticmethod
    def upcoming_batches(user, now=None, limit=3):
        """
        The user's batches ordered by their next class, soonest first.

        Teachers see the batches of their course; students the batches they
        are actively enrolled in.
        """
        from apps.academics.models import Batch, BatchEnrollment

        if user.is_teacher:
            batches = Batch.objects.filter(course__teacher=user, course__is_deleted=False)
        else:
            batches = Batch.objects.filter(
                enrollments__student=user,
                enrollments__status=BatchEnrollment.Status.ACTIVE,
                course__is_deleted=False,
            )
        batches = batches.exclude(
            status__in=[Batch.Status.COMPLETED, Batch.Status.CANCELLED]
        ).select_related('course')

        upcoming = []
        for batch in batches:
            next_class = next_class_datetime(batch, now)
            if next_class is None:
                continue
            upcoming.append({
                'batch_id': str(batch.id),
                'batch_name': batch.name,
                'course_id': str(batch.course_id),
                'course_title': batch.course.title,
                'mode': batch.mode,
                'time': batch.time,
                'next_class': next_class.isoformat(),
            })
        upcoming.sort(key=lambda item: item['next_class'])
        return upcoming[:limit]

    @staticmethod
    def list_notifications(user, params, now=None):
        queryset = Notification.for_user(user).select_related('related_course')

        status_filter = params.get('status')
        if status_filter:
            if status_filter not in Notification.Status.values:
                raise exceptions.ValidationError(f"Invalid status '{status_filter}'")
            queryset = queryset.filter(status=status_filter)
        type_filter = params.get('type')
        if type_filter:
            if type_filter not in Notification.NotificationType.values:
                raise exceptions.ValidationError(f"Invalid notification type '{type_filter}'")
            queryset = queryset.filter(notification_type=type_filter)

        items, pagination = paginate(queryset, params, NOTIFICATION_SORT_FIELDS, 'created_at')
        return {
            'notifications': items,
            'pagination': pagination,
            'unread_count': Notification.get_unread_count(user),
            'upcoming_batches': NotificationService.upcoming_batches(user, now),
        }

    @staticmethod
    def get_notification(user, notification_id):
        notification = Notification.for_user(user).filter(pk=notification_id).first()
        if notification is None:
            raise exceptions.NotFound('Notification not found')
        return notification

    @staticmethod
    def mark_as_read(user, notification_id):
        notification = NotificationService.get_notification(user, notification_id)
        notification.mark_as_read()
        return notification

    @staticmethod
    def mark_all_read(user):
        modified = Notification.mark_all_read(user)
        logger.info(f"Marked {modified} notifications read for {user.email}")
        return modified

    @staticmethod
    def delete_notification(user, notification_id):
        notification = NotificationService.get_notification(user, notification_id)
        notification.delete()
        return notification
