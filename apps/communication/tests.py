# apps/communication/tests.py

from datetime import date, datetime, timezone as dt_timezone
from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.academics.models import Batch, BatchEnrollment
from apps.core.testing import make_teacher, make_student, make_course, make_batch, enroll, auth_client
from .models import Notification
from .services import EmailService, NotificationService, next_class_datetime, parse_class_time


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


class NotificationTestCase(TestCase):
    """Test cases for in-app notifications"""

    def setUp(self):
        self.student = make_student()
        self.client = auth_client(self.student)
        for index in range(3):
            NotificationService.notify(self.student, f'Notice {index}', 'Class moved to room 4')

    def test_list_includes_unread_count(self):
        response = self.client.get(reverse('communication:notifications'))

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['unread_count'], 3)
        self.assertEqual(len(data['notifications']), 3)
        self.assertEqual(data['pagination']['total'], 3)

    def test_mark_all_read_reports_modified_count(self):
        Notification.for_user(self.student).first().mark_as_read()

        response = self.client.post(reverse('communication:notifications_read_all'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['modified_count'], 2)
        self.assertEqual(Notification.get_unread_count(self.student), 0)

        again = self.client.post(reverse('communication:notifications_read_all'))
        self.assertEqual(again.json()['data']['modified_count'], 0)

    def test_mark_one_read(self):
        notification = Notification.for_user(self.student).first()

        response = self.client.post(reverse('communication:notification_read', args=[notification.pk]))

        self.assertEqual(response.status_code, 200)
        notification.refresh_from_db()
        self.assertEqual(notification.status, Notification.Status.READ)
        self.assertIsNotNone(notification.read_at)

    def test_cannot_touch_another_users_notification(self):
        other = NotificationService.notify(make_student(), 'Private', 'Not yours')

        response = self.client.post(reverse('communication:notification_read', args=[other.pk]))

        self.assertEqual(response.status_code, 404)

    def test_delete_hides_notification(self):
        notification = Notification.for_user(self.student).first()

        response = self.client.delete(reverse('communication:notification_detail', args=[notification.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Notification.for_user(self.student).count(), 2)
        self.assertTrue(Notification.all_objects.filter(pk=notification.pk, is_deleted=True).exists())

    def test_filter_by_status(self):
        Notification.mark_all_read(self.student)
        NotificationService.notify(self.student, 'Fresh', 'Just arrived')

        response = self.client.get(reverse('communication:notifications'), {'status': 'unread'})

        titles = [n['title'] for n in response.json()['data']['notifications']]
        self.assertEqual(titles, ['Fresh'])

    def test_invalid_type_filter_is_rejected(self):
        response = self.client.get(reverse('communication:notifications'), {'type': 'gossip'})
        self.assertEqual(response.status_code, 400)

    def test_teacher_notification_goes_to_teacher_column(self):
        teacher = make_teacher()
        notification = NotificationService.notify(teacher, 'Hello', 'Welcome')
        self.assertEqual(notification.teacher, teacher)
        self.assertIsNone(notification.student)


@override_settings(TIME_ZONE='UTC')
class ScheduleTestCase(TestCase):
    """Test cases for next class computation"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        # Mondays and Wednesdays at 18:00 from 2024-01-01
        self.batch = make_batch(self.course)

    def test_parse_class_time_formats(self):
        self.assertEqual(parse_class_time('18:30').hour, 18)
        self.assertEqual(parse_class_time('6:30 pm').hour, 18)
        self.assertIsNone(parse_class_time('evening'))

    def test_class_later_today(self):
        # 2024-03-04 is a Monday
        self.assertEqual(next_class_datetime(self.batch, utc(2024, 3, 4, 10)), utc(2024, 3, 4, 18))

    def test_class_already_started_moves_to_next_day(self):
        self.assertEqual(next_class_datetime(self.batch, utc(2024, 3, 4, 19)), utc(2024, 3, 6, 18))

    def test_batch_not_started_yet(self):
        batch = make_batch(self.course, start_date=date(2024, 3, 6))
        self.assertEqual(next_class_datetime(batch, utc(2024, 3, 4, 10)), utc(2024, 3, 6, 18))

    def test_unreadable_schedule(self):
        self.batch.time = 'whenever'
        self.assertIsNone(next_class_datetime(self.batch, utc(2024, 3, 4, 10)))

    def test_upcoming_batches_for_student(self):
        student = make_student()
        later = make_batch(make_course(make_teacher()), days_of_week=['Friday'])
        enroll(student, self.batch)
        enroll(student, later)
        pending = make_batch(make_course(make_teacher()), days_of_week=['Tuesday'])
        enroll(student, pending, status=BatchEnrollment.Status.PENDING)

        upcoming = NotificationService.upcoming_batches(student, now=utc(2024, 3, 4, 10))

        self.assertEqual([item['batch_id'] for item in upcoming], [str(self.batch.pk), str(later.pk)])

    def test_completed_batches_are_skipped(self):
        Batch.objects.filter(pk=self.batch.pk).update(status=Batch.Status.COMPLETED)
        self.assertEqual(NotificationService.upcoming_batches(self.teacher, now=utc(2024, 3, 4, 10)), [])


class EmailServiceTestCase(TestCase):

    def test_send_email(self):
        success, message = EmailService.send_email('someone@example.com', 'Hello', 'Body')

        self.assertTrue(success)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'Hello')

    @patch('apps.communication.services.send_mail', side_effect=OSError('connection refused'))
    def test_send_failure_is_reported(self, send_mail):
        success, message = EmailService.send_email('someone@example.com', 'Hello', 'Body')

        self.assertFalse(success)
        self.assertIn('connection refused', message)
