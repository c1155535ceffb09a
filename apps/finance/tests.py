# apps/finance/tests.py

from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.academics.models import Course, BatchEnrollment
from apps.communication.models import Notification
from apps.core import exceptions
from apps.core.testing import make_teacher, make_student, make_course, make_batch, enroll, auth_client
from .billing import add_months, billing_period_for, course_end_date
from .models import FeePayment, FeeQRCode, TeacherExpense
from .services import PaymentService, ExpenseService

UPLOADED = {'url': 'https://cdn.example.com/shot.png', 'public_id': 'tuition/payment_screenshots/shot'}


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


def screenshot():
    return SimpleUploadedFile('shot.png', b'\x89PNG', content_type='image/png')


class BillingTestCase(TestCase):
    """Test cases for billing date arithmetic"""

    def setUp(self):
        self.course = make_course(make_teacher(), duration='4 weeks')
        Course.objects.filter(pk=self.course.pk).update(created_at=utc(2024, 1, 1))
        self.course.refresh_from_db()

    def test_weeks_duration(self):
        self.assertEqual(course_end_date(self.course), utc(2024, 1, 29))

    def test_months_duration_clamps_to_month_end(self):
        self.course.duration = '1 month'
        self.course.created_at = utc(2024, 1, 31)
        self.assertEqual(course_end_date(self.course), utc(2024, 2, 29))

    def test_unparseable_duration_falls_back(self):
        self.course.duration = 'until the exams'
        self.assertEqual(course_end_date(self.course), utc(2024, 1, 31))

    def test_add_months_across_year(self):
        self.assertEqual(add_months(date(2024, 11, 30), 3), date(2025, 2, 28))

    def test_billing_period_is_first_of_month(self):
        self.assertEqual(billing_period_for(utc(2024, 3, 17, 10, 0)), date(2024, 3, 1))


@patch('apps.core.storage.MediaStorage.delete', return_value=True)
@patch('apps.core.storage.MediaStorage.upload', return_value=UPLOADED)
class OnlinePaymentTestCase(TestCase):
    """Test cases for screenshot backed QR payments"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher, duration='3 months')
        Course.objects.filter(pk=self.course.pk).update(created_at=utc(2024, 1, 1))
        self.course.refresh_from_db()
        self.batch = make_batch(self.course)
        self.student = make_student()
        enroll(self.student, self.batch)
        FeeQRCode.objects.create(
            teacher=self.teacher,
            qr_code_url='https://cdn.example.com/qr.png',
            qr_code_public_id='tuition/fee_qr_codes/qr',
        )

    def test_payment_is_recorded_as_current(self, upload, delete):
        payment = PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 5, 9))

        self.assertEqual(payment.amount, Decimal('1500.00'))
        self.assertEqual(payment.billing_period, date(2024, 1, 1))
        self.assertEqual(payment.next_due_date, utc(2024, 2, 4, 9))
        self.assertEqual(payment.batch, self.batch)
        self.assertTrue(payment.is_current)
        self.assertEqual(payment.screenshot_url, UPLOADED['url'])
        self.assertTrue(Notification.objects.filter(teacher=self.teacher).exists())

    def test_second_payment_in_same_month_is_refused(self, upload, delete):
        PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 5, 9))

        with self.assertRaises(exceptions.ValidationError) as raised:
            PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 20, 9))

        self.assertEqual(
            raised.exception.message,
            'You have already paid for this month. Next payment due: 2024-02-04',
        )
        self.assertEqual(FeePayment.objects.count(), 1)
        self.assertEqual(upload.call_count, 1)

    def test_next_month_payment_becomes_current(self, upload, delete):
        first = PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 5, 9))
        second = PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 2, 3, 9))

        first.refresh_from_db()
        self.assertFalse(first.is_current)
        self.assertTrue(second.is_current)
        self.assertEqual(FeePayment.objects.filter(student=self.student).count(), 2)

    def test_payment_after_course_end_is_refused(self, upload, delete):
        Course.objects.filter(pk=self.course.pk).update(duration='4 weeks')

        with self.assertRaisesMessage(exceptions.ValidationError, 'Course has already ended.'):
            PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 30, 9))
        upload.assert_not_called()

    def test_payment_requires_teacher_qr_code(self, upload, delete):
        FeeQRCode.objects.all().delete()

        with self.assertRaisesMessage(exceptions.NotFound, 'Teacher QR code not found.'):
            PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 5))

    def test_payment_requires_enrollment(self, upload, delete):
        with self.assertRaises(exceptions.Forbidden):
            PaymentService.pay_online(make_student(), self.course.pk, screenshot(), now=utc(2024, 1, 5))

    def test_pending_enrollment_cannot_pay(self, upload, delete):
        applicant = make_student()
        enroll(applicant, make_batch(self.course, name='Weekend'), status=BatchEnrollment.Status.PENDING)

        with self.assertRaises(exceptions.Forbidden):
            PaymentService.pay_online(applicant, self.course.pk, screenshot(), now=utc(2024, 1, 5))
        upload.assert_not_called()

    def test_deleted_batch_cannot_pay(self, upload, delete):
        self.batch.delete()

        with self.assertRaises(exceptions.Forbidden):
            PaymentService.pay_online(self.student, self.course.pk, screenshot(), now=utc(2024, 1, 5))

    def test_racing_payment_for_same_period_is_refused(self, upload, delete):
        PaymentService._append(
            self.student, self.course, utc(2024, 1, 5, 9),
            amount=self.course.fee, payment_method=FeePayment.PaymentMethod.CASH,
        )

        with self.assertRaises(exceptions.ValidationError) as raised:
            PaymentService._append(
                self.student, self.course, utc(2024, 1, 6, 9),
                amount=self.course.fee, payment_method=FeePayment.PaymentMethod.CASH,
            )

        self.assertEqual(
            raised.exception.message,
            'You have already paid for this month. Next payment due: 2024-02-04',
        )
        self.assertEqual(FeePayment.objects.filter(student=self.student, is_current=True).count(), 1)
        self.assertEqual(FeePayment.objects.filter(student=self.student).count(), 1)

    def test_pay_through_api(self, upload, delete):
        Course.objects.filter(pk=self.course.pk).update(created_at=timezone.now())

        response = auth_client(self.student).post(
            reverse('finance:student_payments'),
            {'course': str(self.course.pk), 'transaction_id': 'UPI123', 'screenshot': screenshot()},
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['transaction_id'], 'UPI123')
        history = auth_client(self.student).get(reverse('finance:student_payments'))
        self.assertEqual(history.json()['data']['pagination']['total'], 1)

    def test_api_requires_screenshot(self, upload, delete):
        response = auth_client(self.student).post(
            reverse('finance:student_payments'), {'course': str(self.course.pk)}
        )
        self.assertEqual(response.status_code, 400)


class OfflinePaymentTestCase(TestCase):
    """Test cases for cash payments recorded by the teacher"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.batch = make_batch(self.course)
        self.student = make_student()
        enroll(self.student, self.batch)
        self.client = auth_client(self.teacher)

    def test_record_cash_payment(self):
        response = self.client.post(
            reverse('finance:offline_payment'),
            {'student': str(self.student.pk), 'course': str(self.course.pk), 'notes': 'Paid at class'},
            format='json',
        )

        self.assertEqual(response.status_code, 201)
        payment = FeePayment.objects.get(student=self.student)
        self.assertEqual(payment.payment_method, FeePayment.PaymentMethod.CASH)
        self.assertEqual(payment.recorded_by, self.teacher)
        self.assertEqual(payment.amount, self.course.fee)
        self.assertTrue(Notification.objects.filter(student=self.student).exists())

    def test_cash_payment_in_paid_month_is_refused(self):
        self.client.post(
            reverse('finance:offline_payment'),
            {'student': str(self.student.pk), 'course': str(self.course.pk)},
            format='json',
        )

        response = self.client.post(
            reverse('finance:offline_payment'),
            {'student': str(self.student.pk), 'course': str(self.course.pk), 'amount': '500.00'},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('You have already paid for this month', response.json()['message'])

    def test_backdated_payment_does_not_replace_current(self):
        now = timezone.now()
        current = PaymentService.record_offline_payment(
            self.teacher, self.student.pk, self.course.pk, now=now
        )
        earlier = add_months(timezone.localdate(now), -1)

        backdated = PaymentService.record_offline_payment(
            self.teacher, self.student.pk, self.course.pk, payment_date=earlier, now=now
        )

        current.refresh_from_db()
        self.assertTrue(current.is_current)
        self.assertFalse(backdated.is_current)

    def test_future_payment_date_is_refused(self):
        response = self.client.post(
            reverse('finance:offline_payment'),
            {
                'student': str(self.student.pk),
                'course': str(self.course.pk),
                'payment_date': (timezone.localdate() + timedelta(days=2)).isoformat(),
            },
            format='json',
        )
        self.assertEqual(response.status_code, 400)

    def test_student_must_be_enrolled(self):
        response = self.client.post(
            reverse('finance:offline_payment'),
            {'student': str(make_student().pk), 'course': str(self.course.pk)},
            format='json',
        )
        self.assertEqual(response.status_code, 400)

    def test_teacher_history_totals(self):
        PaymentService.record_offline_payment(self.teacher, self.student.pk, self.course.pk, amount=Decimal('700'))

        response = self.client.get(reverse('finance:teacher_payments'), {'method': 'cash'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(str(response.json()['data']['total_amount'])), Decimal('700'))
        self.assertEqual(len(response.json()['data']['payments']), 1)


class DuePaymentsTestCase(TestCase):
    """Test cases for the overdue sweep, reminders and upcoming payments"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.batch = make_batch(self.course)
        self.student = make_student()
        enroll(self.student, self.batch)

    def add_payment(self, paid_at, **kwargs):
        kwargs.setdefault('next_due_date', paid_at + timedelta(days=30))
        return FeePayment.objects.create(
            student=self.student,
            teacher=self.teacher,
            course=self.course,
            batch=self.batch,
            billing_period=billing_period_for(paid_at),
            paid_at=paid_at,
            amount=self.course.fee,
            **kwargs
        )

    def test_overdue_sweep_is_idempotent(self):
        payment = self.add_payment(utc(2024, 1, 5))

        first = PaymentService.mark_overdue_payments(now=utc(2024, 2, 10))
        second = PaymentService.mark_overdue_payments(now=utc(2024, 2, 11))

        self.assertEqual(first['updated_count'], 1)
        self.assertEqual(first['overdue_payments'], [str(payment.pk)])
        self.assertEqual(second['updated_count'], 0)
        payment.refresh_from_db()
        self.assertEqual(payment.status, FeePayment.Status.OVERDUE)

    def test_overdue_sweep_ignores_superseded_rows(self):
        self.add_payment(utc(2024, 1, 5), is_current=False)

        result = PaymentService.mark_overdue_payments(now=utc(2024, 3, 1))

        self.assertEqual(result['updated_count'], 0)

    def test_overdue_dry_run_changes_nothing(self):
        payment = self.add_payment(utc(2024, 1, 5))

        result = PaymentService.mark_overdue_payments(now=utc(2024, 2, 10), dry_run=True)

        self.assertEqual(result['updated_count'], 0)
        self.assertEqual(len(result['overdue_payments']), 1)
        payment.refresh_from_db()
        self.assertEqual(payment.status, FeePayment.Status.PAID)

    def test_overdue_command_reports_count(self):
        self.add_payment(timezone.now() - timedelta(days=40))
        out = StringIO()

        call_command('mark_overdue_payments', stdout=out)

        self.assertIn('Marked 1 payments as overdue', out.getvalue())

    def test_reminders_sent_once_per_day(self):
        now = timezone.now()
        self.add_payment(now - timedelta(days=27))

        first = PaymentService.send_fee_reminders(now=now)
        second = PaymentService.send_fee_reminders(now=now)

        self.assertEqual(first['notified'], 1)
        self.assertEqual(second['notified'], 0)
        reminders = Notification.objects.filter(
            student=self.student, notification_type=Notification.NotificationType.FEE_REMINDER
        )
        self.assertEqual(reminders.count(), 1)

    def test_fee_due_today_is_emailed(self):
        now = timezone.now()
        self.add_payment(now - timedelta(days=30), next_due_date=now)

        result = PaymentService.send_fee_reminders(now=now)

        self.assertEqual(result['emailed'], 1)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.student.email])

    def test_reminders_skip_distant_due_dates(self):
        now = timezone.now()
        self.add_payment(now)

        self.assertEqual(PaymentService.send_fee_reminders(now=now), {'notified': 0, 'emailed': 0})

    def test_upcoming_without_payment_is_pending(self):
        response = auth_client(self.student).get(reverse('finance:upcoming_payments'))

        self.assertEqual(response.status_code, 200)
        upcoming = response.json()['data']
        self.assertEqual(len(upcoming), 1)
        self.assertEqual(upcoming[0]['status'], 'pending')
        self.assertIsNone(upcoming[0]['last_payment'])

    def test_upcoming_after_recent_payment_is_pending(self):
        now = timezone.now()
        payment = self.add_payment(now - timedelta(days=1))

        upcoming = PaymentService.upcoming_payments(self.student, now=now)

        self.assertEqual(upcoming[0]['status'], FeePayment.Status.PENDING)
        self.assertEqual(upcoming[0]['next_due_date'], payment.next_due_date)

    def test_upcoming_past_due_is_overdue(self):
        now = timezone.now()
        self.add_payment(now - timedelta(days=31))

        upcoming = PaymentService.upcoming_payments(self.student, now=now)

        self.assertEqual(upcoming[0]['status'], FeePayment.Status.OVERDUE)

    def test_upcoming_skips_ended_courses(self):
        Course.objects.filter(pk=self.course.pk).update(duration='1 day', created_at=utc(2024, 1, 1))
        self.assertEqual(PaymentService.upcoming_payments(self.student), [])


@patch('apps.core.storage.MediaStorage.delete', return_value=True)
@patch('apps.core.storage.MediaStorage.upload', return_value=UPLOADED)
class QRCodeTestCase(TestCase):
    """Test cases for the teacher's payment QR code"""

    def setUp(self):
        self.teacher = make_teacher()
        self.client = auth_client(self.teacher)

    def qr_image(self):
        return SimpleUploadedFile('qr.png', b'\x89PNG', content_type='image/png')

    def test_upload_and_fetch_by_course(self, upload, delete):
        response = self.client.post(
            reverse('finance:teacher_qr_code'), {'qr_code': self.qr_image(), 'upi_id': 'teacher@upi'}
        )
        self.assertEqual(response.status_code, 201)

        course = make_course(self.teacher)
        response = auth_client(make_student()).get(reverse('finance:course_qr_code', args=[course.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['upi_id'], 'teacher@upi')
        self.assertEqual(response.json()['data']['qr_code_url'], UPLOADED['url'])

    def test_second_upload_conflicts(self, upload, delete):
        self.client.post(reverse('finance:teacher_qr_code'), {'qr_code': self.qr_image()})
        response = self.client.post(reverse('finance:teacher_qr_code'), {'qr_code': self.qr_image()})
        self.assertEqual(response.status_code, 409)

    def test_upload_requires_image(self, upload, delete):
        response = self.client.post(reverse('finance:teacher_qr_code'), {'upi_id': 'teacher@upi'})
        self.assertEqual(response.status_code, 400)

    def test_delete_removes_stored_image(self, upload, delete):
        self.client.post(reverse('finance:teacher_qr_code'), {'qr_code': self.qr_image()})

        response = self.client.delete(reverse('finance:teacher_qr_code'))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(FeeQRCode.objects.filter(teacher=self.teacher).exists())
        delete.assert_called_once_with(UPLOADED['public_id'])


class ExpenseTestCase(TestCase):
    """Test cases for teacher expenses"""

    def setUp(self):
        self.teacher = make_teacher()
        self.client = auth_client(self.teacher)

    def add_expense(self, amount, category='MATERIALS', status=TeacherExpense.Status.PENDING, day=date(2024, 4, 2)):
        return TeacherExpense.objects.create(
            teacher=self.teacher,
            amount=Decimal(amount),
            description='Whiteboard markers',
            category=category,
            date=day,
            status=status,
        )

    def test_create_expense_starts_pending(self):
        response = self.client.post(
            reverse('finance:expenses'),
            {'amount': '250.00', 'description': 'Printer ink', 'category': 'EQUIPMENT', 'date': '2024-04-01'},
            format='json',
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['status'], 'PENDING')

    def test_status_cannot_be_set_by_teacher(self):
        response = self.client.post(
            reverse('finance:expenses'),
            {'amount': '90.00', 'description': 'Chalk', 'date': '2024-04-01', 'status': 'APPROVED'},
            format='json',
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(TeacherExpense.objects.get().status, TeacherExpense.Status.PENDING)

    def test_zero_amount_is_rejected(self):
        response = self.client.post(
            reverse('finance:expenses'),
            {'amount': '0', 'description': 'Nothing', 'date': '2024-04-01'},
            format='json',
        )
        self.assertEqual(response.status_code, 400)

    def test_approved_expense_cannot_be_updated(self):
        expense = self.add_expense('100.00', status=TeacherExpense.Status.APPROVED)

        response = self.client.put(
            reverse('finance:expense_detail', args=[expense.pk]), {'amount': '120.00'}, format='json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Cannot update expense that is not in pending status')
        expense.refresh_from_db()
        self.assertEqual(expense.amount, Decimal('100.00'))

    def test_pending_expense_can_be_deleted(self):
        expense = self.add_expense('100.00')

        response = self.client.delete(reverse('finance:expense_detail', args=[expense.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(TeacherExpense.objects.filter(pk=expense.pk).exists())

    def test_rejected_expense_cannot_be_deleted(self):
        expense = self.add_expense('100.00', status=TeacherExpense.Status.REJECTED)
        with self.assertRaises(exceptions.ValidationError):
            ExpenseService.delete_expense(self.teacher, expense.pk)

    def test_other_teachers_expense_is_not_found(self):
        expense = TeacherExpense.objects.create(
            teacher=make_teacher(), amount=Decimal('10'), description='Tea', date=date(2024, 4, 1)
        )
        response = self.client.get(reverse('finance:expense_detail', args=[expense.pk]))
        self.assertEqual(response.status_code, 404)

    def test_summary_groups_by_category_status_and_month(self):
        self.add_expense('100.00', category='MATERIALS')
        self.add_expense('50.00', category='SOFTWARE', status=TeacherExpense.Status.APPROVED)
        self.add_expense('25.00', category='MATERIALS', day=date(2024, 5, 3))

        summary = ExpenseService.summary(self.teacher, {})

        self.assertEqual(summary['total_expenses'], Decimal('175.00'))
        self.assertEqual(summary['total_count'], 3)
        self.assertEqual(summary['category_totals']['MATERIALS'], Decimal('125.00'))
        self.assertEqual(summary['status_totals']['APPROVED'], Decimal('50.00'))
        self.assertEqual(summary['monthly_totals']['2024-04']['count'], 2)

    def test_list_rejects_unknown_category(self):
        response = self.client.get(reverse('finance:expenses'), {'category': 'TRAVEL'})
        self.assertEqual(response.status_code, 400)
