# apps/analytics/tests.py

from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse

from apps.core import exceptions
from apps.core.testing import make_teacher, make_student, make_course, make_batch, enroll, auth_client
from apps.finance.models import FeePayment, TeacherExpense
from .services import stats_window, teacher_stats

NOW = datetime(2024, 5, 15, 12, tzinfo=dt_timezone.utc)


@override_settings(TIME_ZONE='UTC')
class TeacherStatsTestCase(TestCase):
    """Test cases for monthly income and expense statistics"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.batch = make_batch(self.course)
        self.students = [make_student() for _ in range(2)]
        for student in self.students:
            enroll(student, self.batch)

    def pay(self, student, paid_at, method, amount):
        return FeePayment.objects.create(
            student=student,
            teacher=self.teacher,
            course=self.course,
            billing_period=date(paid_at.year, paid_at.month, 1),
            paid_at=paid_at,
            next_due_date=paid_at + timedelta(days=30),
            amount=Decimal(amount),
            payment_method=method,
            is_current=False,
        )

    def spend(self, amount, day, status, category='MATERIALS'):
        return TeacherExpense.objects.create(
            teacher=self.teacher,
            amount=Decimal(amount),
            description='Supplies',
            category=category,
            date=day,
            status=status,
        )

    def month(self, stats, key):
        return next(m for m in stats['months'] if m['month'] == key)

    def test_window_covers_five_months(self):
        months = [d.strftime('%Y-%m') for d in stats_window(NOW)]
        self.assertEqual(months, ['2024-02', '2024-03', '2024-04', '2024-05', '2024-06'])

    def test_income_split_by_method(self):
        self.pay(self.students[0], datetime(2024, 4, 3, tzinfo=dt_timezone.utc), FeePayment.PaymentMethod.QR_SCAN, '1500')
        self.pay(self.students[1], datetime(2024, 4, 9, tzinfo=dt_timezone.utc), FeePayment.PaymentMethod.CASH, '1200')

        april = self.month(teacher_stats(self.teacher, now=NOW), '2024-04')

        self.assertEqual(april['online_income'], Decimal('1500'))
        self.assertEqual(april['offline_income'], Decimal('1200'))
        self.assertEqual(april['total_income'], Decimal('2700'))

    def test_only_approved_expenses_count(self):
        self.spend('300', date(2024, 5, 2), TeacherExpense.Status.APPROVED)
        self.spend('900', date(2024, 5, 3), TeacherExpense.Status.PENDING)
        self.spend('400', date(2024, 5, 4), TeacherExpense.Status.REJECTED)

        stats = teacher_stats(self.teacher, now=NOW)
        may = self.month(stats, '2024-05')

        self.assertEqual(may['expenses'], Decimal('300'))
        self.assertEqual(may['expense_breakdown']['MATERIALS'], Decimal('300'))
        self.assertEqual(stats['summary']['total_expenses'], Decimal('300'))

    def test_net_income(self):
        self.pay(self.students[0], datetime(2024, 3, 10, tzinfo=dt_timezone.utc), FeePayment.PaymentMethod.CASH, '1000')
        self.spend('250', date(2024, 3, 12), TeacherExpense.Status.APPROVED, category='UTILITIES')

        stats = teacher_stats(self.teacher, now=NOW)

        self.assertEqual(self.month(stats, '2024-03')['net_income'], Decimal('750'))
        self.assertEqual(stats['summary']['net_income'], Decimal('750'))

    def test_payments_outside_window_are_ignored(self):
        self.pay(self.students[0], datetime(2023, 12, 10, tzinfo=dt_timezone.utc), FeePayment.PaymentMethod.CASH, '1000')

        stats = teacher_stats(self.teacher, now=NOW)

        self.assertEqual(stats['summary']['total_income'], Decimal('0'))

    def test_sort_by_income(self):
        self.pay(self.students[0], datetime(2024, 2, 10, tzinfo=dt_timezone.utc), FeePayment.PaymentMethod.CASH, '500')
        self.pay(self.students[0], datetime(2024, 4, 10, tzinfo=dt_timezone.utc), FeePayment.PaymentMethod.CASH, '900')

        stats = teacher_stats(self.teacher, now=NOW, sort_by='income')

        self.assertEqual([m['month'] for m in stats['months'][:2]], ['2024-04', '2024-02'])

    def test_unknown_sort_key_is_rejected(self):
        with self.assertRaises(exceptions.ValidationError):
            teacher_stats(self.teacher, now=NOW, sort_by='profit')

    def test_stats_endpoint(self):
        response = auth_client(self.teacher).get(reverse('analytics:teacher_stats'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['data']['months']), 5)
        self.assertEqual(response.json()['data']['sort_by'], 'month')

    def test_stats_endpoint_is_teacher_only(self):
        response = auth_client(self.students[0]).get(reverse('analytics:teacher_stats'))
        self.assertEqual(response.status_code, 403)
