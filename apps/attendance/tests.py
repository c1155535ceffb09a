# apps/attendance/tests.py

from datetime import date, timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.academics.models import BatchEnrollment
from apps.core.testing import make_teacher, make_student, make_course, make_batch, enroll, auth_client
from .models import Attendance


class AttendanceMarkingTestCase(TestCase):
    """Test cases for marking attendance"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.batch = make_batch(self.course)
        self.first = make_student()
        self.second = make_student()
        enroll(self.first, self.batch)
        enroll(self.second, self.batch)
        self.client = auth_client(self.teacher)
        self.day = date(2024, 3, 4)

    def mark(self, records, day=None):
        payload = {
            'batch': str(self.batch.pk),
            'date': (day or self.day).isoformat(),
            'records': records,
        }
        return self.client.post(reverse('attendance:teacher_attendance'), payload, format='json')

    def test_mark_creates_one_record_per_student(self):
        response = self.mark([
            {'student': str(self.first.pk), 'status': 'present'},
            {'student': str(self.second.pk), 'status': 'absent', 'notes': 'Unwell'},
        ])

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['created'], 2)
        self.assertEqual(Attendance.objects.filter(batch=self.batch, date=self.day).count(), 2)
        record = Attendance.objects.get(student=self.second, date=self.day)
        self.assertEqual(record.course, self.course)
        self.assertEqual(record.notes, 'Unwell')

    def test_marking_again_updates_in_place(self):
        self.mark([{'student': str(self.first.pk), 'status': 'present'}])

        response = self.mark([{'student': str(self.first.pk), 'status': 'late'}])

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['updated'], 1)
        records = Attendance.objects.filter(batch=self.batch, student=self.first, date=self.day)
        self.assertEqual(records.count(), 1)
        self.assertEqual(records.get().status, Attendance.Status.LATE)

    def test_future_date_is_rejected(self):
        tomorrow = timezone.localdate() + timedelta(days=1)

        response = self.mark([{'student': str(self.first.pk), 'status': 'present'}], day=tomorrow)

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Attendance.objects.exists())

    def test_student_outside_batch_is_rejected(self):
        outsider = make_student()

        response = self.mark([
            {'student': str(self.first.pk), 'status': 'present'},
            {'student': str(outsider.pk), 'status': 'present'},
        ])

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Attendance.objects.exists())

    def test_pending_enrollment_cannot_be_marked(self):
        pending = make_student()
        enroll(pending, self.batch, status=BatchEnrollment.Status.PENDING)

        response = self.mark([{'student': str(pending.pk), 'status': 'present'}])

        self.assertEqual(response.status_code, 400)

    def test_duplicate_student_in_request_is_rejected(self):
        response = self.mark([
            {'student': str(self.first.pk), 'status': 'present'},
            {'student': str(self.first.pk), 'status': 'absent'},
        ])
        self.assertEqual(response.status_code, 400)

    def test_empty_records_are_rejected(self):
        self.assertEqual(self.mark([]).status_code, 400)

    def test_other_teacher_cannot_mark(self):
        client = auth_client(make_teacher())

        response = client.post(
            reverse('attendance:teacher_attendance'),
            {
                'batch': str(self.batch.pk),
                'date': self.day.isoformat(),
                'records': [{'student': str(self.first.pk), 'status': 'present'}],
            },
            format='json',
        )

        self.assertEqual(response.status_code, 403)


class AttendanceReportTestCase(TestCase):
    """Test cases for attendance listings and stats"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.batch = make_batch(self.course)
        self.student = make_student()
        enroll(self.student, self.batch)
        for offset, status in enumerate(['present', 'present', 'absent', 'late']):
            Attendance.objects.create(
                teacher=self.teacher,
                course=self.course,
                batch=self.batch,
                student=self.student,
                date=date(2024, 3, 1) + timedelta(days=offset),
                status=status,
            )

    def test_teacher_view_reports_breakdown(self):
        response = auth_client(self.teacher).get(
            reverse('attendance:teacher_attendance'), {'batch': str(self.batch.pk)}
        )

        self.assertEqual(response.status_code, 200)
        stats = response.json()['data']['stats']
        self.assertEqual(stats['total'], 4)
        self.assertEqual(stats['present'], 2)
        self.assertEqual(stats['percentage'], 50)
        self.assertEqual(stats['summary'], '2/4 attended (50%)')

    def test_teacher_view_requires_batch(self):
        response = auth_client(self.teacher).get(reverse('attendance:teacher_attendance'))
        self.assertEqual(response.status_code, 400)

    def test_student_filters_by_date_range(self):
        response = auth_client(self.student).get(
            reverse('attendance:student_attendance'),
            {'start_date': '2024-03-02', 'end_date': '2024-03-03', 'sort_by': 'date', 'sort_order': 'asc'},
        )

        self.assertEqual(response.status_code, 200)
        dates = [record['date'] for record in response.json()['data']['attendance']]
        self.assertEqual(dates, ['2024-03-02', '2024-03-03'])

    def test_student_rejects_unknown_status_filter(self):
        response = auth_client(self.student).get(reverse('attendance:student_attendance'), {'status': 'sleeping'})
        self.assertEqual(response.status_code, 400)

    def test_breakdown_of_empty_queryset(self):
        stats = Attendance.breakdown(Attendance.objects.none())
        self.assertEqual(stats['total'], 0)
        self.assertEqual(stats['percentage'], 0)
