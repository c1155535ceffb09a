# apps/academics/tests.py

from django.test import TestCase
from django.urls import reverse

from apps.core.testing import (
    make_teacher, make_student, make_course, make_batch, enroll, auth_client,
)
from apps.communication.models import Notification
from .models import Course, Batch, BatchEnrollment, CourseApplication


COURSE_PAYLOAD = {
    'title': 'Physics Foundation',
    'description': 'Mechanics and optics for class 11',
    'fee': '2000.00',
    'duration': '6 months',
    'category': ['science', 'physics'],
    'syllabus': ['Kinematics', 'Optics'],
}


class CourseTestCase(TestCase):
    """Test cases for course management"""

    def setUp(self):
        self.teacher = make_teacher()
        self.client = auth_client(self.teacher)

    def test_create_course(self):
        response = self.client.post(reverse('academics:teacher_courses'), COURSE_PAYLOAD, format='json')

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['title'], 'Physics Foundation')
        self.assertEqual(data['teacher']['id'], str(self.teacher.pk))
        self.assertEqual(Course.objects.filter(teacher=self.teacher).count(), 1)

    def test_incomplete_profile_cannot_create_course(self):
        teacher = make_teacher(complete=False)

        response = auth_client(teacher).post(reverse('academics:teacher_courses'), COURSE_PAYLOAD, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Course.objects.filter(teacher=teacher).exists())

    def test_second_course_conflicts(self):
        make_course(self.teacher)

        response = self.client.post(reverse('academics:teacher_courses'), COURSE_PAYLOAD, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(Course.objects.filter(teacher=self.teacher).count(), 1)

    def test_student_cannot_create_course(self):
        student = make_student()
        response = auth_client(student).post(reverse('academics:teacher_courses'), COURSE_PAYLOAD, format='json')
        self.assertEqual(response.status_code, 403)

    def test_list_rejects_unknown_sort_field(self):
        make_course(self.teacher)

        response = self.client.get(reverse('academics:teacher_courses'), {'sort_by': 'password'})

        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid sort field 'password'", response.json()['message'])

    def test_list_is_paginated(self):
        make_course(self.teacher)

        response = self.client.get(reverse('academics:teacher_courses'), {'sort_by': 'title', 'sort_order': 'asc'})

        self.assertEqual(response.status_code, 200)
        pagination = response.json()['data']['pagination']
        self.assertEqual(pagination['total'], 1)
        self.assertEqual(pagination['total_pages'], 1)
        self.assertEqual(pagination['page'], 1)

    def test_other_teacher_cannot_update_course(self):
        course = make_course(make_teacher())

        response = self.client.put(
            reverse('academics:teacher_course_detail', args=[course.pk]), {'title': 'Mine'}, format='json'
        )

        self.assertEqual(response.status_code, 403)

    def test_delete_course_cascades_soft_delete_to_batches(self):
        course = make_course(self.teacher)
        batch = make_batch(course)

        response = self.client.delete(reverse('academics:teacher_course_detail', args=[course.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Course.objects.filter(pk=course.pk).exists())
        self.assertTrue(Course.all_objects.get(pk=course.pk).is_deleted)
        self.assertTrue(Batch.all_objects.get(pk=batch.pk).is_deleted)

    def test_search_filters_by_category_and_fee(self):
        make_course(self.teacher, category=['Maths'], fee='1200.00')
        make_course(make_teacher(), title='Chemistry', category=['science'], fee='3000.00')
        student = make_student()

        response = auth_client(student).get(
            reverse('academics:course_search'), {'category': 'maths', 'max_fee': '2000'}
        )

        self.assertEqual(response.status_code, 200)
        titles = [course['title'] for course in response.json()['data']['courses']]
        self.assertEqual(titles, ['Algebra Basics'])

    def test_category_search_matches_whole_entries(self):
        make_course(self.teacher, category=['Maths', 'Olympiad'])
        make_course(make_teacher(), title='Applied Mathematics', category=['Mathematics'])
        student = make_student()

        response = auth_client(student).get(reverse('academics:course_search'), {'category': 'MATHS'})

        titles = [course['title'] for course in response.json()['data']['courses']]
        self.assertEqual(titles, ['Algebra Basics'])


class BatchTestCase(TestCase):
    """Test cases for batch management"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.client = auth_client(self.teacher)

    def test_create_batch_normalizes_days(self):
        payload = {
            'course_id': str(self.course.pk),
            'name': 'Evening',
            'start_date': '2024-02-01',
            'days_of_week': ['mon', 'Thursday', 'MON'],
            'time': '6:30 PM',
            'max_strength': 20,
        }

        response = self.client.post(reverse('academics:teacher_batches'), payload, format='json')

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['days_of_week'], ['Monday', 'Thursday'])
        self.assertEqual(data['current_strength'], 0)
        self.assertEqual(data['available_seats'], 20)

    def test_create_batch_rejects_bad_time(self):
        payload = {
            'course_id': str(self.course.pk),
            'name': 'Evening',
            'start_date': '2024-02-01',
            'days_of_week': ['Monday'],
            'time': 'after school',
            'max_strength': 20,
        }

        response = self.client.post(reverse('academics:teacher_batches'), payload, format='json')

        self.assertEqual(response.status_code, 400)

    def test_duplicate_batch_name_conflicts(self):
        make_batch(self.course, name='Morning')
        payload = {
            'course_id': str(self.course.pk),
            'name': 'Morning',
            'start_date': '2024-02-01',
            'days_of_week': ['Monday'],
            'time': '07:00',
            'max_strength': 5,
        }

        response = self.client.post(reverse('academics:teacher_batches'), payload, format='json')

        self.assertEqual(response.status_code, 409)

    def test_cannot_shrink_below_current_strength(self):
        batch = make_batch(self.course, max_strength=5)
        enroll(make_student(), batch)
        enroll(make_student(), batch)

        response = self.client.put(
            reverse('academics:teacher_batch_detail', args=[batch.pk]), {'max_strength': 1}, format='json'
        )

        self.assertEqual(response.status_code, 400)
        batch.refresh_from_db()
        self.assertEqual(batch.max_strength, 5)

    def test_delete_batch_without_applications_soft_deletes(self):
        batch = make_batch(self.course)

        response = self.client.delete(reverse('academics:teacher_batch_detail', args=[batch.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Batch.objects.filter(pk=batch.pk).exists())
        self.assertTrue(Batch.all_objects.filter(pk=batch.pk, is_deleted=True).exists())

    def test_delete_batch_refused_when_course_has_applications(self):
        batch = make_batch(self.course)
        other = make_batch(self.course)
        enroll(make_student(), other)

        response = self.client.delete(reverse('academics:teacher_batch_detail', args=[batch.pk]))

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Batch.objects.filter(pk=batch.pk).exists())

    def test_batch_list_reports_counts(self):
        batch = make_batch(self.course, requires_approval=True)
        enroll(make_student(), batch)
        enroll(make_student(), batch, status=BatchEnrollment.Status.PENDING)

        response = self.client.get(reverse('academics:teacher_batches'))

        self.assertEqual(response.status_code, 200)
        listed = response.json()['data']['batches'][0]
        self.assertEqual(listed['enrolled_count'], 1)
        self.assertEqual(listed['pending_count'], 1)

    def test_available_batches_hide_full_batches(self):
        open_batch = make_batch(self.course, name='Open', max_strength=2)
        full_batch = make_batch(self.course, name='Full', max_strength=1)
        enroll(make_student(), full_batch)

        response = auth_client(make_student()).get(reverse('academics:available_batches', args=[self.course.pk]))

        self.assertEqual(response.status_code, 200)
        ids = [batch['id'] for batch in response.json()['data']['batches']]
        self.assertEqual(ids, [str(open_batch.pk)])


class EnrollmentTestCase(TestCase):
    """Test cases for applying to batches and approvals"""

    def setUp(self):
        self.teacher = make_teacher()
        self.course = make_course(self.teacher)
        self.batch = make_batch(self.course, max_strength=1)
        self.student = make_student()

    def apply(self, student, batch):
        return auth_client(student).post(reverse('academics:apply_to_batch', args=[batch.pk]))

    def test_apply_enrolls_and_takes_a_seat(self):
        response = self.apply(self.student, self.batch)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['message'], 'Enrolled successfully')
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_strength, 1)
        self.assertTrue(CourseApplication.objects.filter(course=self.course, student=self.student).exists())
        self.assertTrue(Notification.objects.filter(teacher=self.teacher).exists())

    def test_apply_response_reports_taken_seat(self):
        batch = make_batch(self.course, max_strength=2)

        response = self.apply(self.student, batch)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['batch']['current_strength'], 1)
        self.assertEqual(response.json()['data']['batch']['available_seats'], 1)

    def test_full_batch_is_rejected_without_changing_strength(self):
        self.apply(self.student, self.batch)

        response = self.apply(make_student(), self.batch)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Batch is full')
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_strength, 1)
        self.assertEqual(BatchEnrollment.objects.filter(batch=self.batch).count(), 1)

    def test_incomplete_student_cannot_apply(self):
        response = self.apply(make_student(complete=False), self.batch)
        self.assertEqual(response.status_code, 403)

    def test_second_batch_of_same_course_conflicts(self):
        other = make_batch(self.course, max_strength=5)
        self.apply(self.student, self.batch)

        response = self.apply(self.student, other)

        self.assertEqual(response.status_code, 409)

    def test_completed_batch_is_closed(self):
        Batch.objects.filter(pk=self.batch.pk).update(status=Batch.Status.COMPLETED)

        response = self.apply(self.student, self.batch)

        self.assertEqual(response.status_code, 400)

    def test_approval_activates_pending_enrollment(self):
        Batch.objects.filter(pk=self.batch.pk).update(requires_approval=True)
        response = self.apply(self.student, self.batch)
        self.assertEqual(response.json()['message'], 'Application submitted, awaiting teacher approval')
        enrollment = BatchEnrollment.objects.get(batch=self.batch, student=self.student)

        response = auth_client(self.teacher).post(
            reverse('academics:enrollment_decision', args=[enrollment.pk]), {'action': 'approve'}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.status, BatchEnrollment.Status.ACTIVE)
        self.assertIsNotNone(enrollment.approved_at)
        self.assertTrue(Notification.objects.filter(student=self.student).exists())

    def test_rejection_frees_the_seat(self):
        enrollment = enroll(self.student, self.batch, status=BatchEnrollment.Status.PENDING)

        response = auth_client(self.teacher).post(
            reverse('academics:enrollment_decision', args=[enrollment.pk]), {'action': 'reject'}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(BatchEnrollment.objects.filter(pk=enrollment.pk).exists())
        self.assertFalse(CourseApplication.objects.filter(course=self.course, student=self.student).exists())
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_strength, 0)

    def test_unenroll_removes_student(self):
        enroll(self.student, self.batch)

        response = auth_client(self.teacher).delete(
            reverse('academics:unenroll_student', args=[self.batch.pk, self.student.pk])
        )

        self.assertEqual(response.status_code, 200)
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_strength, 0)
        self.assertEqual(list(self.student.student_profile.enrolled_batches), [])

    def test_student_sees_own_enrollments(self):
        enroll(self.student, self.batch)

        response = auth_client(self.student).get(reverse('academics:student_enrollments'))

        self.assertEqual(response.status_code, 200)
        enrollments = response.json()['data']['enrollments']
        self.assertEqual(len(enrollments), 1)
        self.assertEqual(enrollments[0]['batch']['id'], str(self.batch.pk))

    def test_course_detail_lists_live_batches(self):
        deleted = make_batch(self.course, name='Old')
        deleted.delete()

        response = auth_client(self.student).get(reverse('academics:course_detail', args=[self.course.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([b['id'] for b in response.json()['data']['batches']], [str(self.batch.pk)])
