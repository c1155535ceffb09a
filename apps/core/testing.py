"""
Factory helpers shared by the test suites of every app.
"""

import itertools
from datetime import date
from decimal import Decimal

from django.db.models import F
from rest_framework.test import APIClient

from apps.academics.models import Course, Batch, BatchEnrollment, CourseApplication
from apps.users.models import User, TeacherProfile, StudentProfile
from apps.users.tokens import create_session_token

PASSWORD = 'Secret#123'

_sequence = itertools.count(1)


def make_user(role, verified=True, **kwargs):
    number = next(_sequence)
    kwargs.setdefault('email', f'{role}{number}@example.com')
    kwargs.setdefault('fullname', f'{role.title()} {number}')
    kwargs.setdefault('phone', f'9{number:09d}')
    user = User.objects.create_user(
        password=kwargs.pop('password', PASSWORD),
        role=role,
        is_verified=verified,
        **kwargs
    )
    return user


def make_teacher(complete=True, **kwargs):
    teacher = make_user(User.Role.TEACHER, **kwargs)
    TeacherProfile.objects.create(
        user=teacher,
        qualifications=[{'degree': 'M.Sc', 'institution': 'State University'}],
        experience_years=5,
        previous_institutions=['City School'],
        subjects_taught=['Mathematics'],
        street='12 Park Road',
        city='Pune',
        state='Maharashtra',
        pincode='411001' if complete else '',
    )
    return teacher


def make_student(complete=True, **kwargs):
    student = make_user(User.Role.STUDENT, **kwargs)
    StudentProfile.objects.create(
        user=student,
        gender='female',
        education_level='School',
        education_institution='City School',
        education_grade='10',
        education_year_of_study='2024',
        guardian_name='Asha',
        guardian_relation='Mother' if complete else '',
        guardian_phone='9876543210',
    )
    return student


def make_course(teacher, **kwargs):
    kwargs.setdefault('title', 'Algebra Basics')
    kwargs.setdefault('description', 'Linear equations and inequalities')
    kwargs.setdefault('fee', Decimal('1500.00'))
    kwargs.setdefault('duration', '3 months')
    kwargs.setdefault('category', ['maths'])
    return Course.objects.create(teacher=teacher, **kwargs)


def make_batch(course, **kwargs):
    kwargs.setdefault('name', f'Batch {next(_sequence)}')
    kwargs.setdefault('start_date', date(2024, 1, 1))
    kwargs.setdefault('days_of_week', ['Monday', 'Wednesday'])
    kwargs.setdefault('time', '18:00')
    kwargs.setdefault('max_strength', 10)
    return Batch.objects.create(course=course, **kwargs)


def enroll(student, batch, status=BatchEnrollment.Status.ACTIVE):
    """Seat ``student`` in ``batch`` the way an accepted application would."""
    enrollment = BatchEnrollment.objects.create(batch=batch, student=student, status=status)
    CourseApplication.objects.get_or_create(course=batch.course, student=student)
    Batch.objects.filter(pk=batch.pk).update(current_strength=F('current_strength') + 1)
    batch.refresh_from_db()
    return enrollment


def auth_client(user, lifetime_days=1):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {create_session_token(user, lifetime_days)}')
    return client
