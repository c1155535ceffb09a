"""
Course catalog and batch enrollment services.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from apps.core import exceptions
from apps.core.pagination import paginate
from apps.attendance.models import Attendance
from apps.communication.models import Notification
from apps.communication.services import NotificationService
from apps.users.models import is_student_complete, StudentProfile
from apps.users.services import require_complete_teacher
from .models import Course, Batch, BatchEnrollment, CourseApplication

logger = logging.getLogger(__name__)

COURSE_SORT_FIELDS = {
    'created_at': 'created_at',
    'title': 'title',
    'fee': 'fee',
    'duration': 'duration',
}
BATCH_SORT_FIELDS = {
    'created_at': 'created_at',
    'name': 'name',
    'start_date': 'start_date',
    'max_strength': 'max_strength',
}
ENROLLMENT_SORT_FIELDS = {
    'enrolled_at': 'enrolled_at',
    'status': 'status',
}


def get_owned_course(teacher, course_id):
    course = Course.objects.filter(pk=course_id).first()
    if course is None:
        raise exceptions.NotFound('Course not found')
    if course.teacher_id != teacher.pk:
        raise exceptions.Forbidden('You do not own this course')
    return course


def get_owned_batch(teacher, batch_id, for_update=False):
    queryset = Batch.objects.select_related('course')
    if for_update:
        queryset = queryset.select_for_update()
    batch = queryset.filter(pk=batch_id, course__is_deleted=False).first()
    if batch is None:
        raise exceptions.NotFound('Batch not found')
    if batch.course.teacher_id != teacher.pk:
        raise exceptions.Forbidden('You do not own this batch')
    return batch


class CourseService:
    """
    Course CRUD for the owning teacher and search for students.
    """

    @staticmethod
    def create_course(teacher, data):
        require_complete_teacher(teacher)
        if Course.objects.filter(teacher=teacher).exists():
            raise exceptions.Conflict('You already have a course. Only one course per teacher is allowed')

        course = Course.objects.create(teacher=teacher, **data)
        logger.info(f"Course '{course.title}' created by {teacher.email}")
        return course

    @staticmethod
    def list_teacher_courses(teacher, params):
        queryset = Course.objects.filter(teacher=teacher)
        return paginate(queryset, params, COURSE_SORT_FIELDS, 'created_at')

    @staticmethod
    def get_teacher_course(teacher, course_id):
        return get_owned_course(teacher, course_id)

    @staticmethod
    def update_course(teacher, course_id, data):
        require_complete_teacher(teacher)
        course = get_owned_course(teacher, course_id)
        for field, value in data.items():
            setattr(course, field, value)
        course.save()
        return course

    @staticmethod
    def delete_course(teacher, course_id):
        require_complete_teacher(teacher)
        course = get_owned_course(teacher, course_id)
        with transaction.atomic():
            course.batches.all().delete()
            course.delete()
        logger.info(f"Course '{course.title}' soft-deleted by {teacher.email}")
        return course

    @staticmethod
    def search_courses(params):
        queryset = Course.objects.select_related('teacher')

        q = params.get('q')
        if q:
            queryset = queryset.filter(Q(title__icontains=q) | Q(description__icontains=q))
        category = params.get('category')
        if category:
            # JSON containment lookups are not available on SQLite; narrow on the
            # serialized text, then match whole entries.
            wanted = category.strip().lower()
            candidates = queryset.filter(category__icontains=wanted)
            matching = [
                pk for pk, categories in candidates.values_list('pk', 'category')
                if wanted in [str(c).lower() for c in categories or []]
            ]
            queryset = queryset.filter(pk__in=matching)
        for param, lookup in (('min_fee', 'fee__gte'), ('max_fee', 'fee__lte')):
            value = params.get(param)
            if value not in (None, ''):
                try:
                    queryset = queryset.filter(**{lookup: float(value)})
                except ValueError:
                    raise exceptions.ValidationError(f"'{param}' must be a number")

        sort_fields = {k: v for k, v in COURSE_SORT_FIELDS.items() if k != 'duration'}
        return paginate(queryset, params, sort_fields, 'created_at')

    @staticmethod
    def get_public_course(course_id):
        course = Course.objects.select_related('teacher').filter(pk=course_id).first()
        if course is None:
            raise exceptions.NotFound('Course not found')
        return course


class BatchService:
    """
    Batch CRUD and read models for the owning teacher.
    """

    @staticmethod
    def create_batch(teacher, course_id, data):
        require_complete_teacher(teacher)
        course = get_owned_course(teacher, course_id)
        if course.batches.filter(name=data['name']).exists():
            raise exceptions.Conflict('A batch with this name already exists in the course')

        try:
            with transaction.atomic():
                batch = Batch.objects.create(course=course, **data)
        except IntegrityError:
            raise exceptions.Conflict('A batch with this name already exists in the course')
        logger.info(f"Batch '{batch.name}' created in '{course.title}'")
        return batch

    @staticmethod
    def update_batch(teacher, batch_id, data):
        require_complete_teacher(teacher)
        batch = get_owned_batch(teacher, batch_id)

        new_name = data.get('name')
        if new_name and new_name != batch.name:
            duplicate = batch.course.batches.filter(name=new_name).exclude(pk=batch.pk)
            if duplicate.exists():
                raise exceptions.Conflict('A batch with this name already exists in the course')

        max_strength = data.get('max_strength')
        if max_strength is not None and max_strength < batch.current_strength:
            raise exceptions.ValidationError(
                f"Maximum strength cannot be less than current strength ({batch.current_strength})"
            )

        for field, value in data.items():
            setattr(batch, field, value)
        batch.save(update_fields=list(data) + ['updated_at'])
        return batch

    @staticmethod
    def delete_batch(teacher, batch_id):
        require_complete_teacher(teacher)
        batch = get_owned_batch(teacher, batch_id)
        if CourseApplication.objects.filter(course=batch.course).exists():
            raise exceptions.Forbidden('Cannot delete a batch of a course that has enrolled students')
        batch.delete()
        logger.info(f"Batch '{batch.name}' soft-deleted by {teacher.email}")
        return batch

    @staticmethod
    def list_teacher_batches(teacher, params):
        queryset = Batch.objects.filter(
            course__teacher=teacher, course__is_deleted=False
        ).select_related('course').annotate(
            enrolled_count=Count('enrollments', filter=Q(enrollments__status=BatchEnrollment.Status.ACTIVE)),
            pending_count=Count('enrollments', filter=Q(enrollments__status=BatchEnrollment.Status.PENDING)),
        )

        if params.get('course'):
            queryset = queryset.filter(course_id=params['course'])
        if params.get('name'):
            queryset = queryset.filter(name__icontains=params['name'])
        if params.get('mode'):
            queryset = queryset.filter(mode=params['mode'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('start_date'):
            queryset = queryset.filter(start_date__gte=params['start_date'])
        if params.get('end_date'):
            queryset = queryset.filter(start_date__lte=params['end_date'])

        items, pagination = paginate(queryset, params, BATCH_SORT_FIELDS, 'created_at')
        for batch in items:
            batch.attendance_stats = Attendance.breakdown(batch.attendance_records.all())
        return items, pagination

    @staticmethod
    def get_batch_detail(teacher, batch_id):
        batch = get_owned_batch(teacher, batch_id)
        batch.attendance_stats = Attendance.breakdown(batch.attendance_records.all())
        batch.student_list = [
            enrollment.student
            for enrollment in batch.enrollments.select_related('student').filter(
                status=BatchEnrollment.Status.ACTIVE
            )
        ]
        return batch

    @staticmethod
    def batch_students(teacher, batch_id):
        """Enrolled students of a batch with their own attendance figures."""
        batch = get_owned_batch(teacher, batch_id)
        rows = []
        for enrollment in batch.enrollments.select_related('student').order_by('student__fullname'):
            records = Attendance.objects.filter(batch=batch, student=enrollment.student)
            rows.append({
                'enrollment': enrollment,
                'student': enrollment.student,
                'attendance': Attendance.breakdown(records),
            })
        return batch, rows

    @staticmethod
    def available_batches(course_id):
        course = CourseService.get_public_course(course_id)
        return course, list(
            course.batches.filter(
                status__in=Batch.OPEN_STATUSES,
                current_strength__lt=F('max_strength'),
            ).order_by('start_date', 'name')
        )


class EnrollmentService:
    """
    Application, approval and removal of students in batches.
    """

    @staticmethod
    def apply_to_batch(student, batch_id):
        """
        Enroll ``student`` into a batch, pending approval when the batch asks for it.

        The batch row is locked while capacity is checked and incremented.
        """
        profile = StudentProfile.objects.filter(user=student).first()
        if not is_student_complete(profile):
            raise exceptions.Forbidden('Complete your student profile before applying to a batch')

        with transaction.atomic():
            batch = Batch.objects.select_for_update().select_related('course').filter(
                pk=batch_id, course__is_deleted=False
            ).first()
            if batch is None:
                raise exceptions.NotFound('Batch not found')
            if not batch.is_open:
                raise exceptions.ValidationError('This batch is not accepting applications')
            if BatchEnrollment.objects.filter(batch=batch, student=student).exists():
                raise exceptions.Conflict('You are already enrolled in this batch')
            if BatchEnrollment.objects.filter(
                student=student, batch__course=batch.course, batch__is_deleted=False
            ).exists():
                raise exceptions.Conflict('You are already enrolled in another batch of this course')
            if batch.is_full:
                raise exceptions.ValidationError('Batch is full')

            enrollment = BatchEnrollment.objects.create(
                batch=batch,
                student=student,
                status=(
                    BatchEnrollment.Status.PENDING if batch.requires_approval
                    else BatchEnrollment.Status.ACTIVE
                ),
            )
            CourseApplication.objects.get_or_create(course=batch.course, student=student)
            Batch.objects.filter(pk=batch.pk).update(current_strength=F('current_strength') + 1)
            batch.refresh_from_db(fields=['current_strength'])

        NotificationService.notify(
            batch.course.teacher,
            'New batch application',
            f"{student.fullname} applied to {batch.name}",
            notification_type=Notification.NotificationType.COURSE_UPDATE,
            related_course=batch.course,
        )
        logger.info(f"{student.email} applied to batch {batch.pk} ({enrollment.status})")
        return enrollment

    @staticmethod
    def decide_enrollment(teacher, enrollment_id, action):
        if action not in ('approve', 'reject'):
            raise exceptions.ValidationError("Action must be 'approve' or 'reject'")

        with transaction.atomic():
            enrollment = BatchEnrollment.objects.select_related(
                'batch__course', 'student'
            ).filter(pk=enrollment_id).first()
            if enrollment is None:
                raise exceptions.NotFound('Enrollment not found')
            if enrollment.batch.course.teacher_id != teacher.pk:
                raise exceptions.Forbidden('You do not own this batch')
            if enrollment.status != BatchEnrollment.Status.PENDING:
                raise exceptions.ValidationError('Enrollment is not pending approval')

            batch = enrollment.batch
            if action == 'approve':
                enrollment.status = BatchEnrollment.Status.ACTIVE
                enrollment.approved_at = timezone.now()
                enrollment.save(update_fields=['status', 'approved_at', 'updated_at'])
            else:
                EnrollmentService._remove(enrollment)

        NotificationService.notify(
            enrollment.student,
            f"Enrollment {'approved' if action == 'approve' else 'rejected'}",
            f"Your application to {batch.name} was {'approved' if action == 'approve' else 'rejected'}",
            notification_type=Notification.NotificationType.COURSE_UPDATE,
            related_course=batch.course,
        )
        logger.info(f"Enrollment {enrollment_id} {action}d by {teacher.email}")
        return enrollment

    @staticmethod
    def unenroll_student(teacher, batch_id, student_id):
        with transaction.atomic():
            batch = get_owned_batch(teacher, batch_id, for_update=True)
            enrollment = BatchEnrollment.objects.filter(batch=batch, student_id=student_id).first()
            if enrollment is None:
                raise exceptions.NotFound('Student is not enrolled in this batch')
            EnrollmentService._remove(enrollment)
        logger.info(f"Student {student_id} removed from batch {batch_id}")

    @staticmethod
    def _remove(enrollment):
        batch_id = enrollment.batch_id
        course = enrollment.batch.course
        student = enrollment.student
        enrollment.delete()
        Batch.all_objects.filter(pk=batch_id, current_strength__gt=0).update(
            current_strength=F('current_strength') - 1
        )
        # The application only stands while the student holds a seat in the course.
        if not BatchEnrollment.objects.filter(student=student, batch__course=course).exists():
            CourseApplication.objects.filter(course=course, student=student).delete()

    @staticmethod
    def my_enrollments(student, params):
        queryset = BatchEnrollment.objects.filter(
            student=student, batch__is_deleted=False, batch__course__is_deleted=False
        ).select_related('batch__course__teacher')
        status_filter = params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return paginate(queryset, params, ENROLLMENT_SORT_FIELDS, 'enrolled_at')

    @staticmethod
    def list_applications(teacher, params):
        queryset = BatchEnrollment.objects.filter(
            batch__course__teacher=teacher, batch__is_deleted=False, batch__course__is_deleted=False
        ).select_related('batch', 'student')
        status_filter = params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if params.get('batch'):
            queryset = queryset.filter(batch_id=params['batch'])
        return paginate(queryset, params, ENROLLMENT_SORT_FIELDS, 'enrolled_at')
