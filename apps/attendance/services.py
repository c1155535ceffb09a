"""
Attendance marking and reporting.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.core import exceptions
from apps.core.pagination import paginate
from apps.academics.models import BatchEnrollment
from apps.academics.services import get_owned_batch
from apps.users.services import require_complete_teacher
from .models import Attendance

logger = logging.getLogger(__name__)

ATTENDANCE_SORT_FIELDS = {
    'date': 'date',
    'status': 'status',
    'created_at': 'created_at',
}


def _apply_filters(queryset, params):
    if params.get('date'):
        queryset = queryset.filter(date=params['date'])
    if params.get('start_date'):
        queryset = queryset.filter(date__gte=params['start_date'])
    if params.get('end_date'):
        queryset = queryset.filter(date__lte=params['end_date'])
    status_filter = params.get('status')
    if status_filter:
        if status_filter not in Attendance.Status.values:
            raise exceptions.ValidationError(f"Invalid attendance status '{status_filter}'")
        queryset = queryset.filter(status=status_filter)
    return queryset


class AttendanceService:
    """
    Service class for attendance operations.
    """

    @staticmethod
    def mark_attendance(teacher, batch_id, date, records):
        """
        Upsert one record per student for (batch, date).

        Args:
            teacher: The teacher marking attendance
            batch_id: Batch the class belongs to
            date: Class date (not in the future)
            records: List of dicts with ``student``, ``status`` and optional ``notes``

        Returns:
            List of (attendance, created) tuples
        """
        require_complete_teacher(teacher)
        batch = get_owned_batch(teacher, batch_id)

        if date > timezone.localdate():
            raise exceptions.ValidationError('Cannot mark attendance for a future date')

        student_ids = [record['student'] for record in records]
        if len(set(student_ids)) != len(student_ids):
            raise exceptions.ValidationError('Each student may appear only once')

        enrolled = set(
            BatchEnrollment.objects.filter(
                batch=batch,
                status=BatchEnrollment.Status.ACTIVE,
                student_id__in=student_ids,
            ).values_list('student_id', flat=True)
        )
        missing = [str(student_id) for student_id in student_ids if student_id not in enrolled]
        if missing:
            raise exceptions.ValidationError(
                'Some students are not enrolled in this batch',
                errors=[{'field': 'records', 'message': f'Not enrolled: {student_id}'} for student_id in missing],
            )

        results = []
        with transaction.atomic():
            for record in records:
                attendance, created = Attendance.objects.update_or_create(
                    batch=batch,
                    student_id=record['student'],
                    date=date,
                    defaults={
                        'teacher': teacher,
                        'course': batch.course,
                        'status': record['status'],
                        'notes': record.get('notes', ''),
                    }
                )
                results.append((attendance, created))

        logger.info(f"Attendance for {len(results)} students marked in batch {batch.pk} on {date}")
        return results

    @staticmethod
    def view_attendance(teacher, params):
        batch_id = params.get('batch')
        if not batch_id:
            raise exceptions.ValidationError("'batch' is required")
        batch = get_owned_batch(teacher, batch_id)

        queryset = Attendance.objects.filter(batch=batch).select_related('student', 'batch')
        if params.get('student'):
            queryset = queryset.filter(student_id=params['student'])
        queryset = _apply_filters(queryset, params)

        items, pagination = paginate(queryset, params, ATTENDANCE_SORT_FIELDS, 'date')
        return items, pagination, Attendance.breakdown(queryset)

    @staticmethod
    def my_attendance(student, params):
        queryset = Attendance.objects.filter(student=student).select_related('batch', 'course')
        if params.get('batch'):
            queryset = queryset.filter(batch_id=params['batch'])
        queryset = _apply_filters(queryset, params)

        items, pagination = paginate(queryset, params, ATTENDANCE_SORT_FIELDS, 'date')
        return items, pagination, Attendance.breakdown(queryset)
