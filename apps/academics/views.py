from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.core.permissions import IsTeacher, IsStudent
from apps.core.responses import success_response, created_response
from apps.users.serializers import UserSerializer
from .serializers import (
    CourseSerializer, BatchSerializer, BatchCreateSerializer, BatchStatsSerializer,
    BatchDetailSerializer, EnrollmentSerializer, EnrollmentDecisionSerializer,
)
from .services import CourseService, BatchService, EnrollmentService


# ==================== TEACHER: COURSES ====================

class TeacherCourseListView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        courses, pagination = CourseService.list_teacher_courses(request.user, request.query_params)
        return success_response(
            {'courses': CourseSerializer(courses, many=True).data, 'pagination': pagination},
            'Courses retrieved successfully',
        )

    def post(self, request):
        serializer = CourseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = CourseService.create_course(request.user, serializer.validated_data)
        return created_response(CourseSerializer(course).data, 'Course created successfully')


class TeacherCourseDetailView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, course_id):
        course = CourseService.get_teacher_course(request.user, course_id)
        return success_response(CourseSerializer(course).data, 'Course retrieved successfully')

    def put(self, request, course_id):
        serializer = CourseSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        course = CourseService.update_course(request.user, course_id, serializer.validated_data)
        return success_response(CourseSerializer(course).data, 'Course updated successfully')

    def delete(self, request, course_id):
        CourseService.delete_course(request.user, course_id)
        return success_response(message='Course deleted successfully')


# ==================== STUDENT: CATALOG ====================

class CourseSearchView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        courses, pagination = CourseService.search_courses(request.query_params)
        return success_response(
            {'courses': CourseSerializer(courses, many=True).data, 'pagination': pagination},
            'Courses retrieved successfully',
        )


class CourseDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, course_id):
        course = CourseService.get_public_course(course_id)
        data = CourseSerializer(course).data
        data['batches'] = BatchSerializer(course.batches.all(), many=True).data
        return success_response(data, 'Course retrieved successfully')


class AvailableBatchesView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, course_id):
        course, batches = BatchService.available_batches(course_id)
        return success_response(
            {
                'course': CourseSerializer(course).data,
                'batches': BatchSerializer(batches, many=True).data,
            },
            'Available batches retrieved successfully',
        )


# ==================== TEACHER: BATCHES ====================

class TeacherBatchListView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        batches, pagination = BatchService.list_teacher_batches(request.user, request.query_params)
        return success_response(
            {'batches': BatchStatsSerializer(batches, many=True).data, 'pagination': pagination},
            'Batches retrieved successfully',
        )

    def post(self, request):
        serializer = BatchCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        course_id = data.pop('course_id')
        batch = BatchService.create_batch(request.user, course_id, data)
        return created_response(BatchSerializer(batch).data, 'Batch created successfully')


class TeacherBatchDetailView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, batch_id):
        batch = BatchService.get_batch_detail(request.user, batch_id)
        return success_response(BatchDetailSerializer(batch).data, 'Batch retrieved successfully')

    def put(self, request, batch_id):
        serializer = BatchSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        batch = BatchService.update_batch(request.user, batch_id, dict(serializer.validated_data))
        return success_response(BatchSerializer(batch).data, 'Batch updated successfully')

    def delete(self, request, batch_id):
        BatchService.delete_batch(request.user, batch_id)
        return success_response(message='Batch deleted successfully')


class BatchStudentsView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, batch_id):
        batch, rows = BatchService.batch_students(request.user, batch_id)
        students = [
            {
                'enrollment_id': str(row['enrollment'].id),
                'status': row['enrollment'].status,
                'enrolled_at': row['enrollment'].enrolled_at,
                'student': UserSerializer(row['student']).data,
                'attendance': row['attendance'],
            }
            for row in rows
        ]
        return success_response(
            {'batch': BatchSerializer(batch).data, 'students': students},
            'Batch students retrieved successfully',
        )


class UnenrollStudentView(APIView):
    permission_classes = [IsTeacher]

    def delete(self, request, batch_id, student_id):
        EnrollmentService.unenroll_student(request.user, batch_id, student_id)
        return success_response(message='Student removed from batch')


# ==================== ENROLLMENTS ====================

class TeacherEnrollmentListView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        enrollments, pagination = EnrollmentService.list_applications(request.user, request.query_params)
        return success_response(
            {'enrollments': EnrollmentSerializer(enrollments, many=True).data, 'pagination': pagination},
            'Enrollments retrieved successfully',
        )


class EnrollmentDecisionView(APIView):
    permission_classes = [IsTeacher]

    def post(self, request, enrollment_id):
        serializer = EnrollmentDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        action = serializer.validated_data['action']
        enrollment = EnrollmentService.decide_enrollment(request.user, enrollment_id, action)
        if action == 'approve':
            return success_response(EnrollmentSerializer(enrollment).data, 'Enrollment approved')
        return success_response(message='Enrollment rejected')


class ApplyToBatchView(APIView):
    permission_classes = [IsStudent]

    def post(self, request, batch_id):
        enrollment = EnrollmentService.apply_to_batch(request.user, batch_id)
        message = (
            'Application submitted, awaiting teacher approval'
            if enrollment.status == enrollment.Status.PENDING
            else 'Enrolled successfully'
        )
        return created_response(EnrollmentSerializer(enrollment).data, message)


class StudentEnrollmentListView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        enrollments, pagination = EnrollmentService.my_enrollments(request.user, request.query_params)
        return success_response(
            {'enrollments': EnrollmentSerializer(enrollments, many=True).data, 'pagination': pagination},
            'Enrollments retrieved successfully',
        )
