from rest_framework import status
from rest_framework.views import APIView

from apps.core.permissions import IsTeacher, IsStudent
from apps.core.responses import success_response
from .serializers import MarkAttendanceSerializer, AttendanceSerializer
from .services import AttendanceService


class TeacherAttendanceView(APIView):
    """
    Mark attendance for a batch and browse what was marked.
    """
    permission_classes = [IsTeacher]

    def get(self, request):
        records, pagination, stats = AttendanceService.view_attendance(request.user, request.query_params)
        return success_response(
            {
                'attendance': AttendanceSerializer(records, many=True).data,
                'pagination': pagination,
                'stats': stats,
            },
            'Attendance retrieved successfully',
        )

    def post(self, request):
        serializer = MarkAttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        results = AttendanceService.mark_attendance(
            request.user, data['batch'], data['date'], [dict(record) for record in data['records']]
        )
        created = sum(1 for _, was_created in results if was_created)
        return success_response(
            {
                'attendance': AttendanceSerializer([record for record, _ in results], many=True).data,
                'created': created,
                'updated': len(results) - created,
            },
            'Attendance marked successfully',
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class StudentAttendanceView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        records, pagination, stats = AttendanceService.my_attendance(request.user, request.query_params)
        return success_response(
            {
                'attendance': AttendanceSerializer(records, many=True).data,
                'pagination': pagination,
                'stats': stats,
            },
            'Attendance retrieved successfully',
        )
