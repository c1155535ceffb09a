from rest_framework.views import APIView

from apps.core.permissions import IsTeacher
from apps.core.responses import success_response
from .services import teacher_stats


class TeacherStatsView(APIView):
    """
    Monthly income and expense figures for the calling teacher.
    """
    permission_classes = [IsTeacher]

    def get(self, request):
        stats = teacher_stats(request.user, sort_by=request.query_params.get('sort_by'))
        return success_response(stats, 'Statistics retrieved successfully')
