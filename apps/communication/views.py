from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.core.responses import success_response
from .serializers import NotificationSerializer
from .services import NotificationService


class NotificationListView(APIView):
    """
    The caller's notifications with the unread count and next classes.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        result = NotificationService.list_notifications(request.user, request.query_params)
        result['notifications'] = NotificationSerializer(result['notifications'], many=True).data
        return success_response(result, 'Notifications retrieved successfully')


class NotificationReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, notification_id):
        notification = NotificationService.mark_as_read(request.user, notification_id)
        return success_response(NotificationSerializer(notification).data, 'Notification marked as read')


class NotificationReadAllView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        count = NotificationService.mark_all_read(request.user)
        return success_response({'modified_count': count}, 'All notifications marked as read')


class NotificationDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, notification_id):
        NotificationService.delete_notification(request.user, notification_id)
        return success_response(message='Notification deleted successfully')
