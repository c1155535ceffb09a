from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """
    Serializer for Notification model.
    """
    related_course_title = serializers.CharField(source='related_course.title', read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            'id', 'title', 'message', 'notification_type', 'status', 'read_at',
            'related_course', 'related_course_title', 'created_at',
        ]
        read_only_fields = fields
