from rest_framework import serializers

from .models import Attendance


class AttendanceRecordSerializer(serializers.Serializer):
    student = serializers.UUIDField()
    status = serializers.ChoiceField(choices=Attendance.Status.choices)
    notes = serializers.CharField(max_length=255, required=False, allow_blank=True)


class MarkAttendanceSerializer(serializers.Serializer):
    batch = serializers.UUIDField()
    date = serializers.DateField()
    records = AttendanceRecordSerializer(many=True, allow_empty=False)


class AttendanceSerializer(serializers.ModelSerializer):
    """
    Serializer for Attendance model.
    """
    student_name = serializers.CharField(source='student.fullname', read_only=True)
    batch_name = serializers.CharField(source='batch.name', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)

    class Meta:
        model = Attendance
        fields = [
            'id', 'student', 'student_name', 'batch', 'batch_name', 'course', 'course_title',
            'date', 'status', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = fields
