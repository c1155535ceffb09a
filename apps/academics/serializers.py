# apps/academics/serializers.py

from rest_framework import serializers

from apps.communication.services import parse_class_time, WEEKDAYS
from .models import Course, Batch, BatchEnrollment

DAY_NAMES = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


class TeacherSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    fullname = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)


class StudentSummarySerializer(TeacherSummarySerializer):
    phone = serializers.CharField(read_only=True)


class CourseSerializer(serializers.ModelSerializer):
    """
    Serializer for Course model.
    """
    teacher = TeacherSummarySerializer(read_only=True)
    category = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    syllabus = serializers.ListField(child=serializers.CharField(max_length=200), required=False)

    class Meta:
        model = Course
        fields = [
            'id', 'teacher', 'title', 'subtitle', 'description', 'prerequisites',
            'category', 'fee', 'duration', 'syllabus', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class BatchSerializer(serializers.ModelSerializer):
    """
    Serializer for Batch model.
    """
    course_title = serializers.CharField(source='course.title', read_only=True)
    subjects = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    days_of_week = serializers.ListField(child=serializers.CharField(max_length=10), allow_empty=False)
    available_seats = serializers.IntegerField(read_only=True)

    class Meta:
        model = Batch
        fields = [
            'id', 'course', 'course_title', 'name', 'subjects', 'start_date', 'days_of_week',
            'time', 'mode', 'max_strength', 'current_strength', 'available_seats',
            'description', 'status', 'requires_approval', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'course', 'current_strength', 'created_at', 'updated_at']
        # Name uniqueness within a course is checked in BatchService
        validators = []

    def validate_days_of_week(self, value):
        days = []
        for day in value:
            number = WEEKDAYS.get(day.strip().lower()[:3])
            if number is None:
                raise serializers.ValidationError(f"'{day}' is not a day of the week")
            if DAY_NAMES[number] not in days:
                days.append(DAY_NAMES[number])
        return days

    def validate_time(self, value):
        if parse_class_time(value) is None:
            raise serializers.ValidationError("Time must look like '18:30' or '6:30 PM'")
        return value.strip()


class BatchCreateSerializer(BatchSerializer):
    course_id = serializers.UUIDField(write_only=True)

    class Meta(BatchSerializer.Meta):
        fields = BatchSerializer.Meta.fields + ['course_id']


class BatchStatsSerializer(BatchSerializer):
    enrolled_count = serializers.IntegerField(read_only=True)
    pending_count = serializers.IntegerField(read_only=True)
    attendance_stats = serializers.DictField(read_only=True)

    class Meta(BatchSerializer.Meta):
        fields = BatchSerializer.Meta.fields + ['enrolled_count', 'pending_count', 'attendance_stats']


class BatchDetailSerializer(BatchSerializer):
    attendance_stats = serializers.DictField(read_only=True)
    student_list = StudentSummarySerializer(many=True, read_only=True)

    class Meta(BatchSerializer.Meta):
        fields = BatchSerializer.Meta.fields + ['attendance_stats', 'student_list']


class EnrollmentSerializer(serializers.ModelSerializer):
    """
    Serializer for BatchEnrollment model.
    """
    student = StudentSummarySerializer(read_only=True)
    batch = BatchSerializer(read_only=True)

    class Meta:
        model = BatchEnrollment
        fields = ['id', 'student', 'batch', 'status', 'enrolled_at', 'approved_at']
        read_only_fields = fields


class EnrollmentDecisionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'])
