from decimal import Decimal

from rest_framework import serializers

from .models import FeePayment, FeeQRCode, TeacherExpense


class FeePaymentSerializer(serializers.ModelSerializer):
    """
    Serializer for FeePayment model.
    """
    student_name = serializers.CharField(source='student.fullname', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    batch_name = serializers.CharField(source='batch.name', read_only=True, default=None)

    class Meta:
        model = FeePayment
        fields = [
            'id', 'student', 'student_name', 'teacher', 'course', 'course_title', 'batch',
            'batch_name', 'payment_method', 'billing_period', 'paid_at', 'next_due_date',
            'amount', 'status', 'is_recurring', 'is_current', 'screenshot_url',
            'transaction_id', 'notes', 'created_at',
        ]
        read_only_fields = fields


class OnlinePaymentSerializer(serializers.Serializer):
    course = serializers.UUIDField()
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    screenshot = serializers.FileField()


class OfflinePaymentSerializer(serializers.Serializer):
    student = serializers.UUIDField()
    course = serializers.UUIDField()
    batch = serializers.UUIDField(required=False, allow_null=True)
    payment_date = serializers.DateField(required=False, allow_null=True)
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True)


class FeeQRCodeSerializer(serializers.ModelSerializer):
    """
    Serializer for FeeQRCode model.
    """
    teacher_name = serializers.CharField(source='teacher.fullname', read_only=True)
    qr_code = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = FeeQRCode
        fields = [
            'id', 'teacher', 'teacher_name', 'qr_code', 'qr_code_url', 'upi_id', 'notes',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'teacher', 'qr_code_url', 'created_at', 'updated_at']

    def validate(self, attrs):
        attrs.pop('qr_code', None)
        return attrs


class TeacherExpenseSerializer(serializers.ModelSerializer):
    """
    Serializer for TeacherExpense model.
    """
    receipt = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = TeacherExpense
        fields = [
            'id', 'amount', 'description', 'category', 'date', 'status', 'notes',
            'receipt', 'receipt_url', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'status', 'receipt_url', 'created_at', 'updated_at']

    def validate(self, attrs):
        attrs.pop('receipt', None)
        return attrs
