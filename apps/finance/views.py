from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.core import exceptions
from apps.core.permissions import IsTeacher, IsStudent
from apps.core.responses import success_response, created_response
from .serializers import (
    FeePaymentSerializer, OnlinePaymentSerializer, OfflinePaymentSerializer,
    FeeQRCodeSerializer, TeacherExpenseSerializer,
)
from .services import PaymentService, FeeQRService, ExpenseService


# ==================== QR CODES ====================

class TeacherQRCodeView(APIView):
    """
    The teacher's own payment QR code.
    """
    permission_classes = [IsTeacher]

    def get(self, request):
        qr_code = FeeQRService.get_for_teacher(request.user)
        return success_response(FeeQRCodeSerializer(qr_code).data, 'QR code retrieved successfully')

    def post(self, request):
        serializer = FeeQRCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        image = request.FILES.get('qr_code')
        if image is None:
            raise exceptions.ValidationError('QR code image is required')
        qr_code = FeeQRService.create(request.user, image, **serializer.validated_data)
        return created_response(FeeQRCodeSerializer(qr_code).data, 'QR code uploaded successfully')

    def put(self, request):
        serializer = FeeQRCodeSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        qr_code = FeeQRService.update(
            request.user, image=request.FILES.get('qr_code'), **serializer.validated_data
        )
        return success_response(FeeQRCodeSerializer(qr_code).data, 'QR code updated successfully')

    def delete(self, request):
        FeeQRService.delete(request.user)
        return success_response(message='QR code deleted successfully')


class CourseQRCodeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, course_id):
        qr_code = FeeQRService.get_for_course(course_id)
        return success_response(FeeQRCodeSerializer(qr_code).data, 'QR code retrieved successfully')


# ==================== PAYMENTS ====================

class StudentPaymentView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        payments, pagination = PaymentService.student_history(request.user, request.query_params)
        return success_response(
            {'payments': FeePaymentSerializer(payments, many=True).data, 'pagination': pagination},
            'Payments retrieved successfully',
        )

    def post(self, request):
        serializer = OnlinePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = PaymentService.pay_online(
            request.user,
            data['course'],
            data['screenshot'],
            transaction_id=data.get('transaction_id', ''),
        )
        return created_response(FeePaymentSerializer(payment).data, 'Payment submitted successfully')


class UpcomingPaymentsView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        upcoming = PaymentService.upcoming_payments(request.user)
        for item in upcoming:
            last = item['last_payment']
            item['last_payment'] = FeePaymentSerializer(last).data if last else None
        return success_response(upcoming, 'Upcoming payments retrieved successfully')


class TeacherPaymentListView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        payments, pagination, total = PaymentService.teacher_history(request.user, request.query_params)
        return success_response(
            {
                'payments': FeePaymentSerializer(payments, many=True).data,
                'pagination': pagination,
                'total_amount': total,
            },
            'Payments retrieved successfully',
        )


class OfflinePaymentView(APIView):
    permission_classes = [IsTeacher]

    def post(self, request):
        serializer = OfflinePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payment = PaymentService.record_offline_payment(
            request.user,
            data['student'],
            data['course'],
            batch_id=data.get('batch'),
            payment_date=data.get('payment_date'),
            amount=data.get('amount'),
            notes=data.get('notes', ''),
        )
        return created_response(FeePaymentSerializer(payment).data, 'Offline payment recorded successfully')


# ==================== EXPENSES ====================

class ExpenseListView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        expenses, pagination, total = ExpenseService.list_expenses(request.user, request.query_params)
        return success_response(
            {
                'expenses': TeacherExpenseSerializer(expenses, many=True).data,
                'pagination': pagination,
                'total_amount': total,
            },
            'Expenses retrieved successfully',
        )

    def post(self, request):
        serializer = TeacherExpenseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = ExpenseService.create_expense(
            request.user, serializer.validated_data, receipt=request.FILES.get('receipt')
        )
        return created_response(TeacherExpenseSerializer(expense).data, 'Expense created successfully')


class ExpenseSummaryView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request):
        summary = ExpenseService.summary(request.user, request.query_params)
        return success_response(summary, 'Expense summary retrieved successfully')


class ExpenseDetailView(APIView):
    permission_classes = [IsTeacher]

    def get(self, request, expense_id):
        expense = ExpenseService.get_expense(request.user, expense_id)
        return success_response(TeacherExpenseSerializer(expense).data, 'Expense retrieved successfully')

    def put(self, request, expense_id):
        serializer = TeacherExpenseSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        expense = ExpenseService.update_expense(
            request.user, expense_id, serializer.validated_data, receipt=request.FILES.get('receipt')
        )
        return success_response(TeacherExpenseSerializer(expense).data, 'Expense updated successfully')

    def delete(self, request, expense_id):
        ExpenseService.delete_expense(request.user, expense_id)
        return success_response(message='Expense deleted successfully')
