from django.urls import path

from . import views

app_name = 'finance'

urlpatterns = [
    # QR codes
    path('teacher/qr-code/', views.TeacherQRCodeView.as_view(), name='teacher_qr_code'),
    path('courses/<uuid:course_id>/qr-code/', views.CourseQRCodeView.as_view(), name='course_qr_code'),

    # Payments
    path('student/payments/', views.StudentPaymentView.as_view(), name='student_payments'),
    path('student/payments/upcoming/', views.UpcomingPaymentsView.as_view(), name='upcoming_payments'),
    path('teacher/payments/', views.TeacherPaymentListView.as_view(), name='teacher_payments'),
    path('teacher/payments/offline/', views.OfflinePaymentView.as_view(), name='offline_payment'),

    # Expenses
    path('teacher/expenses/', views.ExpenseListView.as_view(), name='expenses'),
    path('teacher/expenses/summary/', views.ExpenseSummaryView.as_view(), name='expense_summary'),
    path('teacher/expenses/<uuid:expense_id>/', views.ExpenseDetailView.as_view(), name='expense_detail'),
]
