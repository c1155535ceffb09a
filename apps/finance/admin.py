# apps/finance/admin.py

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from .models import FeePayment, FeeQRCode, TeacherExpense


@admin.register(FeePayment)
class FeePaymentAdmin(admin.ModelAdmin):
    """
    Admin interface for the fee payment ledger.

    Rows are append-only; the admin shows them but never edits amounts or periods.
    """
    list_display = ('student', 'course', 'billing_period', 'payment_method', 'amount', 'status',
                    'next_due_date', 'is_current')
    list_filter = ('payment_method', 'status', 'is_current', 'billing_period')
    search_fields = ('student__email', 'student__fullname', 'course__title', 'transaction_id')
    date_hierarchy = 'paid_at'
    readonly_fields = ('student', 'teacher', 'course', 'batch', 'payment_method', 'billing_period',
                       'paid_at', 'next_due_date', 'amount', 'is_current', 'screenshot_url',
                       'transaction_id', 'recorded_by', 'created_at', 'updated_at')

    fieldsets = (
        (_('Payment'), {
            'fields': ('student', 'teacher', 'course', 'batch', 'payment_method', 'amount')
        }),
        (_('Billing'), {
            'fields': ('billing_period', 'paid_at', 'next_due_date', 'status', 'is_recurring', 'is_current')
        }),
        (_('Evidence'), {
            'fields': ('screenshot_url', 'transaction_id', 'notes', 'recorded_by')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('student', 'course')


@admin.register(FeeQRCode)
class FeeQRCodeAdmin(admin.ModelAdmin):
    list_display = ('teacher', 'upi_id', 'updated_at')
    search_fields = ('teacher__email', 'teacher__fullname', 'upi_id')
    readonly_fields = ('qr_code_url', 'qr_code_public_id', 'created_at', 'updated_at')
    raw_id_fields = ('teacher',)


@admin.register(TeacherExpense)
class TeacherExpenseAdmin(admin.ModelAdmin):
    """
    Admin interface for TeacherExpense model. Approval and rejection happen here.
    """
    list_display = ('teacher', 'category', 'amount', 'date', 'status')
    list_filter = ('category', 'status', 'date')
    search_fields = ('teacher__email', 'teacher__fullname', 'description')
    date_hierarchy = 'date'
    readonly_fields = ('receipt_url', 'receipt_public_id', 'created_at', 'updated_at')
    raw_id_fields = ('teacher',)
    actions = ['approve_expenses', 'reject_expenses']

    fieldsets = (
        (_('Expense'), {
            'fields': ('teacher', 'category', 'amount', 'date', 'description', 'notes')
        }),
        (_('Review'), {
            'fields': ('status',)
        }),
        (_('Receipt'), {
            'fields': ('receipt_url', 'receipt_public_id'),
            'classes': ('collapse',)
        }),
    )

    def approve_expenses(self, request, queryset):
        """Admin action to approve pending expenses."""
        updated = queryset.filter(status=TeacherExpense.Status.PENDING).update(status=TeacherExpense.Status.APPROVED)
        self.message_user(request, f'{updated} expenses approved.', messages.SUCCESS)
    approve_expenses.short_description = _('Approve selected expenses')

    def reject_expenses(self, request, queryset):
        """Admin action to reject pending expenses."""
        updated = queryset.filter(status=TeacherExpense.Status.PENDING).update(status=TeacherExpense.Status.REJECTED)
        self.message_user(request, f'{updated} expenses rejected.', messages.WARNING)
    reject_expenses.short_description = _('Reject selected expenses')
