from decimal import Decimal

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class FeePayment(CoreBaseModel):
    """
    Append-only ledger of monthly fee payments, online and offline alike.

    Each (student, course, billing period) is paid at most once. The newest row
    per (student, course) carries ``is_current`` and is the one due dates and
    the overdue sweep look at.
    """
    class PaymentMethod(models.TextChoices):
        QR_SCAN = 'qr_scan', _('QR Scan')
        CASH = 'cash', _('Cash')

    class Status(models.TextChoices):
        PAID = 'paid', _('Paid')
        PENDING = 'pending', _('Pending')
        OVERDUE = 'overdue', _('Overdue')

    student = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='fee_payments',
        verbose_name=_('student')
    )
    teacher = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='received_payments',
        verbose_name=_('teacher')
    )
    course = models.ForeignKey(
        'academics.Course',
        on_delete=models.CASCADE,
        related_name='payments',
        verbose_name=_('course')
    )
    batch = models.ForeignKey(
        'academics.Batch',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments',
        verbose_name=_('batch')
    )
    payment_method = models.CharField(
        _('payment method'),
        max_length=10,
        choices=PaymentMethod.choices,
        default=PaymentMethod.QR_SCAN
    )
    # First day of the calendar month the payment covers
    billing_period = models.DateField(_('billing period'))
    paid_at = models.DateTimeField(_('paid at'))
    next_due_date = models.DateTimeField(_('next due date'), db_index=True)
    amount = models.DecimalField(
        _('amount'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=Status.choices,
        default=Status.PAID,
        db_index=True
    )
    is_recurring = models.BooleanField(_('is recurring'), default=True)
    is_current = models.BooleanField(_('is current'), default=True)

    screenshot_url = models.URLField(_('payment screenshot'), blank=True)
    screenshot_public_id = models.CharField(max_length=255, blank=True)
    transaction_id = models.CharField(_('transaction ID'), max_length=100, blank=True)
    notes = models.TextField(_('notes'), blank=True)
    recorded_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_payments',
        verbose_name=_('recorded by')
    )

    class Meta:
        verbose_name = _('Fee Payment')
        verbose_name_plural = _('Fee Payments')
        ordering = ['-paid_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'course', 'billing_period'],
                name='unique_payment_per_billing_period',
            ),
            models.UniqueConstraint(
                fields=['student', 'course'],
                condition=Q(is_current=True),
                name='single_current_payment_per_course',
            ),
        ]
        indexes = [
            models.Index(fields=['teacher', 'paid_at'], name='payment_teacher_paid_idx'),
            models.Index(fields=['is_current', 'status', 'next_due_date'], name='payment_current_due_idx'),
        ]

    def __str__(self):
        return f"{self.student.fullname} - {self.course.title} - {self.billing_period:%Y-%m}"


class FeeQRCode(CoreBaseModel):
    """
    The payment-collection QR code a teacher shows to students.
    """
    teacher = models.OneToOneField(
        'users.User',
        on_delete=models.CASCADE,
        related_name='fee_qr_code',
        verbose_name=_('teacher')
    )
    qr_code_url = models.URLField(_('QR code image'))
    qr_code_public_id = models.CharField(max_length=255)
    upi_id = models.CharField(_('UPI ID'), max_length=100, blank=True)
    notes = models.CharField(_('notes'), max_length=255, blank=True)

    class Meta:
        verbose_name = _('Fee QR Code')
        verbose_name_plural = _('Fee QR Codes')

    def __str__(self):
        return f"QR code of {self.teacher.fullname}"


class TeacherExpense(CoreBaseModel):
    """
    Model for tracking a teacher's running costs.
    """
    class ExpenseCategory(models.TextChoices):
        UTILITIES = 'UTILITIES', _('Utilities')
        EQUIPMENT = 'EQUIPMENT', _('Equipment')
        MATERIALS = 'MATERIALS', _('Materials')
        SOFTWARE = 'SOFTWARE', _('Software')
        OTHER = 'OTHER', _('Other')

    class Status(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        APPROVED = 'APPROVED', _('Approved')
        REJECTED = 'REJECTED', _('Rejected')

    teacher = models.ForeignKey(
        'users.User',
        on_delete=models.CASCADE,
        related_name='expenses',
        verbose_name=_('teacher')
    )
    amount = models.DecimalField(
        _('amount'),
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(_('description'), max_length=500)
    category = models.CharField(
        _('category'),
        max_length=20,
        choices=ExpenseCategory.choices,
        default=ExpenseCategory.OTHER
    )
    date = models.DateField(_('expense date'), db_index=True)
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    notes = models.TextField(_('notes'), blank=True)
    receipt_url = models.URLField(_('receipt'), blank=True)
    receipt_public_id = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = _('Teacher Expense')
        verbose_name_plural = _('Teacher Expenses')
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['teacher', 'date'], name='expense_teacher_date_idx'),
            models.Index(fields=['teacher', 'status'], name='expense_teacher_status_idx'),
        ]

    def __str__(self):
        return f"{self.get_category_display()} - {self.amount}"

    @property
    def is_editable(self):
        return self.status == self.Status.PENDING
