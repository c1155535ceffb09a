# apps/finance/services.py
"""
Fee collection, payment ledger, QR codes and teacher expenses.
"""

import logging
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from apps.core import exceptions
from apps.core.pagination import paginate
from apps.core.storage import DOCUMENT_FORMATS, get_media_storage
from apps.academics.models import Course, BatchEnrollment
from apps.academics.services import get_owned_course
from apps.communication.models import Notification
from apps.communication.services import EmailService, NotificationService
from .billing import billing_period_for, has_course_ended, next_due_from
from .models import FeePayment, FeeQRCode, TeacherExpense

logger = logging.getLogger(__name__)
User = get_user_model()

PAYMENT_SORT_FIELDS = {
    'paid_at': 'paid_at',
    'amount': 'amount',
    'next_due_date': 'next_due_date',
}
EXPENSE_SORT_FIELDS = {
    'date': 'date',
    'amount': 'amount',
    'created_at': 'created_at',
}


def _due_date_label(moment):
    return timezone.localtime(moment).strftime('%Y-%m-%d')


class PaymentService:
    """
    Service class for the monthly fee ledger.
    """

    @staticmethod
    def current_payment(student, course):
        """The row holding the current due date for (student, course), if any."""
        return FeePayment.objects.filter(student=student, course=course, is_current=True).first()

    @staticmethod
    def _ensure_period_unpaid(student, course, period):
        if FeePayment.objects.filter(student=student, course=course, billing_period=period).exists():
            current = PaymentService.current_payment(student, course)
            raise exceptions.ValidationError(
                f"You have already paid for this month. "
                f"Next payment due: {_due_date_label(current.next_due_date)}"
            )

    @staticmethod
    def _append(student, course, paid_at, **fields):
        """
        Add a ledger row; it becomes the current one for (student, course)
        unless a later payment is already on record.

        A concurrent payment for the same billing period trips the unique
        constraint and is reported like any repeated payment.
        """
        period = billing_period_for(paid_at)
        try:
            with transaction.atomic():
                current = FeePayment.objects.select_for_update().filter(
                    student=student, course=course, is_current=True
                ).first()
                becomes_current = current is None or paid_at >= current.paid_at
                if current is not None and becomes_current:
                    current.is_current = False
                    current.save(update_fields=['is_current', 'updated_at'])
                payment = FeePayment.objects.create(
                    student=student,
                    teacher=course.teacher,
                    course=course,
                    billing_period=period,
                    paid_at=paid_at,
                    next_due_date=next_due_from(paid_at),
                    status=FeePayment.Status.PAID,
                    is_current=becomes_current,
                    **fields,
                )
        except IntegrityError:
            logger.warning(f"Duplicate payment for {student.email} / {course.pk} in {period:%Y-%m}")
            PaymentService._ensure_period_unpaid(student, course, period)
            raise
        return payment

    @staticmethod
    def pay_online(student, course_id, screenshot, transaction_id='', now=None):
        """
        Record a QR payment evidenced by a screenshot.

        Returns:
            The new FeePayment
        """
        now = now or timezone.now()
        course = Course.objects.select_related('teacher').filter(pk=course_id).first()
        if course is None:
            raise exceptions.NotFound('Course not found')

        enrollment = BatchEnrollment.objects.filter(
            student=student, batch__course=course,
            status=BatchEnrollment.Status.ACTIVE, batch__is_deleted=False,
        ).select_related('batch').first()
        if enrollment is None:
            raise exceptions.Forbidden('You are not enrolled in this course')
        if has_course_ended(course, now):
            raise exceptions.ValidationError('Course has already ended.')
        if not FeeQRCode.objects.filter(teacher=course.teacher).exists():
            raise exceptions.NotFound('Teacher QR code not found.')
        if not screenshot:
            raise exceptions.ValidationError('Payment screenshot is required')

        PaymentService._ensure_period_unpaid(student, course, billing_period_for(now))

        uploaded = get_media_storage().upload(screenshot, folder='payment_screenshots')
        payment = PaymentService._append(
            student, course, now,
            batch=enrollment.batch,
            payment_method=FeePayment.PaymentMethod.QR_SCAN,
            amount=course.fee,
            screenshot_url=uploaded['url'],
            screenshot_public_id=uploaded['public_id'],
            transaction_id=transaction_id or '',
            recorded_by=student,
        )

        NotificationService.notify(
            course.teacher,
            'Fee payment received',
            f"{student.fullname} paid {course.fee} for {course.title}",
            notification_type=Notification.NotificationType.COURSE_UPDATE,
            related_course=course,
        )
        logger.info(f"Online payment {payment.pk} by {student.email} for course {course.pk}")
        return payment

    @staticmethod
    def record_offline_payment(teacher, student_id, course_id, batch_id=None,
                               payment_date=None, amount=None, notes='', now=None):
        """
        Record a cash payment collected by the teacher.
        """
        now = now or timezone.now()
        course = get_owned_course(teacher, course_id)

        student = User.objects.filter(pk=student_id, role=User.Role.STUDENT).first()
        if student is None:
            raise exceptions.NotFound('Student not found')

        enrollments = BatchEnrollment.objects.filter(
            student=student, batch__course=course
        ).select_related('batch')
        if batch_id:
            enrollments = enrollments.filter(batch_id=batch_id)
        enrollment = enrollments.first()
        if enrollment is None:
            raise exceptions.ValidationError('Student is not enrolled in this course')

        if payment_date is None or payment_date == timezone.localdate(now):
            paid_at = now
        elif payment_date > timezone.localdate(now):
            raise exceptions.ValidationError('Payment date cannot be in the future')
        else:
            paid_at = timezone.make_aware(datetime.combine(payment_date, time(12, 0)))

        if has_course_ended(course, paid_at):
            raise exceptions.ValidationError('Course has already ended.')
        PaymentService._ensure_period_unpaid(student, course, billing_period_for(paid_at))

        payment = PaymentService._append(
            student, course, paid_at,
            batch=enrollment.batch,
            payment_method=FeePayment.PaymentMethod.CASH,
            amount=course.fee if amount is None else amount,
            notes=notes or '',
            recorded_by=teacher,
        )

        NotificationService.notify(
            student,
            'Payment recorded',
            f"Your cash payment for {course.title} was recorded. "
            f"Next payment due: {_due_date_label(payment.next_due_date)}",
            notification_type=Notification.NotificationType.FEE_REMINDER,
            related_course=course,
        )
        logger.info(f"Offline payment {payment.pk} recorded by {teacher.email} for {student.email}")
        return payment

    @staticmethod
    def mark_overdue_payments(now=None, dry_run=False):
        """
        Flip current recurring payments past their due date to overdue.

        Returns:
            dict with ``updated_count`` and ``overdue_payments`` (ids)
        """
        now = now or timezone.now()
        stale = FeePayment.objects.filter(
            is_current=True,
            is_recurring=True,
            next_due_date__lt=now,
            status__in=[FeePayment.Status.PAID, FeePayment.Status.PENDING],
        )
        ids = list(stale.values_list('id', flat=True))
        updated = 0
        if ids and not dry_run:
            updated = FeePayment.objects.filter(id__in=ids).update(
                status=FeePayment.Status.OVERDUE, updated_at=now
            )
        logger.info(f"Overdue sweep: {len(ids)} payments past due, {updated} updated")
        return {'updated_count': updated, 'overdue_payments': [str(pk) for pk in ids]}

    @staticmethod
    def upcoming_payments(student, now=None):
        """
        Due status of every running course the student is enrolled in.
        """
        now = now or timezone.now()
        course_ids = BatchEnrollment.objects.filter(
            student=student, batch__is_deleted=False
        ).values_list('batch__course_id', flat=True)

        upcoming = []
        for course in Course.objects.filter(pk__in=course_ids).order_by('title'):
            if has_course_ended(course, now):
                continue
            last = PaymentService.current_payment(student, course)
            if last is None:
                next_due, status = now, FeePayment.Status.PENDING
            elif last.next_due_date < now:
                next_due, status = last.next_due_date, FeePayment.Status.OVERDUE
            else:
                next_due, status = last.next_due_date, FeePayment.Status.PENDING
            upcoming.append({
                'course': {
                    'id': str(course.id),
                    'title': course.title,
                    'fee': course.fee,
                    'duration': course.duration,
                },
                'last_payment': last,
                'next_due_date': next_due,
                'status': status,
            })
        return upcoming

    @staticmethod
    def send_fee_reminders(now=None, dry_run=False):
        """
        Remind students of fees falling due within the reminder window.

        One in-app reminder per (student, course) per day; students whose fee
        is due today are e-mailed as well.
        """
        now = now or timezone.now()
        today = timezone.localdate(now)
        window_end = now + timedelta(days=settings.FEE_REMINDER_DAYS_AHEAD)
        due_soon = FeePayment.objects.filter(
            is_current=True,
            is_recurring=True,
            course__is_deleted=False,
            next_due_date__gte=timezone.make_aware(datetime.combine(today, time.min)),
            next_due_date__lte=window_end,
        ).select_related('student', 'course')

        notified = emailed = 0
        for payment in due_soon:
            due_label = _due_date_label(payment.next_due_date)
            already_reminded = Notification.objects.filter(
                student=payment.student,
                related_course=payment.course,
                notification_type=Notification.NotificationType.FEE_REMINDER,
                created_at__date=today,
            ).exists()
            if not already_reminded:
                if not dry_run:
                    NotificationService.notify(
                        payment.student,
                        'Upcoming fee payment',
                        f"Your fee of {payment.course.fee} for {payment.course.title} is due on {due_label}",
                        notification_type=Notification.NotificationType.FEE_REMINDER,
                        related_course=payment.course,
                    )
                notified += 1

            if timezone.localdate(payment.next_due_date) == today:
                if not dry_run:
                    success, _message = EmailService.send_email(
                        payment.student.email,
                        f"Fee due today for {payment.course.title}",
                        f"Hello {payment.student.fullname},\n\n"
                        f"Your monthly fee of {payment.course.fee} for {payment.course.title} is due today.\n",
                    )
                    if not success:
                        continue
                emailed += 1

        logger.info(f"Fee reminders: {notified} notified, {emailed} emailed")
        return {'notified': notified, 'emailed': emailed}

    @staticmethod
    def student_history(student, params):
        queryset = FeePayment.objects.filter(student=student).select_related('course', 'batch')
        if params.get('course'):
            queryset = queryset.filter(course_id=params['course'])
        return paginate(queryset, params, PAYMENT_SORT_FIELDS, 'paid_at')

    @staticmethod
    def teacher_history(teacher, params):
        queryset = FeePayment.objects.filter(teacher=teacher).select_related('student', 'course', 'batch')
        for param, lookup in (('student', 'student_id'), ('course', 'course_id'),
                              ('method', 'payment_method'), ('status', 'status')):
            if params.get(param):
                queryset = queryset.filter(**{lookup: params[param]})
        if params.get('start_date'):
            queryset = queryset.filter(paid_at__date__gte=params['start_date'])
        if params.get('end_date'):
            queryset = queryset.filter(paid_at__date__lte=params['end_date'])
        items, pagination = paginate(queryset, params, PAYMENT_SORT_FIELDS, 'paid_at')
        total = queryset.aggregate(total=Sum('amount'))['total'] or Decimal('0')
        return items, pagination, total


class FeeQRService:
    """
    One payment QR code per teacher.
    """

    @staticmethod
    def get_for_teacher(teacher):
        qr_code = FeeQRCode.objects.filter(teacher=teacher).first()
        if qr_code is None:
            raise exceptions.NotFound('QR code not found')
        return qr_code

    @staticmethod
    def get_for_course(course_id):
        course = Course.objects.select_related('teacher').filter(pk=course_id).first()
        if course is None:
            raise exceptions.NotFound('Course not found')
        qr_code = FeeQRCode.objects.filter(teacher=course.teacher).first()
        if qr_code is None:
            raise exceptions.NotFound('Teacher QR code not found.')
        return qr_code

    @staticmethod
    def create(teacher, image, upi_id='', notes=''):
        if FeeQRCode.objects.filter(teacher=teacher).exists():
            raise exceptions.Conflict('QR code already exists. Update it instead')
        uploaded = get_media_storage().upload(image, folder='fee_qr_codes')
        qr_code = FeeQRCode.objects.create(
            teacher=teacher,
            qr_code_url=uploaded['url'],
            qr_code_public_id=uploaded['public_id'],
            upi_id=upi_id or '',
            notes=notes or '',
        )
        logger.info(f"QR code created for {teacher.email}")
        return qr_code

    @staticmethod
    def update(teacher, image=None, **fields):
        qr_code = FeeQRService.get_for_teacher(teacher)
        if image is not None:
            storage = get_media_storage()
            uploaded = storage.upload(image, folder='fee_qr_codes')
            storage.delete(qr_code.qr_code_public_id)
            qr_code.qr_code_url = uploaded['url']
            qr_code.qr_code_public_id = uploaded['public_id']
        for field, value in fields.items():
            setattr(qr_code, field, value)
        qr_code.save()
        return qr_code

    @staticmethod
    def delete(teacher):
        qr_code = FeeQRService.get_for_teacher(teacher)
        get_media_storage().delete(qr_code.qr_code_public_id)
        qr_code.delete()
        logger.info(f"QR code deleted for {teacher.email}")


class ExpenseService:
    """
    Teacher expense records; only pending expenses can change.
    """

    @staticmethod
    def _filtered(teacher, params):
        queryset = TeacherExpense.objects.filter(teacher=teacher)
        if params.get('start_date'):
            queryset = queryset.filter(date__gte=params['start_date'])
        if params.get('end_date'):
            queryset = queryset.filter(date__lte=params['end_date'])
        category = params.get('category')
        if category:
            if category not in TeacherExpense.ExpenseCategory.values:
                raise exceptions.ValidationError(f"Invalid category '{category}'")
            queryset = queryset.filter(category=category)
        status_filter = params.get('status')
        if status_filter:
            if status_filter not in TeacherExpense.Status.values:
                raise exceptions.ValidationError(f"Invalid status '{status_filter}'")
            queryset = queryset.filter(status=status_filter)
        return queryset

    @staticmethod
    def get_expense(teacher, expense_id):
        expense = TeacherExpense.objects.filter(pk=expense_id, teacher=teacher).first()
        if expense is None:
            raise exceptions.NotFound('Expense not found')
        return expense

    @staticmethod
    def create_expense(teacher, data, receipt=None):
        expense = TeacherExpense(teacher=teacher, **data)
        if receipt is not None:
            uploaded = get_media_storage().upload(
                receipt, folder='expense_receipts', allowed_formats=DOCUMENT_FORMATS
            )
            expense.receipt_url = uploaded['url']
            expense.receipt_public_id = uploaded['public_id']
        expense.save()
        logger.info(f"Expense {expense.pk} ({expense.amount}) created by {teacher.email}")
        return expense

    @staticmethod
    def list_expenses(teacher, params):
        queryset = ExpenseService._filtered(teacher, params)
        items, pagination = paginate(queryset, params, EXPENSE_SORT_FIELDS, 'date')
        total = queryset.aggregate(total=Sum('amount'))['total'] or Decimal('0')
        return items, pagination, total

    @staticmethod
    def update_expense(teacher, expense_id, data, receipt=None):
        expense = ExpenseService.get_expense(teacher, expense_id)
        if not expense.is_editable:
            raise exceptions.ValidationError('Cannot update expense that is not in pending status')

        for field, value in data.items():
            setattr(expense, field, value)
        if receipt is not None:
            storage = get_media_storage()
            uploaded = storage.upload(receipt, folder='expense_receipts', allowed_formats=DOCUMENT_FORMATS)
            if expense.receipt_public_id:
                storage.delete(expense.receipt_public_id)
            expense.receipt_url = uploaded['url']
            expense.receipt_public_id = uploaded['public_id']
        expense.save()
        return expense

    @staticmethod
    def delete_expense(teacher, expense_id):
        expense = ExpenseService.get_expense(teacher, expense_id)
        if not expense.is_editable:
            raise exceptions.ValidationError('Cannot delete expense that is not in pending status')
        if expense.receipt_public_id:
            get_media_storage().delete(expense.receipt_public_id)
        expense.delete()
        logger.info(f"Expense {expense_id} deleted by {teacher.email}")

    @staticmethod
    def summary(teacher, params):
        queryset = ExpenseService._filtered(teacher, params)

        category_totals = {category: Decimal('0') for category in TeacherExpense.ExpenseCategory.values}
        for row in queryset.order_by().values('category').annotate(total=Sum('amount')):
            category_totals[row['category']] = row['total']

        status_totals = {status: Decimal('0') for status in TeacherExpense.Status.values}
        for row in queryset.order_by().values('status').annotate(total=Sum('amount')):
            status_totals[row['status']] = row['total']

        monthly_totals = {}
        monthly = queryset.order_by().annotate(month=TruncMonth('date')).values('month').annotate(
            total=Sum('amount'), count=Count('id')
        ).order_by('month')
        for row in monthly:
            monthly_totals[row['month'].strftime('%Y-%m')] = {'total': row['total'], 'count': row['count']}

        totals = queryset.aggregate(total=Sum('amount'), count=Count('id'))
        return {
            'total_expenses': totals['total'] or Decimal('0'),
            'total_count': totals['count'],
            'category_totals': category_totals,
            'status_totals': status_totals,
            'monthly_totals': monthly_totals,
        }
