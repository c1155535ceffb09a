"""
Income and expense statistics for a teacher, computed on read.
"""

import logging
from datetime import date
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from apps.core import exceptions
from apps.finance.billing import add_months
from apps.finance.models import FeePayment, TeacherExpense

logger = logging.getLogger(__name__)

MONTHS_BEFORE = 3
MONTHS_AFTER = 1
STATS_SORT_KEYS = {
    'month': lambda row: row['month'],
    'income': lambda row: row['total_income'],
    'expense': lambda row: row['expenses'],
    'net_income': lambda row: row['net_income'],
}


def stats_window(now=None):
    """First days of the months covered: three past, the current and the next."""
    today = timezone.localdate(now or timezone.now())
    current = date(today.year, today.month, 1)
    return [add_months(current, offset) for offset in range(-MONTHS_BEFORE, MONTHS_AFTER + 1)]


def _month_stats(teacher, month_start):
    month_end = add_months(month_start, 1)

    income = {method: Decimal('0') for method in FeePayment.PaymentMethod.values}
    payments = FeePayment.objects.filter(teacher=teacher, billing_period=month_start)
    for row in payments.order_by().values('payment_method').annotate(total=Sum('amount')):
        income[row['payment_method']] = row['total']

    breakdown = {category: Decimal('0') for category in TeacherExpense.ExpenseCategory.values}
    expenses = TeacherExpense.objects.filter(
        teacher=teacher,
        status=TeacherExpense.Status.APPROVED,
        date__gte=month_start,
        date__lt=month_end,
    )
    for row in expenses.order_by().values('category').annotate(total=Sum('amount')):
        breakdown[row['category']] = row['total']

    online = income[FeePayment.PaymentMethod.QR_SCAN.value]
    offline = income[FeePayment.PaymentMethod.CASH.value]
    total_expenses = sum(breakdown.values(), Decimal('0'))
    return {
        'month': month_start.strftime('%Y-%m'),
        'label': month_start.strftime('%b %Y'),
        'online_income': online,
        'offline_income': offline,
        'total_income': online + offline,
        'expenses': total_expenses,
        'expense_breakdown': breakdown,
        'net_income': online + offline - total_expenses,
    }


def teacher_stats(teacher, now=None, sort_by=None):
    """
    Monthly income (online and cash) against approved expenses.

    ``sort_by`` orders the months chronologically (``month``) or by
    ``income``, ``expense`` or ``net_income``, largest first.
    """
    sort_by = sort_by or 'month'
    if sort_by not in STATS_SORT_KEYS:
        allowed = ', '.join(STATS_SORT_KEYS)
        raise exceptions.ValidationError(f"Invalid sort field '{sort_by}'. Allowed: {allowed}")

    months = [_month_stats(teacher, month_start) for month_start in stats_window(now)]
    months.sort(key=STATS_SORT_KEYS[sort_by], reverse=sort_by != 'month')

    total_income = sum((m['total_income'] for m in months), Decimal('0'))
    total_expenses = sum((m['expenses'] for m in months), Decimal('0'))
    return {
        'months': months,
        'summary': {
            'total_income': total_income,
            'total_online_income': sum((m['online_income'] for m in months), Decimal('0')),
            'total_offline_income': sum((m['offline_income'] for m in months), Decimal('0')),
            'total_expenses': total_expenses,
            'net_income': total_income - total_expenses,
        },
        'sort_by': sort_by,
    }
