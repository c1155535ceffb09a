"""
Date arithmetic for monthly billing.
"""

import calendar
import re
from datetime import date, timedelta

from django.conf import settings
from django.utils import timezone

DURATION_PATTERN = re.compile(r'(\d+)\s*(day|week|month)s?', re.IGNORECASE)


def add_months(value, months):
    """Shift a date or datetime by whole months, clamping to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def course_end_date(course):
    """
    When ``course`` stops accepting payments.

    ``duration`` reads like "4 weeks", "3 months" or "45 days"; anything else
    falls back to ``COURSE_DEFAULT_LENGTH_DAYS`` after creation.
    """
    start = course.created_at
    match = DURATION_PATTERN.search(course.duration or '')
    if not match:
        return start + timedelta(days=settings.COURSE_DEFAULT_LENGTH_DAYS)

    amount = int(match.group(1))
    unit = match.group(2).lower()
    if unit == 'day':
        return start + timedelta(days=amount)
    if unit == 'week':
        return start + timedelta(weeks=amount)
    return add_months(start, amount)


def has_course_ended(course, now=None):
    return (now or timezone.now()) > course_end_date(course)


def billing_period_for(moment):
    """First day of the calendar month ``moment`` falls in."""
    if hasattr(moment, 'tzinfo') and moment.tzinfo is not None:
        moment = timezone.localtime(moment)
    return date(moment.year, moment.month, 1)


def next_due_from(paid_at):
    return paid_at + timedelta(days=settings.BILLING_CYCLE_DAYS)
