"""
Management command running the daily fee jobs on a blocking scheduler.
"""

import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import close_old_connections

logger = logging.getLogger(__name__)


def _run(command_name):
    close_old_connections()
    try:
        call_command(command_name)
    except Exception:
        logger.exception(f"Scheduled job '{command_name}' failed")
    finally:
        close_old_connections()


class Command(BaseCommand):
    help = 'Run fee reminders (09:00) and the overdue sweep (09:05) every day'

    def handle(self, *args, **options):
        scheduler = BlockingScheduler(timezone=settings.SCHEDULER_TIMEZONE)

        scheduler.add_job(
            _run,
            CronTrigger(hour=9, minute=0, timezone=settings.SCHEDULER_TIMEZONE),
            args=['send_fee_reminders'],
            id='send_fee_reminders',
            name='Send fee due reminders',
            replace_existing=True,
        )
        scheduler.add_job(
            _run,
            CronTrigger(hour=9, minute=5, timezone=settings.SCHEDULER_TIMEZONE),
            args=['mark_overdue_payments'],
            id='mark_overdue_payments',
            name='Mark overdue fee payments',
            replace_existing=True,
        )

        self.stdout.write(self.style.SUCCESS('Fee scheduler started. Press Ctrl+C to exit.'))
        logger.info("Fee scheduler started")
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            scheduler.shutdown()
            self.stdout.write('Fee scheduler stopped')
