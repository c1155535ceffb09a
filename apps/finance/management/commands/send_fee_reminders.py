"""
Management command to remind students of upcoming fee payments.
"""

from django.core.management.base import BaseCommand

from apps.finance.services import PaymentService


class Command(BaseCommand):
    help = 'Notify students whose monthly fee falls due within the reminder window'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count the reminders that would be sent without sending them',
        )

    def handle(self, *args, **options):
        result = PaymentService.send_fee_reminders(dry_run=options['dry_run'])
        prefix = 'Dry run: would send' if options['dry_run'] else 'Sent'
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix} {result['notified']} in-app reminders and {result['emailed']} emails"
            )
        )
