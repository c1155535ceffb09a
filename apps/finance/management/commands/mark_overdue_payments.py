"""
Management command to flag fee payments past their due date as overdue.
"""

from django.core.management.base import BaseCommand

from apps.finance.services import PaymentService


class Command(BaseCommand):
    help = 'Mark current recurring fee payments past their due date as overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report the payments that would change without updating them',
        )

    def handle(self, *args, **options):
        result = PaymentService.mark_overdue_payments(dry_run=options['dry_run'])
        found = len(result['overdue_payments'])

        if options['dry_run']:
            self.stdout.write(
                self.style.WARNING(f'Dry run: {found} payments would be marked overdue')
            )
            for payment_id in result['overdue_payments']:
                self.stdout.write(f'   - {payment_id}')
            return

        self.stdout.write(
            self.style.SUCCESS(f"Marked {result['updated_count']} payments as overdue")
        )
