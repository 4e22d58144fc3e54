import logging
from datetime import timedelta
from django.core.management.base import BaseCommand
from django.utils import timezone

from creatorpay.models import Transaction
from creatorpay.constants import GATEWAY_TRANSACTION_TYPES
from creatorpay.services.transaction_service import TransactionService
from creatorpay.settings import get_creatorpay_setting

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Mark pending M-Pesa deposits and course payments that never got a callback as FAILED'

    def add_arguments(self, parser):
        parser.add_argument(
            '--minutes',
            type=int,
            default=get_creatorpay_setting('PENDING_PAYMENT_TIMEOUT_MINUTES'),
            help='Age in minutes after which a pending payment is expired'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report how many payments would be expired'
        )

    def handle(self, *args, **options):
        minutes = options['minutes']

        if minutes <= 0:
            self.stderr.write(self.style.ERROR("--minutes must be a positive number"))
            return

        if options['dry_run']:
            count = (
                Transaction.objects.get_queryset()
                .stale_pending(timezone.now() - timedelta(minutes=minutes))
                .filter(transaction_type__in=GATEWAY_TRANSACTION_TYPES)
                .count()
            )
            self.stdout.write(self.style.WARNING(f"DRY RUN - {count} payment(s) would be expired"))
            return

        expired = TransactionService().expire_stale_payments(minutes)
        logger.info(f"expire_pending_payments: {expired} expired (older than {minutes} minutes)")
        self.stdout.write(self.style.SUCCESS(f"Expired {expired} pending payment(s)"))
