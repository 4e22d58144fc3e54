from django.core.management.base import BaseCommand

from creatorpay.models import WebhookEvent
from creatorpay.services.webhook_service import WebhookService


class Command(BaseCommand):
    help = 'Re-run stored PayHero callbacks that have not been applied yet'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=None,
            help='Maximum number of events to reprocess'
        )

    def handle(self, *args, **options):
        limit = options['limit']
        pending = WebhookEvent.objects.unprocessed().count()
        self.stdout.write(f"Found {pending} unprocessed webhook event(s)")

        if not pending:
            return

        stats = WebhookService().reprocess_unprocessed(limit)

        style = self.style.SUCCESS if not stats['failed'] else self.style.WARNING
        self.stdout.write(
            style(f"Reprocessing complete: {stats['processed']} processed, {stats['failed']} failed")
        )
