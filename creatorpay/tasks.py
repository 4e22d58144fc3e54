import logging
from celery import shared_task
from django.apps import apps

from creatorpay.settings import get_creatorpay_setting
from creatorpay.services.account_service import AccountService
from creatorpay.services.transaction_service import TransactionService
from creatorpay.services.webhook_service import WebhookService


logger = logging.getLogger(__name__)


@shared_task
def create_user_records_task(user_id):
    """
    Create the profile, wallet and level of a user (async task)

    Args:
        user_id: User primary key
    """
    User = apps.get_model(get_creatorpay_setting('USER_MODEL'))

    try:
        user = User.objects.get(pk=user_id)
        profile = AccountService().ensure_user_records(user)
        logger.info(f"Created account records for user {user_id}")
        return str(profile.id)
    except Exception as e:
        logger.error(f"Error creating account records for user {user_id}: {str(e)}", exc_info=True)
        raise


@shared_task
def expire_pending_payments_task(minutes=None):
    """
    Fail STK deposits and course payments that never got a callback

    Returns:
        int: Number of transactions expired
    """
    expired = TransactionService().expire_stale_payments(minutes)
    logger.info(f"[Task] Expired {expired} pending payment(s)")
    return expired


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def reprocess_webhooks_task(self, limit=None):
    """
    Re-apply stored PayHero callbacks that failed to process

    Returns:
        dict: Counts of processed and failed events
    """
    try:
        stats = WebhookService().reprocess_unprocessed(limit)
    except Exception as e:
        logger.error(f"[Task] Webhook reprocessing failed: {str(e)}", exc_info=True)
        raise self.retry(exc=e)

    logger.info(f"[Task] Reprocessed webhooks: {stats}")
    return stats
