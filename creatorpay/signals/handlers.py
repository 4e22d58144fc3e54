import logging
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from creatorpay.settings import get_creatorpay_setting
from creatorpay.services.account_service import AccountService


logger = logging.getLogger(__name__)


@receiver(post_save, sender=get_creatorpay_setting('USER_MODEL'))
def create_user_records(sender, instance, created, **kwargs):
    """Give every new user a profile, a wallet and a level record"""
    if not created or kwargs.get('raw'):
        return

    if not get_creatorpay_setting('AUTO_CREATE_WALLET'):
        return

    if get_creatorpay_setting('USE_CELERY'):
        from creatorpay.tasks import create_user_records_task
        user_id = instance.pk
        transaction.on_commit(lambda: create_user_records_task.delay(user_id))
        return

    AccountService().ensure_user_records(instance)
    logger.debug(f"Created profile, wallet and level for user {instance.pk}")
