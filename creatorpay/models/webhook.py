from django.db import models
from django.utils.translation import gettext_lazy as _

from creatorpay.models.base import BaseModel
from creatorpay.constants import WEBHOOK_EVENTS


class WebhookEventQuerySet(models.QuerySet):

    def unprocessed(self):
        return self.filter(processed=False, is_valid=True)


class WebhookEvent(BaseModel):
    """
    Raw PayHero callback as received, kept for auditing and reprocessing

    ``is_valid`` means the callback passed every check that applied to it
    and may be (re)applied. ``signature_verified`` is only set when an HMAC
    signature was actually checked against a configured secret.
    """
    event_type = models.CharField(
        max_length=50,
        choices=WEBHOOK_EVENTS,
        verbose_name=_('Callback kind')
    )
    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        verbose_name=_('Callback reference'),
        help_text=_('CheckoutRequestID or payout reference carried by the callback')
    )
    payload = models.JSONField(
        verbose_name=_('Raw body')
    )
    signature = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        verbose_name=_('HMAC signature')
    )
    signature_verified = models.BooleanField(
        default=False,
        verbose_name=_('Signature verified')
    )
    is_valid = models.BooleanField(
        default=True,
        verbose_name=_('Accepted')
    )
    processed = models.BooleanField(
        default=False,
        verbose_name=_('Applied')
    )
    processed_at = models.DateTimeField(
        blank=True,
        null=True,
        verbose_name=_('Applied at')
    )
    processing_error = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('Last error')
    )
    transaction = models.ForeignKey(
        'creatorpay.Transaction',
        on_delete=models.SET_NULL,
        related_name='webhook_events',
        blank=True,
        null=True,
        verbose_name=_('Matched transaction')
    )

    objects = WebhookEventQuerySet.as_manager()

    class Meta:
        verbose_name = _('PayHero callback')
        verbose_name_plural = _('PayHero callbacks')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['event_type'], name='cp_webhook_type_idx'),
            models.Index(fields=['reference'], name='cp_webhook_ref_idx'),
            models.Index(fields=['processed'], name='cp_webhook_processed_idx'),
        ]

    def __str__(self):
        state = 'applied' if self.processed else 'pending'
        return f"{self.event_type}:{self.reference} [{state}]"
