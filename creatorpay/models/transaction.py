"""
Transaction model - the audit trail for every money movement
"""
from decimal import Decimal
from django.db import models
from django.db.models import Q, Sum
from django.utils.translation import gettext_lazy as _
from django.utils import timezone
from djmoney.models.fields import MoneyField

from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting
from creatorpay.constants import (
    TRANSACTION_TYPES, TRANSACTION_STATUSES,
    TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING,
    TRANSACTION_STATUS_COMPLETED, TRANSACTION_STATUS_FAILED,
    TERMINAL_TRANSACTION_STATUSES, DEBIT_TRANSACTION_TYPES,
)


class TransactionQuerySet(models.QuerySet):
    """Custom QuerySet for Transaction model with optimized queries"""

    def completed(self):
        """Return only completed transactions"""
        return self.filter(status=TRANSACTION_STATUS_COMPLETED)

    def pending(self):
        """Return only pending transactions"""
        return self.filter(status=TRANSACTION_STATUS_PENDING)

    def failed(self):
        """Return only failed transactions"""
        return self.filter(status=TRANSACTION_STATUS_FAILED)

    def by_type(self, transaction_type):
        return self.filter(transaction_type=transaction_type)

    def for_user(self, user):
        return self.filter(wallet__user=user)

    def with_wallet_details(self):
        """Prefetch wallet and user details to avoid N+1 queries"""
        return self.select_related('wallet', 'wallet__user')

    def matching_checkout(self, checkout_request_id):
        """
        Transactions matching a PayHero CheckoutRequestID, either stored as
        the reference or as the checkout id
        """
        return self.filter(
            Q(reference=checkout_request_id) |
            Q(checkout_request_id=checkout_request_id)
        )

    def stale_pending(self, older_than):
        """Pending transactions created before ``older_than``"""
        return self.pending().filter(created_at__lt=older_than)

    def total_amount(self):
        """Sum of ``amount`` across the queryset as a Decimal"""
        total = self.aggregate(total=Sum('amount'))['total']
        if total is None:
            return Decimal('0')
        return getattr(total, 'amount', total)


class TransactionManager(models.Manager):
    """Custom Manager for Transaction model"""

    def get_queryset(self):
        return TransactionQuerySet(self.model, using=self._db)

    def completed(self):
        return self.get_queryset().completed()

    def pending(self):
        return self.get_queryset().pending()

    def failed(self):
        return self.get_queryset().failed()

    def by_type(self, transaction_type):
        return self.get_queryset().by_type(transaction_type)

    def for_user(self, user):
        return self.get_queryset().for_user(user)

    def matching_checkout(self, checkout_request_id):
        return self.get_queryset().matching_checkout(checkout_request_id)


class Transaction(BaseModel):
    """
    Transaction model for recording all financial activity

    Amounts are always stored positive; ``transaction_type`` tells whether
    the wallet was debited or credited.
    """

    wallet = models.ForeignKey(
        'creatorpay.Wallet',
        on_delete=models.CASCADE,
        related_name='transactions',
        db_index=True,
        verbose_name=_('Wallet')
    )

    amount = MoneyField(
        max_digits=19,
        decimal_places=2,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Amount')
    )

    reference = models.CharField(
        max_length=100,
        unique=True,
        blank=True,
        null=True,
        db_index=True,
        verbose_name=_('Reference'),
        help_text=_('Unique reference; replaced by the M-Pesa receipt once a payment completes')
    )

    transaction_type = models.CharField(
        max_length=20,
        choices=TRANSACTION_TYPES,
        default=TRANSACTION_TYPE_DEPOSIT,
        db_index=True,
        verbose_name=_('Transaction type')
    )

    status = models.CharField(
        max_length=20,
        choices=TRANSACTION_STATUSES,
        default=TRANSACTION_STATUS_PENDING,
        db_index=True,
        verbose_name=_('Status')
    )

    description = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('Description')
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        null=True,
        verbose_name=_('Metadata')
    )

    # ==========================================
    # PAYHERO / M-PESA FIELDS
    # ==========================================

    checkout_request_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        db_index=True,
        verbose_name=_('Checkout request ID')
    )

    merchant_request_id = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        verbose_name=_('Merchant request ID')
    )

    provider_reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        db_index=True,
        verbose_name=_('Provider reference'),
        help_text=_('M-Pesa receipt number or payout transaction id')
    )

    phone_number = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        verbose_name=_('Phone number')
    )

    gateway_response = models.JSONField(
        blank=True,
        null=True,
        verbose_name=_('Gateway response')
    )

    related_transaction = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        related_name='related_transactions',
        blank=True,
        null=True,
        verbose_name=_('Related transaction'),
        help_text=_('E.g. the withdrawal a refund belongs to')
    )

    completed_at = models.DateTimeField(
        blank=True,
        null=True,
        db_index=True,
        verbose_name=_('Completed at')
    )

    failed_reason = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('Failed reason')
    )

    objects = TransactionManager()

    class Meta:
        verbose_name = _('Transaction')
        verbose_name_plural = _('Transactions')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['wallet', 'created_at'], name='cp_txn_wallet_created_idx'),
            models.Index(fields=['transaction_type', 'status'], name='cp_txn_type_status_idx'),
            models.Index(fields=['status', 'created_at'], name='cp_txn_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.get_transaction_type_display()} - {self.amount} ({self.get_status_display()})"

    def __repr__(self):
        return (
            f"<Transaction id={self.id} wallet_id={self.wallet_id} "
            f"type={self.transaction_type} status={self.status} "
            f"amount={self.amount} reference={self.reference}>"
        )

    def save(self, *args, **kwargs):
        """Generate a reference if none was provided"""
        if not self.reference:
            from creatorpay.utils.id_generators import generate_transaction_reference
            self.reference = generate_transaction_reference()
        super().save(*args, **kwargs)

    @property
    def is_pending(self):
        return self.status == TRANSACTION_STATUS_PENDING

    @property
    def is_completed(self):
        return self.status == TRANSACTION_STATUS_COMPLETED

    @property
    def is_failed(self):
        return self.status == TRANSACTION_STATUS_FAILED

    @property
    def is_final(self):
        """True once the transaction can no longer change state"""
        return self.status in TERMINAL_TRANSACTION_STATUSES

    @property
    def is_debit(self):
        return self.transaction_type in DEBIT_TRANSACTION_TYPES

    @property
    def signed_amount(self):
        """Amount with a negative sign for debits, as shown in statements"""
        return -self.amount.amount if self.is_debit else self.amount.amount

    def mark_as_completed(self, provider_reference=None, gateway_data=None):
        """
        Mark the transaction as completed

        Args:
            provider_reference: M-Pesa receipt / payout id (optional)
            gateway_data: Raw callback payload (optional)
        """
        self.status = TRANSACTION_STATUS_COMPLETED
        self.completed_at = timezone.now()
        update_fields = ['status', 'completed_at', 'updated_at']

        if provider_reference:
            self.provider_reference = provider_reference
            update_fields.append('provider_reference')

        if gateway_data is not None:
            self.gateway_response = gateway_data
            update_fields.append('gateway_response')

        self.save(update_fields=update_fields)

    def mark_as_failed(self, reason=None, gateway_data=None):
        """
        Mark the transaction as failed

        Args:
            reason: Failure reason (optional)
            gateway_data: Raw callback payload (optional)
        """
        self.status = TRANSACTION_STATUS_FAILED
        self.failed_reason = reason or _("Transaction failed")
        self.completed_at = timezone.now()
        update_fields = ['status', 'failed_reason', 'completed_at', 'updated_at']

        if gateway_data is not None:
            self.gateway_response = gateway_data
            update_fields.append('gateway_response')

        self.save(update_fields=update_fields)
