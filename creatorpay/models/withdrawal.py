from django.db import models
from django.utils.translation import gettext_lazy as _
from djmoney.models.fields import MoneyField
from model_utils.fields import MonitorField

from creatorpay.constants import (
    WITHDRAWAL_STATUSES, WITHDRAWAL_STATUS_PENDING, WITHDRAWAL_STATUS_APPROVED,
    WITHDRAWAL_STATUS_PAID, WITHDRAWAL_STATUS_REJECTED,
    WITHDRAWAL_METHODS, WITHDRAWAL_METHOD_MPESA,
)
from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class WithdrawalQuerySet(models.QuerySet):
    """Custom QuerySet for Withdrawal model"""

    def pending(self):
        return self.filter(status=WITHDRAWAL_STATUS_PENDING)

    def approved(self):
        return self.filter(status=WITHDRAWAL_STATUS_APPROVED)

    def for_user(self, user):
        return self.filter(user=user)

    def with_user_details(self):
        return self.select_related('user', 'wallet', 'transaction', 'processed_by')


class WithdrawalManager(models.Manager):
    """Custom Manager for Withdrawal model"""

    def get_queryset(self):
        return WithdrawalQuerySet(self.model, using=self._db)

    def pending(self):
        return self.get_queryset().pending()

    def for_user(self, user):
        return self.get_queryset().for_user(user)

    def with_user_details(self):
        return self.get_queryset().with_user_details()


class Withdrawal(BaseModel):
    """
    A user's request to cash out part of their wallet balance.

    The balance is debited when the request is created. Admins approve the
    request, pay it out over M-Pesa by hand and then mark it paid, or reject
    it, which refunds the wallet.
    """

    user = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='withdrawals',
        verbose_name=_('User')
    )

    wallet = models.ForeignKey(
        'creatorpay.Wallet',
        on_delete=models.CASCADE,
        related_name='withdrawals',
        verbose_name=_('Wallet')
    )

    amount = MoneyField(
        max_digits=19,
        decimal_places=2,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Amount')
    )

    status = models.CharField(
        max_length=20,
        choices=WITHDRAWAL_STATUSES,
        default=WITHDRAWAL_STATUS_PENDING,
        db_index=True,
        verbose_name=_('Status')
    )

    method = models.CharField(
        max_length=20,
        choices=WITHDRAWAL_METHODS,
        default=WITHDRAWAL_METHOD_MPESA,
        verbose_name=_('Method')
    )

    phone_number = models.CharField(
        max_length=20,
        verbose_name=_('Phone number')
    )

    reference = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Reference')
    )

    transaction = models.OneToOneField(
        'creatorpay.Transaction',
        on_delete=models.SET_NULL,
        related_name='withdrawal',
        blank=True,
        null=True,
        verbose_name=_('Transaction')
    )

    note = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('Note')
    )

    approved_at = MonitorField(
        monitor='status',
        when=[WITHDRAWAL_STATUS_APPROVED],
        default=None,
        null=True,
        blank=True,
        verbose_name=_('Approved at')
    )

    paid_at = MonitorField(
        monitor='status',
        when=[WITHDRAWAL_STATUS_PAID],
        default=None,
        null=True,
        blank=True,
        verbose_name=_('Paid at')
    )

    processed_by = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.SET_NULL,
        related_name='processed_withdrawals',
        blank=True,
        null=True,
        verbose_name=_('Processed by')
    )

    objects = WithdrawalManager()

    class Meta:
        verbose_name = _('Withdrawal')
        verbose_name_plural = _('Withdrawals')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='cp_wd_user_status_idx'),
        ]

    def __str__(self):
        return f"Withdrawal {self.reference} - {self.amount} ({self.get_status_display()})"

    @property
    def is_pending(self):
        return self.status == WITHDRAWAL_STATUS_PENDING

    @property
    def is_approved(self):
        return self.status == WITHDRAWAL_STATUS_APPROVED

    @property
    def is_closed(self):
        return self.status in (WITHDRAWAL_STATUS_PAID, WITHDRAWAL_STATUS_REJECTED)
