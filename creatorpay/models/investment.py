from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from djmoney.models.fields import MoneyField

from creatorpay.constants import (
    INVESTMENT_PERIODS, INVESTMENT_STATUSES,
    INVESTMENT_STATUS_ACTIVE, INVESTMENT_PLANS,
)
from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class InvestmentQuerySet(models.QuerySet):
    """Custom QuerySet for Investment model"""

    def active(self):
        return self.filter(status=INVESTMENT_STATUS_ACTIVE)

    def matured(self, now=None):
        """Active investments whose end date has passed"""
        return self.active().filter(end_date__lte=now or timezone.now())

    def for_user(self, user):
        return self.filter(user=user)


class InvestmentManager(models.Manager):
    """Custom Manager for Investment model"""

    def get_queryset(self):
        return InvestmentQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def matured(self, now=None):
        return self.get_queryset().matured(now)

    def for_user(self, user):
        return self.get_queryset().for_user(user)


class Investment(BaseModel):
    """
    Fixed-term investment of wallet balance.

    Interest is simple and fixed by the plan: the whole ``total_return`` is
    paid out once the term ends and the owner withdraws.
    """

    user = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='investments',
        verbose_name=_('User')
    )

    wallet = models.ForeignKey(
        'creatorpay.Wallet',
        on_delete=models.CASCADE,
        related_name='investments',
        verbose_name=_('Wallet')
    )

    amount = MoneyField(
        max_digits=19,
        decimal_places=2,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Amount')
    )

    period = models.CharField(
        max_length=20,
        choices=INVESTMENT_PERIODS,
        verbose_name=_('Period')
    )

    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        verbose_name=_('Interest rate'),
        help_text=_('Rate for the whole term, e.g. 0.04 for 4%')
    )

    start_date = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('Start date')
    )

    end_date = models.DateTimeField(
        db_index=True,
        verbose_name=_('End date')
    )

    total_return = MoneyField(
        max_digits=19,
        decimal_places=2,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Total return')
    )

    status = models.CharField(
        max_length=20,
        choices=INVESTMENT_STATUSES,
        default=INVESTMENT_STATUS_ACTIVE,
        db_index=True,
        verbose_name=_('Status')
    )

    withdrawn_at = models.DateTimeField(
        blank=True,
        null=True,
        verbose_name=_('Withdrawn at')
    )

    objects = InvestmentManager()

    class Meta:
        verbose_name = _('Investment')
        verbose_name_plural = _('Investments')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_period_display()} investment of {self.amount} ({self.get_status_display()})"

    @property
    def total_days(self):
        return INVESTMENT_PLANS[self.period][1]

    @property
    def is_active(self):
        return self.status == INVESTMENT_STATUS_ACTIVE

    def is_matured(self, now=None):
        return (now or timezone.now()) >= self.end_date
