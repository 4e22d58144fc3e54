from decimal import Decimal
from django.db import models, transaction
from django.utils.translation import gettext_lazy as _
from django.utils import timezone
from djmoney.models.fields import MoneyField
from djmoney.money import Money

from creatorpay.exceptions import (
    InsufficientFunds,
    InsufficientEarnings,
    WalletLocked,
    InvalidAmount,
    InvestmentError,
    CurrencyMismatchError
)
from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class WalletQuerySet(models.QuerySet):
    """Custom QuerySet for Wallet model with optimized queries"""

    def active(self):
        """Return only active wallets"""
        return self.filter(is_active=True, is_locked=False)

    def with_user_details(self):
        """Prefetch user details to avoid N+1 queries"""
        return self.select_related('user')

    def for_update(self, pk):
        """Fetch a single wallet with a row lock"""
        return self.select_for_update().get(pk=pk)


class WalletManager(models.Manager):
    """Custom Manager for Wallet model"""

    def get_queryset(self):
        """Return custom queryset"""
        return WalletQuerySet(self.model, using=self._db)

    def active(self):
        """Return only active wallets"""
        return self.get_queryset().active()

    def with_user_details(self):
        """Get wallets with user details"""
        return self.get_queryset().with_user_details()

    def for_update(self, pk):
        """Get a wallet locked for the current database transaction"""
        return self.get_queryset().for_update(pk)

    def get_or_create_for_user(self, user):
        """
        Get or create a wallet for a user

        Args:
            user: User instance

        Returns:
            tuple: (Wallet instance, created boolean)
        """
        return self.get_or_create(user=user)


class Wallet(BaseModel):
    """
    Wallet model holding a user's spendable balance, accumulated earnings
    and the principal currently locked in investments.

    All three buckets share the wallet currency and never go negative.
    Transaction records are written by the service layer; the methods here
    only move money between buckets.
    """

    user = models.OneToOneField(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='wallet',
        verbose_name=_('User'),
        help_text=_('The user who owns this wallet')
    )

    balance = MoneyField(
        max_digits=19,
        decimal_places=2,
        default=0,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Balance'),
        help_text=_('Spendable balance')
    )

    earnings = MoneyField(
        max_digits=19,
        decimal_places=2,
        default=0,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Earnings'),
        help_text=_('Rewards and referral earnings not yet moved to the balance')
    )

    investment = MoneyField(
        max_digits=19,
        decimal_places=2,
        default=0,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Investment'),
        help_text=_('Principal held in active investments')
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        verbose_name=_('Is active'),
        help_text=_('Whether the wallet is active and can perform operations')
    )

    is_locked = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name=_('Is locked'),
        help_text=_('Locked wallets cannot spend or withdraw')
    )

    last_transaction_date = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Last transaction date')
    )

    objects = WalletManager()

    class Meta:
        verbose_name = _('Wallet')
        verbose_name_plural = _('Wallets')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'is_locked'], name='cp_wallet_status_idx'),
            models.Index(fields=['last_transaction_date'], name='cp_wallet_last_txn_idx'),
        ]

    def __str__(self):
        user_display = getattr(self.user, 'email', None) or str(self.user)
        return f"Wallet ({user_display}) - {self.balance}"

    def __repr__(self):
        return (
            f"<Wallet id={self.id} user_id={self.user_id} balance={self.balance} "
            f"earnings={self.earnings} investment={self.investment}>"
        )

    @property
    def currency(self):
        return str(self.balance.currency)

    @property
    def is_operational(self):
        return self.is_active and not self.is_locked

    # ==========================================
    # VALIDATION
    # ==========================================

    def check_active(self):
        """
        Verify wallet is active and unlocked

        Raises:
            WalletLocked: If wallet is locked or inactive
        """
        if not self.is_active:
            raise WalletLocked(_("Wallet is inactive"))

        if self.is_locked:
            raise WalletLocked(self)

    def validate_amount(self, amount):
        """
        Normalize ``amount`` to a positive Money in the wallet currency

        Raises:
            InvalidAmount: If amount is not positive or not a number
            CurrencyMismatchError: If a Money in another currency is given
        """
        if isinstance(amount, float):
            amount = Decimal(str(amount))

        if isinstance(amount, (Decimal, int)):
            amount = Money(amount, self.balance.currency)
        elif not isinstance(amount, Money):
            raise InvalidAmount(f"Expected Money object, got {type(amount).__name__}")

        if amount.amount <= 0:
            raise InvalidAmount(amount)

        if amount.currency != self.balance.currency:
            raise CurrencyMismatchError(
                f"Currency mismatch: wallet uses {self.balance.currency}, "
                f"but got {amount.currency}"
            )

        return amount

    def _touch(self, *fields):
        self.last_transaction_date = timezone.now()
        self.save(update_fields=list(fields) + ['last_transaction_date', 'updated_at'])

    # ==========================================
    # BALANCE
    # ==========================================

    @transaction.atomic
    def credit(self, amount):
        """
        Add funds to the balance.

        Credits skip the lock check: refunds and gateway confirmations must
        land even on a locked wallet.
        """
        amount = self.validate_amount(amount)
        self.balance += amount
        self._touch('balance')
        return self.balance

    @transaction.atomic
    def debit(self, amount):
        """
        Remove funds from the balance

        Raises:
            WalletLocked: If wallet is locked or inactive
            InvalidAmount: If amount is invalid
            InsufficientFunds: If balance is insufficient
        """
        self.check_active()
        amount = self.validate_amount(amount)

        if self.balance < amount:
            raise InsufficientFunds(self, amount)

        self.balance -= amount
        self._touch('balance')
        return self.balance

    # ==========================================
    # EARNINGS
    # ==========================================

    @transaction.atomic
    def credit_earnings(self, amount, to_balance=False):
        """Record earned money, optionally making it spendable right away"""
        amount = self.validate_amount(amount)
        self.earnings += amount
        fields = ['earnings']
        if to_balance:
            self.balance += amount
            fields.append('balance')
        self._touch(*fields)
        return self.earnings

    @transaction.atomic
    def debit_earnings(self, amount):
        """
        Remove money from earnings without touching the balance

        Raises:
            InsufficientEarnings: If earnings are below ``amount``
        """
        self.check_active()
        amount = self.validate_amount(amount)

        if self.earnings < amount:
            raise InsufficientEarnings()

        self.earnings -= amount
        self._touch('earnings')
        return self.earnings

    @transaction.atomic
    def transfer_earnings_to_balance(self, amount):
        """
        Move earnings into the spendable balance

        Raises:
            InsufficientEarnings: If earnings are below ``amount``
        """
        self.check_active()
        amount = self.validate_amount(amount)

        if self.earnings < amount:
            raise InsufficientEarnings()

        self.earnings -= amount
        self.balance += amount
        self._touch('earnings', 'balance')
        return self.balance

    # ==========================================
    # INVESTMENT
    # ==========================================

    @transaction.atomic
    def move_to_investment(self, amount):
        """Lock balance funds into the investment bucket"""
        self.check_active()
        amount = self.validate_amount(amount)

        if self.balance < amount:
            raise InsufficientFunds(self, amount)

        self.balance -= amount
        self.investment += amount
        self._touch('balance', 'investment')
        return self.investment

    @transaction.atomic
    def release_investment(self, principal, payout):
        """
        Release ``principal`` from the investment bucket and credit ``payout``
        (principal plus interest) to the balance
        """
        principal = self.validate_amount(principal)
        payout = self.validate_amount(payout)

        if self.investment < principal:
            raise InvestmentError(
                _("Invested balance {held} is less than the principal being released {principal}").format(
                    held=self.investment, principal=principal
                )
            )

        self.investment -= principal
        self.balance += payout
        self._touch('balance', 'investment')
        return self.balance

    # ==========================================
    # STATUS MANAGEMENT
    # ==========================================

    def lock(self):
        if not self.is_locked:
            self.is_locked = True
            self.save(update_fields=['is_locked', 'updated_at'])
        return True

    def unlock(self):
        if self.is_locked:
            self.is_locked = False
            self.save(update_fields=['is_locked', 'updated_at'])
        return True

    def refresh_balances(self):
        """Reload all money buckets from the database"""
        self.refresh_from_db(fields=[
            'balance', 'balance_currency',
            'earnings', 'earnings_currency',
            'investment', 'investment_currency',
        ])
