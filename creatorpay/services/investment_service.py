"""
Investment Service - fixed-term plans with simple interest
"""
import logging
import math
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any

from django.db import transaction as db_transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Wallet, Investment
from creatorpay.exceptions import InsufficientFunds, InvestmentError
from creatorpay.constants import (
    INVESTMENT_PLANS,
    INVESTMENT_STATUS_ACTIVE,
    INVESTMENT_STATUS_WITHDRAWN,
    TRANSACTION_TYPE_INVESTMENT,
    TRANSACTION_TYPE_INVESTMENT_RETURN,
    TRANSACTION_STATUS_COMPLETED,
)
from creatorpay.settings import get_creatorpay_setting
from creatorpay.services.transaction_service import TransactionService


logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
SECONDS_PER_DAY = 86400


class InvestmentService:
    """
    Investments lock part of the balance for 7, 14 or 30 days. The full
    return (principal plus the plan rate) is paid once the term is over.
    """

    def __init__(self):
        self.transaction_service = TransactionService()

    def create_investment(self, wallet: Wallet, amount, period: str) -> Investment:
        """
        Move ``amount`` from the balance into a new investment

        Raises:
            InvestmentError: Unknown plan or amount below the minimum
            InsufficientFunds: If the balance is too low
            WalletLocked: If the wallet is locked or inactive
        """
        if period not in INVESTMENT_PLANS:
            raise InvestmentError(_("Invalid investment period"))

        money = wallet.validate_amount(amount)
        minimum = Decimal(str(get_creatorpay_setting('MINIMUM_INVESTMENT')))
        if money.amount < minimum:
            raise InvestmentError(
                _("Minimum investment amount is {currency} {minimum}").format(
                    currency=wallet.currency, minimum=minimum.normalize()
                )
            )

        rate, days = INVESTMENT_PLANS[period]
        total_return = (money.amount * (1 + rate)).quantize(CENTS, rounding=ROUND_HALF_UP)
        start = timezone.now()

        with db_transaction.atomic():
            locked = Wallet.objects.for_update(wallet.pk)
            if locked.balance < money:
                raise InsufficientFunds(locked, money)

            locked.move_to_investment(money)

            investment = Investment.objects.create(
                user=locked.user,
                wallet=locked,
                amount=money,
                period=period,
                interest_rate=rate,
                start_date=start,
                end_date=start + timedelta(days=days),
                total_return=total_return,
                status=INVESTMENT_STATUS_ACTIVE,
            )

            self.transaction_service.create_transaction(
                wallet=locked,
                amount=money,
                transaction_type=TRANSACTION_TYPE_INVESTMENT,
                status=TRANSACTION_STATUS_COMPLETED,
                description=_("Investment for {days} days").format(days=days),
                metadata={'investmentId': str(investment.id), 'period': period},
            )

        wallet.refresh_balances()
        logger.info(f"Investment {investment.id} created: {money} for {days} days at {rate}")
        return investment

    def describe(self, investment: Investment, now=None) -> Dict[str, Any]:
        """Progress figures for one investment at ``now``"""
        now = now or timezone.now()
        total_days = investment.total_days

        elapsed_seconds = max((now - investment.start_date).total_seconds(), 0)
        days_elapsed = min(int(elapsed_seconds // SECONDS_PER_DAY), total_days)

        remaining_seconds = (investment.end_date - now).total_seconds()
        days_remaining = max(0, math.ceil(remaining_seconds / SECONDS_PER_DAY))

        principal = investment.amount.amount
        earned = (principal * investment.interest_rate / total_days * days_elapsed).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
        is_matured = investment.is_matured(now)

        return {
            'investment': investment,
            'total_days': total_days,
            'days_elapsed': days_elapsed,
            'days_remaining': days_remaining,
            'current_earned_interest': earned,
            'is_matured': is_matured,
            'can_withdraw': is_matured and investment.is_active,
        }

    def list_investments(self, user, now=None) -> Dict[str, Any]:
        now = now or timezone.now()
        described = [
            self.describe(investment, now)
            for investment in Investment.objects.for_user(user).order_by('-created_at')
        ]
        active = [d for d in described if d['investment'].is_active]

        return {
            'investments': described,
            'total_invested': sum((d['investment'].amount.amount for d in active), Decimal('0')),
            'total_earned_interest': sum((d['current_earned_interest'] for d in active), Decimal('0')),
        }

    def withdraw_investment(self, user, investment_id, now=None) -> Investment:
        """
        Pay out a matured investment to the balance

        Raises:
            Investment.DoesNotExist: Not found or owned by someone else
            InvestmentError: Already withdrawn or not matured yet
        """
        now = now or timezone.now()

        with db_transaction.atomic():
            investment = (
                Investment.objects.for_user(user)
                .select_for_update()
                .get(pk=investment_id)
            )
            if investment.status == INVESTMENT_STATUS_WITHDRAWN:
                raise InvestmentError(_("Investment already withdrawn"))
            if not investment.is_matured(now):
                raise InvestmentError(_("Investment has not matured yet"))

            wallet = Wallet.objects.for_update(investment.wallet_id)
            wallet.release_investment(investment.amount, investment.total_return)

            investment.status = INVESTMENT_STATUS_WITHDRAWN
            investment.withdrawn_at = now
            investment.save(update_fields=['status', 'withdrawn_at', 'updated_at'])

            self.transaction_service.create_transaction(
                wallet=wallet,
                amount=investment.total_return,
                transaction_type=TRANSACTION_TYPE_INVESTMENT_RETURN,
                status=TRANSACTION_STATUS_COMPLETED,
                description=_("Investment return"),
                metadata={
                    'investmentId': str(investment.id),
                    'principal': str(investment.amount.amount),
                    'interest': str(investment.total_return.amount - investment.amount.amount),
                },
            )

        logger.info(f"Investment {investment.id} withdrawn: {investment.total_return} credited")
        return investment

    def collect_matured(self, user, now=None) -> Dict[str, Any]:
        """Withdraw every matured active investment of ``user``"""
        now = now or timezone.now()
        collected = 0
        total = Decimal('0')

        matured_ids = list(Investment.objects.for_user(user).matured(now).values_list('pk', flat=True))
        for investment_id in matured_ids:
            investment = self.withdraw_investment(user, investment_id, now)
            collected += 1
            total += investment.total_return.amount

        if collected:
            logger.info(f"Collected {collected} matured investment(s) for user {user.pk}: {total}")
        return {'collected': collected, 'total_credited': total}
