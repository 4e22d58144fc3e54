"""
Wallet Service - balance summary and earnings
"""
import logging
from decimal import Decimal
from typing import Dict, Any

from django.db import transaction
from django.db.models import Sum

from creatorpay.models import Wallet, Transaction, Earning, Profile
from creatorpay.exceptions import InvalidAmount
from creatorpay.constants import (
    TRANSACTION_TYPE_EARNINGS_TRANSFER,
    TRANSACTION_STATUS_COMPLETED,
    EARNINGS_TRANSFER_DESCRIPTION,
)
from creatorpay.services.transaction_service import TransactionService


logger = logging.getLogger(__name__)


RECENT_TRANSACTIONS_LIMIT = 10


class WalletService:
    """
    Service layer for wallet reads and earnings movements

    Money moves on the Wallet model methods; every movement made here is
    paired with exactly one Transaction record inside the same database
    transaction.
    """

    def __init__(self):
        self.transaction_service = TransactionService()

    # ==========================================
    # WALLET MANAGEMENT
    # ==========================================

    def get_wallet(self, user) -> Wallet:
        """
        Get or create the wallet of ``user``

        Args:
            user: User instance

        Returns:
            Wallet: The user's wallet
        """
        wallet, created = Wallet.objects.select_related('user').get_or_create(user=user)
        if created:
            logger.info(f"Created new wallet {wallet.id} for user {user.id}")
        return wallet

    def get_summary(self, wallet: Wallet) -> Dict[str, Any]:
        """
        Balances plus the latest transactions

        Returns:
            dict: balance, earnings, investment, currency, recent_transactions
        """
        wallet.refresh_balances()
        recent = list(
            wallet.transactions.order_by('-created_at')[:RECENT_TRANSACTIONS_LIMIT]
        )
        return {
            'wallet': wallet,
            'balance': wallet.balance.amount,
            'earnings': wallet.earnings.amount,
            'investment': wallet.investment.amount,
            'currency': wallet.currency,
            'recent_transactions': recent,
        }

    # ==========================================
    # EARNINGS
    # ==========================================

    def transfer_earnings(self, wallet: Wallet, amount) -> Transaction:
        """
        Move earnings into the spendable balance

        Raises:
            InvalidAmount: If amount is not positive
            InsufficientEarnings: If earnings are below ``amount``
            WalletLocked: If the wallet is locked or inactive
        """
        if amount is None or Decimal(str(getattr(amount, 'amount', amount))) <= 0:
            raise InvalidAmount(amount)

        with transaction.atomic():
            locked = Wallet.objects.for_update(wallet.pk)
            locked.transfer_earnings_to_balance(amount)
            txn = self.transaction_service.create_transaction(
                wallet=locked,
                amount=amount,
                transaction_type=TRANSACTION_TYPE_EARNINGS_TRANSFER,
                status=TRANSACTION_STATUS_COMPLETED,
                description=EARNINGS_TRANSFER_DESCRIPTION,
            )

        wallet.refresh_balances()
        logger.info(f"Transferred {amount} from earnings to balance on wallet {wallet.id}")
        return txn

    def get_earnings_breakdown(self, user) -> Dict[str, Any]:
        """
        Split earnings into what articles produced and the rest (referrals)

        Article earnings are the Earning rows minus what has already been
        transferred to the balance.
        """
        wallet = self.get_wallet(user)

        earned = Earning.objects.filter(user=user).aggregate(total=Sum('amount'))['total']
        earned = earned or Decimal('0')
        transferred = (
            Transaction.objects.for_user(user)
            .completed()
            .by_type(TRANSACTION_TYPE_EARNINGS_TRANSFER)
            .total_amount()
        )

        article_earnings = max(Decimal('0'), earned - transferred)
        referral_earnings = max(Decimal('0'), wallet.earnings.amount - article_earnings)

        profile = Profile.objects.filter(user=user).first()
        referral_count = Profile.objects.referred_by(user).count()

        return {
            'article_earnings': article_earnings,
            'referral_earnings': referral_earnings,
            'total_earnings': article_earnings + referral_earnings,
            'referral_count': referral_count,
            'referral_code': profile.referral_code if profile else None,
        }
