"""
Transaction Service - audit records, lookups and admin statistics
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Dict, Any

from django.db import transaction as db_transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Transaction, Wallet
from creatorpay.constants import (
    TRANSACTION_TYPE_DEPOSIT,
    TRANSACTION_TYPE_WITHDRAWAL,
    TRANSACTION_TYPE_LEVEL_UPGRADE,
    TRANSACTION_TYPE_COURSE_PAYMENT,
    TRANSACTION_STATUS_PENDING,
    TRANSACTION_STATUS_COMPLETED,
    GATEWAY_TRANSACTION_TYPES,
)
from creatorpay.settings import get_creatorpay_setting


logger = logging.getLogger(__name__)


FILTER_ALL = 'All'


class TransactionService:
    """
    Service layer for transaction records

    Balance changes happen on the Wallet model; this service records them
    and answers questions about them.
    """

    # ==========================================
    # CREATION
    # ==========================================

    def create_transaction(
        self,
        wallet: Wallet,
        amount,
        transaction_type: str,
        status: str = TRANSACTION_STATUS_PENDING,
        reference: Optional[str] = None,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        **extra
    ) -> Transaction:
        """
        Create a transaction record

        Args:
            wallet: Wallet the money moves in or out of
            amount: Positive amount (Decimal or Money)
            transaction_type: One of TRANSACTION_TYPES
            status: Initial status
            reference: Unique reference, generated when omitted
            description: Human readable description
            metadata: Extra JSON data
            **extra: Any other Transaction field (checkout_request_id, ...)
        """
        txn = Transaction.objects.create(
            wallet=wallet,
            amount=wallet.validate_amount(amount),
            transaction_type=transaction_type,
            status=status,
            reference=reference,
            description=description,
            metadata=metadata or {},
            completed_at=timezone.now() if status == TRANSACTION_STATUS_COMPLETED else None,
            **extra
        )

        logger.info(
            f"Created {transaction_type} transaction {txn.id} for wallet {wallet.id}: "
            f"amount={txn.amount}, status={status}, reference={txn.reference}"
        )
        return txn

    def mark_as_failed(self, txn: Transaction, reason: Optional[str] = None) -> Transaction:
        """Mark a pending transaction as failed, leaving final ones untouched"""
        if txn.is_final:
            return txn
        txn.mark_as_failed(reason=reason)
        logger.info(f"Transaction {txn.id} marked as failed: {reason}")
        return txn

    # ==========================================
    # LOOKUPS
    # ==========================================

    def get_transaction(self, user, transaction_id) -> Transaction:
        """
        Fetch a transaction owned by ``user``

        Raises:
            Transaction.DoesNotExist: If it does not exist or belongs to someone else
        """
        return Transaction.objects.for_user(user).select_related('wallet').get(pk=transaction_id)

    def get_payment_status(self, user, checkout_request_id: str) -> Dict[str, Any]:
        """
        Status of an STK payment looked up by CheckoutRequestID

        Raises:
            Transaction.DoesNotExist: If no matching transaction belongs to ``user``
        """
        txn = (
            Transaction.objects.for_user(user)
            .matching_checkout(checkout_request_id)
            .order_by('-created_at')
            .first()
        )
        if txn is None:
            raise Transaction.DoesNotExist(_("Transaction not found"))

        return {
            'status': txn.status,
            'amount': txn.amount.amount,
            'type': txn.transaction_type,
            'reference': txn.reference,
            'transactionId': str(txn.id),
        }

    def list_transactions(self, user, transaction_type=None, status=None):
        """Transactions of ``user``, newest first, optionally filtered"""
        queryset = Transaction.objects.for_user(user).select_related('wallet')
        return self._apply_filters(queryset, transaction_type, status)

    def admin_list(self, transaction_type=None, status=None):
        """All transactions for the admin screen"""
        queryset = Transaction.objects.get_queryset().with_wallet_details()
        return self._apply_filters(queryset, transaction_type, status)

    @staticmethod
    def _apply_filters(queryset, transaction_type, status):
        if transaction_type and transaction_type != FILTER_ALL:
            queryset = queryset.filter(transaction_type=transaction_type)
        if status and status != FILTER_ALL:
            queryset = queryset.filter(status=status)
        return queryset.order_by('-created_at')

    # ==========================================
    # STATISTICS
    # ==========================================

    def get_admin_stats(self) -> Dict[str, Decimal]:
        """
        Platform totals:

        - totalDeposits: completed deposits
        - totalWithdrawals: completed withdrawals
        - totalRevenue: completed level upgrade and course payments
        - pendingAmount: everything still pending
        """
        completed = Transaction.objects.completed()

        return {
            'totalDeposits': completed.by_type(TRANSACTION_TYPE_DEPOSIT).total_amount(),
            'totalWithdrawals': completed.by_type(TRANSACTION_TYPE_WITHDRAWAL).total_amount(),
            'totalRevenue': completed.filter(
                transaction_type__in=[TRANSACTION_TYPE_LEVEL_UPGRADE, TRANSACTION_TYPE_COURSE_PAYMENT]
            ).total_amount(),
            'pendingAmount': Transaction.objects.pending().total_amount(),
        }

    # ==========================================
    # MAINTENANCE
    # ==========================================

    def expire_stale_payments(self, minutes: Optional[int] = None) -> int:
        """
        Fail STK payments that never received a callback

        Args:
            minutes: Age after which a pending payment is abandoned
                (defaults to PENDING_PAYMENT_TIMEOUT_MINUTES)

        Returns:
            int: Number of transactions expired
        """
        if minutes is None:
            minutes = get_creatorpay_setting('PENDING_PAYMENT_TIMEOUT_MINUTES')

        cutoff = timezone.now() - timedelta(minutes=minutes)
        reason = f"Payment not confirmed within {minutes} minutes"
        expired = 0

        with db_transaction.atomic():
            stale = (
                Transaction.objects.get_queryset()
                .stale_pending(cutoff)
                .filter(transaction_type__in=GATEWAY_TRANSACTION_TYPES)
                .select_for_update()
            )
            for txn in stale:
                self.mark_as_failed(txn, reason=reason)
                expired += 1

        if expired:
            logger.info(f"Expired {expired} pending payment(s) older than {minutes} minutes")
        return expired

