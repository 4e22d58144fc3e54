"""
Withdrawal Service - cash-out requests and their manual approval flow

A request debits the balance immediately and waits for an admin. The
admin either approves it, pays it out over M-Pesa by hand and marks it
paid, or rejects it, which refunds the full amount exactly once.
"""
import logging
from decimal import Decimal
from typing import Optional, Dict, Any, Tuple

from django.db import transaction as db_transaction
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Wallet, Transaction, Withdrawal
from creatorpay.exceptions import InsufficientFunds, WithdrawalError
from creatorpay.constants import (
    TRANSACTION_TYPE_WITHDRAWAL,
    TRANSACTION_TYPE_REFUND,
    TRANSACTION_STATUS_PENDING,
    TRANSACTION_STATUS_COMPLETED,
    WITHDRAWAL_STATUS_PENDING,
    WITHDRAWAL_STATUS_APPROVED,
    WITHDRAWAL_STATUS_REJECTED,
    WITHDRAWAL_STATUS_PAID,
    WITHDRAWAL_STATUSES,
    WITHDRAWAL_METHOD_MPESA,
    WITHDRAWAL_ACTION_APPROVE,
    WITHDRAWAL_ACTION_REJECT,
    WITHDRAWAL_MANUAL_NOTE,
)
from creatorpay.settings import get_creatorpay_setting
from creatorpay.services.payhero_service import PayHeroService
from creatorpay.services.transaction_service import TransactionService
from creatorpay.utils.id_generators import generate_withdrawal_reference, generate_refund_reference
from creatorpay.utils.phone import normalize_phone


logger = logging.getLogger(__name__)


class WithdrawalService:
    """
    Service layer for withdrawals
    """

    def __init__(self):
        self.payhero = PayHeroService()
        self.transaction_service = TransactionService()

    # ==========================================
    # USER REQUESTS
    # ==========================================

    def request_withdrawal(
        self,
        wallet: Wallet,
        amount,
        phone_number: str
    ) -> Tuple[Withdrawal, Dict[str, Any]]:
        """
        Reserve ``amount`` from the balance for a manual M-Pesa payout

        Args:
            wallet: Wallet to debit
            amount: Amount in KES
            phone_number: M-Pesa number to pay out to

        Returns:
            tuple: (Withdrawal, payout registration result)

        Raises:
            WithdrawalError: Below the minimum or another request is pending
            InvalidPhoneNumber: If the phone number is missing or invalid
            InsufficientFunds: If the balance is too low
            WalletLocked: If the wallet is locked or inactive
        """
        money = wallet.validate_amount(amount)
        minimum = Decimal(str(get_creatorpay_setting('MINIMUM_WITHDRAWAL')))

        if money.amount < minimum:
            raise WithdrawalError(
                _("Minimum withdrawal amount is {currency} {minimum}").format(
                    currency=wallet.currency, minimum=minimum.normalize()
                )
            )

        phone = normalize_phone(phone_number)
        user = wallet.user

        with db_transaction.atomic():
            locked = Wallet.objects.for_update(wallet.pk)

            if locked.balance < money:
                raise InsufficientFunds(locked, money)

            if Withdrawal.objects.for_user(user).pending().exists():
                raise WithdrawalError(_("You already have a pending withdrawal request"))

            reference = generate_withdrawal_reference(user.pk)
            locked.debit(money)

            txn = self.transaction_service.create_transaction(
                wallet=locked,
                amount=money,
                transaction_type=TRANSACTION_TYPE_WITHDRAWAL,
                status=TRANSACTION_STATUS_PENDING,
                reference=reference,
                description=_("Withdrawal to M-Pesa"),
                metadata={'phone': phone, 'method': WITHDRAWAL_METHOD_MPESA},
                phone_number=phone,
            )

            withdrawal = Withdrawal.objects.create(
                user=user,
                wallet=locked,
                amount=money,
                status=WITHDRAWAL_STATUS_PENDING,
                method=WITHDRAWAL_METHOD_MPESA,
                phone_number=phone,
                reference=reference,
                transaction=txn,
                note=WITHDRAWAL_MANUAL_NOTE,
            )

        logger.info(
            f"Withdrawal {withdrawal.id} requested by user {user.pk}: "
            f"amount={money}, reference={reference}"
        )

        result = self.payhero.initiate_withdrawal(
            amount=money.amount,
            phone_number=phone,
            reference=reference,
            description=str(txn.description)
        )

        wallet.refresh_balances()
        return withdrawal, result

    def list_user_withdrawals(self, user):
        return Withdrawal.objects.for_user(user).order_by('-created_at')

    # ==========================================
    # ADMIN OPERATIONS
    # ==========================================

    def list_withdrawals(self, status: Optional[str] = None):
        """All withdrawals, newest first, optionally filtered by status"""
        queryset = Withdrawal.objects.with_user_details()
        if status:
            valid = {choice for choice, _label in WITHDRAWAL_STATUSES}
            if status not in valid:
                raise WithdrawalError(_("Invalid status filter: {status}").format(status=status))
            queryset = queryset.filter(status=status)
        return queryset.order_by('-created_at')

    @staticmethod
    def _lock(withdrawal: Withdrawal) -> Withdrawal:
        return Withdrawal.objects.select_for_update().get(pk=withdrawal.pk)

    def approve(self, withdrawal: Withdrawal, note: str, admin=None) -> Withdrawal:
        """
        Approve a pending withdrawal for manual payout

        Raises:
            WithdrawalError: If no note is given or the withdrawal is not pending
        """
        if not note or not str(note).strip():
            raise WithdrawalError(_("A note is required to approve a withdrawal"))

        with db_transaction.atomic():
            locked = self._lock(withdrawal)
            if locked.status != WITHDRAWAL_STATUS_PENDING:
                raise WithdrawalError(_("Only pending withdrawals can be approved"), withdrawal.id)

            locked.status = WITHDRAWAL_STATUS_APPROVED
            locked.note = note
            locked.processed_by = admin
            locked.save()

        logger.info(f"Withdrawal {locked.id} approved by {getattr(admin, 'pk', None)}")
        return locked

    def mark_paid(self, withdrawal: Withdrawal, note: Optional[str] = None, admin=None) -> Withdrawal:
        """
        Record that an approved withdrawal was paid out

        Raises:
            WithdrawalError: If the withdrawal is not approved
        """
        with db_transaction.atomic():
            locked = self._lock(withdrawal)
            if locked.status != WITHDRAWAL_STATUS_APPROVED:
                raise WithdrawalError(_("Only approved withdrawals can be marked as paid"), withdrawal.id)

            locked.status = WITHDRAWAL_STATUS_PAID
            if note:
                confirmation = f"Payment confirmed: {note}"
                locked.note = f"{locked.note} | {confirmation}" if locked.note else confirmation
            if admin is not None:
                locked.processed_by = admin
            locked.save()

            self._complete_transaction(locked)

        logger.info(f"Withdrawal {locked.id} marked as paid")
        return locked

    def reject(self, withdrawal: Withdrawal, note: str, admin=None) -> Withdrawal:
        """
        Reject a pending or approved withdrawal and refund the wallet

        Raises:
            WithdrawalError: If no note is given or the withdrawal is closed
        """
        if not note or not str(note).strip():
            raise WithdrawalError(_("A note is required to reject a withdrawal"))

        with db_transaction.atomic():
            locked = self._lock(withdrawal)
            if locked.status not in (WITHDRAWAL_STATUS_PENDING, WITHDRAWAL_STATUS_APPROVED):
                raise WithdrawalError(_("Withdrawal has already been processed"), withdrawal.id)

            locked.status = WITHDRAWAL_STATUS_REJECTED
            locked.note = note
            locked.processed_by = admin
            locked.save()

            self._refund(locked, reason=f"Withdrawal rejected - {note}")

        logger.info(f"Withdrawal {locked.id} rejected and refunded: {note}")
        return locked

    def process(self, withdrawal: Withdrawal, action: str, note: Optional[str] = None, admin=None) -> Withdrawal:
        """
        One-step handling of a pending withdrawal: APPROVE pays it out
        directly, REJECT refunds it

        Raises:
            WithdrawalError: Unknown action or the withdrawal is not pending
        """
        if action not in (WITHDRAWAL_ACTION_APPROVE, WITHDRAWAL_ACTION_REJECT):
            raise WithdrawalError(_("Invalid action: {action}").format(action=action))

        if action == WITHDRAWAL_ACTION_REJECT:
            if withdrawal.status != WITHDRAWAL_STATUS_PENDING:
                raise WithdrawalError(_("Withdrawal already processed"), withdrawal.id)
            return self.reject(withdrawal, note or "Rejected by admin", admin=admin)

        with db_transaction.atomic():
            locked = self._lock(withdrawal)
            if locked.status != WITHDRAWAL_STATUS_PENDING:
                raise WithdrawalError(_("Withdrawal already processed"), withdrawal.id)

            locked.status = WITHDRAWAL_STATUS_PAID
            locked.note = note or "Approved and paid manually"
            locked.processed_by = admin
            locked.save()

            self._complete_transaction(locked)

        logger.info(f"Withdrawal {locked.id} approved and paid in one step")
        return locked

    # ==========================================
    # LEDGER HELPERS
    # ==========================================

    def _complete_transaction(self, withdrawal: Withdrawal, provider_reference=None, gateway_data=None):
        txn = withdrawal.transaction
        if txn is not None and not txn.is_final:
            txn.mark_as_completed(provider_reference=provider_reference, gateway_data=gateway_data)

    def _refund(self, withdrawal: Withdrawal, reason: str) -> Transaction:
        """
        Fail the withdrawal transaction and give the money back

        Raises:
            WithdrawalError: If the transaction was already settled or refunded
        """
        txn = withdrawal.transaction
        if txn is not None:
            txn = Transaction.objects.select_for_update().get(pk=txn.pk)
            if txn.is_final:
                raise WithdrawalError(
                    _("Withdrawal transaction is already {status}").format(status=txn.status),
                    withdrawal.id
                )
            txn.description = reason
            txn.save(update_fields=['description', 'updated_at'])
            txn.mark_as_failed(reason=reason)

        return self.refund_to_wallet(
            wallet_id=withdrawal.wallet_id,
            amount=withdrawal.amount,
            user_id=withdrawal.user_id,
            related=txn,
            description=reason
        )

    def refund_to_wallet(self, wallet_id, amount, user_id, related=None, description=None) -> Transaction:
        """
        Credit ``amount`` back to a wallet with a COMPLETED REFUND record.
        Must run inside an atomic block.
        """
        wallet = Wallet.objects.for_update(wallet_id)
        wallet.credit(amount)

        refund = self.transaction_service.create_transaction(
            wallet=wallet,
            amount=amount,
            transaction_type=TRANSACTION_TYPE_REFUND,
            status=TRANSACTION_STATUS_COMPLETED,
            reference=generate_refund_reference(user_id),
            description=description or _("Withdrawal refund"),
            related_transaction=related,
        )
        logger.info(f"Refunded {amount} to wallet {wallet_id} (refund {refund.id})")
        return refund
