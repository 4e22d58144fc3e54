"""
Test cases for TransactionService lookups, admin statistics and expiry
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.utils import timezone
from djmoney.money import Money

from creatorpay.models import Wallet, Transaction
from creatorpay.services.transaction_service import TransactionService
from creatorpay.constants import (
    TRANSACTION_TYPE_DEPOSIT,
    TRANSACTION_TYPE_WITHDRAWAL,
    TRANSACTION_TYPE_LEVEL_UPGRADE,
    TRANSACTION_TYPE_COURSE_PAYMENT,
    TRANSACTION_TYPE_VIDEO_REWARD,
    TRANSACTION_STATUS_PENDING,
    TRANSACTION_STATUS_COMPLETED,
    TRANSACTION_STATUS_FAILED,
)


User = get_user_model()


class TransactionServiceTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='owner', password='testpass123')
        self.other = User.objects.create_user(username='stranger', password='testpass123')
        self.wallet = Wallet.objects.get(user=self.user)
        self.other_wallet = Wallet.objects.get(user=self.other)
        self.service = TransactionService()

    def _txn(self, amount, transaction_type, status, wallet=None, **kwargs):
        return self.service.create_transaction(
            wallet=wallet or self.wallet,
            amount=Decimal(amount),
            transaction_type=transaction_type,
            status=status,
            **kwargs
        )


class LookupTests(TransactionServiceTestCase):

    def test_payment_status_by_checkout_id(self):
        txn = self._txn('500', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING,
                        reference='ws_CO_1', checkout_request_id='ws_CO_1')

        result = self.service.get_payment_status(self.user, 'ws_CO_1')

        self.assertEqual(result['status'], TRANSACTION_STATUS_PENDING)
        self.assertEqual(result['amount'], Decimal('500'))
        self.assertEqual(result['type'], TRANSACTION_TYPE_DEPOSIT)
        self.assertEqual(result['transactionId'], str(txn.id))

    def test_payment_status_after_reference_replaced(self):
        """The receipt replaces the reference but the checkout id still matches"""
        txn = self._txn('500', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING,
                        reference='ws_CO_2', checkout_request_id='ws_CO_2')
        txn.reference = 'QK71RECEIPT'
        txn.save()

        result = self.service.get_payment_status(self.user, 'ws_CO_2')
        self.assertEqual(result['reference'], 'QK71RECEIPT')

    def test_payment_status_of_other_user(self):
        self._txn('500', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING,
                  reference='ws_CO_3', checkout_request_id='ws_CO_3')

        with self.assertRaises(Transaction.DoesNotExist):
            self.service.get_payment_status(self.other, 'ws_CO_3')

    def test_list_filters(self):
        self._txn('100', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_COMPLETED)
        self._txn('50', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_FAILED)
        self._txn('2', TRANSACTION_TYPE_VIDEO_REWARD, TRANSACTION_STATUS_COMPLETED)
        self._txn('10', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_COMPLETED, wallet=self.other_wallet)

        self.assertEqual(self.service.list_transactions(self.user).count(), 3)
        self.assertEqual(self.service.list_transactions(self.user, 'All', 'All').count(), 3)
        self.assertEqual(self.service.list_transactions(self.user, TRANSACTION_TYPE_DEPOSIT).count(), 2)
        self.assertEqual(
            self.service.list_transactions(
                self.user, TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_COMPLETED
            ).count(),
            1
        )
        self.assertEqual(self.service.admin_list().count(), 4)


class AdminStatsTests(TransactionServiceTestCase):

    def test_stats(self):
        self._txn('1000', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_COMPLETED)
        self._txn('250', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_COMPLETED, wallet=self.other_wallet)
        self._txn('999', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_FAILED)
        self._txn('300', TRANSACTION_TYPE_WITHDRAWAL, TRANSACTION_STATUS_COMPLETED)
        self._txn('500', TRANSACTION_TYPE_LEVEL_UPGRADE, TRANSACTION_STATUS_COMPLETED)
        self._txn('1500', TRANSACTION_TYPE_COURSE_PAYMENT, TRANSACTION_STATUS_COMPLETED)
        self._txn('75', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING)
        self._txn('25', TRANSACTION_TYPE_WITHDRAWAL, TRANSACTION_STATUS_PENDING)

        stats = self.service.get_admin_stats()

        self.assertEqual(stats['totalDeposits'], Decimal('1250'))
        self.assertEqual(stats['totalWithdrawals'], Decimal('300'))
        self.assertEqual(stats['totalRevenue'], Decimal('2000'))
        self.assertEqual(stats['pendingAmount'], Decimal('100'))

    def test_empty_stats(self):
        stats = self.service.get_admin_stats()
        self.assertEqual(set(stats.values()), {Decimal('0')})


class ExpiryTests(TransactionServiceTestCase):

    def _age(self, txn, minutes):
        Transaction.objects.filter(pk=txn.pk).update(created_at=timezone.now() - timedelta(minutes=minutes))

    def test_expire_stale_payments(self):
        stale = self._txn('100', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING)
        fresh = self._txn('100', TRANSACTION_TYPE_DEPOSIT, TRANSACTION_STATUS_PENDING)
        withdrawal = self._txn('100', TRANSACTION_TYPE_WITHDRAWAL, TRANSACTION_STATUS_PENDING)
        self._age(stale, 45)
        self._age(withdrawal, 45)

        expired = self.service.expire_stale_payments(minutes=30)

        self.assertEqual(expired, 1)
        stale.refresh_from_db()
        fresh.refresh_from_db()
        withdrawal.refresh_from_db()
        self.assertEqual(stale.status, TRANSACTION_STATUS_FAILED)
        self.assertIn('30 minutes', stale.failed_reason)
        self.assertEqual(fresh.status, TRANSACTION_STATUS_PENDING)
        # withdrawals wait for an admin, not a callback
        self.assertEqual(withdrawal.status, TRANSACTION_STATUS_PENDING)

    def test_management_command(self):
        stale = self._txn('100', TRANSACTION_TYPE_COURSE_PAYMENT, TRANSACTION_STATUS_PENDING)
        self._age(stale, 120)

        call_command('expire_pending_payments', '--minutes', '60')

        stale.refresh_from_db()
        self.assertEqual(stale.status, TRANSACTION_STATUS_FAILED)
