from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Transaction


# ==========================================
# BASE & FULL SERIALIZERS
# ==========================================

class TransactionSerializer(serializers.ModelSerializer):
    """
    Full serializer for the Transaction model

    Amounts are exposed as positive decimals; ``transaction_type`` says
    which way the money moved.
    """

    wallet_id = serializers.UUIDField(source='wallet.id', read_only=True)

    amount = serializers.DecimalField(
        source='amount.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True
    )
    currency = serializers.CharField(
        source='amount.currency.code',
        read_only=True
    )

    transaction_type_display = serializers.CharField(
        source='get_transaction_type_display',
        read_only=True
    )
    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    is_debit = serializers.BooleanField(read_only=True)

    related_transaction_id = serializers.UUIDField(
        source='related_transaction.id',
        read_only=True,
        allow_null=True
    )

    class Meta:
        model = Transaction
        fields = [
            'id',
            'wallet_id',
            'amount',
            'currency',
            'reference',
            'transaction_type',
            'transaction_type_display',
            'status',
            'status_display',
            'is_debit',
            'description',
            'metadata',
            'checkout_request_id',
            'merchant_request_id',
            'provider_reference',
            'phone_number',
            'related_transaction_id',
            'failed_reason',
            'completed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class TransactionListSerializer(serializers.ModelSerializer):
    """
    Lightweight serializer for transaction lists
    """

    amount = serializers.DecimalField(
        source='amount.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True
    )
    transaction_type_display = serializers.CharField(
        source='get_transaction_type_display',
        read_only=True
    )

    class Meta:
        model = Transaction
        fields = [
            'id',
            'amount',
            'reference',
            'transaction_type',
            'transaction_type_display',
            'status',
            'description',
            'created_at',
        ]
        read_only_fields = fields


class AdminTransactionSerializer(TransactionListSerializer):
    """List entry for the admin ledger, with the owner attached"""

    user_id = serializers.CharField(source='wallet.user.id', read_only=True)
    username = serializers.CharField(source='wallet.user.username', read_only=True)

    class Meta(TransactionListSerializer.Meta):
        fields = TransactionListSerializer.Meta.fields + [
            'user_id',
            'username',
            'checkout_request_id',
            'provider_reference',
            'phone_number',
            'failed_reason',
            'completed_at',
        ]
        read_only_fields = fields


# ==========================================
# STATUS & STATS
# ==========================================

class PaymentStatusSerializer(serializers.Serializer):
    """Answer to a payment status poll"""

    status = serializers.CharField(read_only=True)
    amount = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    type = serializers.CharField(read_only=True)
    reference = serializers.CharField(read_only=True)
    transactionId = serializers.CharField(read_only=True)


class TransactionStatsSerializer(serializers.Serializer):
    totalDeposits = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        read_only=True,
        help_text=_('Sum of completed deposits')
    )
    totalWithdrawals = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        read_only=True,
        help_text=_('Sum of completed withdrawals')
    )
    totalRevenue = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        read_only=True,
        help_text=_('Completed course payments and activation fees')
    )
    pendingAmount = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        read_only=True,
        help_text=_('Sum of transactions still waiting for PayHero')
    )
