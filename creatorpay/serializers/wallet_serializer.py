from decimal import Decimal
from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Wallet
from creatorpay.serializers.transaction_serializer import TransactionListSerializer


# ==========================================
# WALLET SERIALIZERS
# ==========================================

class WalletSerializer(serializers.ModelSerializer):
    """
    Read-only wallet with its three balances as plain decimals
    """

    user_id = serializers.CharField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)

    balance = serializers.DecimalField(
        source='balance.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True,
        help_text=_('Spendable balance')
    )
    earnings = serializers.DecimalField(
        source='earnings.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True,
        help_text=_('Earnings not yet moved to the balance')
    )
    investment = serializers.DecimalField(
        source='investment.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True,
        help_text=_('Principal locked in active investments')
    )
    currency = serializers.CharField(read_only=True)
    is_operational = serializers.BooleanField(read_only=True)

    class Meta:
        model = Wallet
        fields = [
            'id',
            'user_id',
            'username',
            'balance',
            'earnings',
            'investment',
            'currency',
            'is_active',
            'is_locked',
            'is_operational',
            'last_transaction_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class WalletSummarySerializer(serializers.Serializer):
    """Output of WalletService.get_summary"""

    wallet = WalletSerializer(read_only=True)
    balance = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    earnings = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    investment = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    currency = serializers.CharField(read_only=True)
    recent_transactions = TransactionListSerializer(many=True, read_only=True)


class EarningsBreakdownSerializer(serializers.Serializer):
    article_earnings = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    referral_earnings = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    total_earnings = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    referral_count = serializers.IntegerField(read_only=True)
    referral_code = serializers.CharField(read_only=True, allow_null=True)


# ==========================================
# OPERATION SERIALIZERS
# ==========================================

class WalletDepositSerializer(serializers.Serializer):
    """
    Start an M-Pesa STK push into the wallet
    """

    amount = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        min_value=Decimal('1.00'),
        help_text=_('Amount to deposit in KES')
    )
    phone_number = serializers.CharField(
        max_length=20,
        help_text=_('M-Pesa phone number, e.g. 0712345678 or 254712345678')
    )

    def validate_phone_number(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Phone number is required"))
        return value


class TransferEarningsSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        help_text=_('Amount of earnings to move to the balance')
    )

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError(_("Amount must be greater than zero"))
        return value
