from decimal import Decimal
from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Withdrawal
from creatorpay.constants import WITHDRAWAL_ACTIONS


class WithdrawalSerializer(serializers.ModelSerializer):
    """
    Serializer for withdrawal requests as their owner sees them
    """

    amount = serializers.DecimalField(
        source='amount.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True
    )
    currency = serializers.CharField(source='amount.currency.code', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    transaction_id = serializers.UUIDField(source='transaction.id', read_only=True, allow_null=True)

    class Meta:
        model = Withdrawal
        fields = [
            'id',
            'amount',
            'currency',
            'status',
            'status_display',
            'method',
            'phone_number',
            'reference',
            'transaction_id',
            'note',
            'approved_at',
            'paid_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class AdminWithdrawalSerializer(WithdrawalSerializer):
    """Withdrawal with requester and processing admin attached"""

    user_id = serializers.CharField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    processed_by = serializers.CharField(source='processed_by.username', read_only=True, allow_null=True)

    class Meta(WithdrawalSerializer.Meta):
        fields = WithdrawalSerializer.Meta.fields + [
            'user_id',
            'username',
            'email',
            'processed_by',
        ]
        read_only_fields = fields


# ==========================================
# REQUEST SERIALIZERS
# ==========================================

class WithdrawalCreateSerializer(serializers.Serializer):
    """
    Request a manual M-Pesa payout

    The minimum amount and phone format are enforced by WithdrawalService.
    """

    amount = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        help_text=_('Amount to withdraw in KES')
    )
    phone_number = serializers.CharField(
        max_length=20,
        help_text=_('M-Pesa number to pay out to')
    )

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError(_("Amount must be greater than zero"))
        return value


class WithdrawalNoteSerializer(serializers.Serializer):
    note = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text=_('Admin note stored on the withdrawal')
    )


class WithdrawalProcessSerializer(WithdrawalNoteSerializer):
    action = serializers.ChoiceField(choices=WITHDRAWAL_ACTIONS)
