from decimal import Decimal
from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Investment
from creatorpay.constants import INVESTMENT_PERIODS


class InvestmentSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(
        source='amount.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True
    )
    total_return = serializers.DecimalField(
        source='total_return.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True
    )
    period_display = serializers.CharField(source='get_period_display', read_only=True)

    class Meta:
        model = Investment
        fields = [
            'id',
            'amount',
            'period',
            'period_display',
            'interest_rate',
            'total_return',
            'start_date',
            'end_date',
            'status',
            'withdrawn_at',
            'created_at',
        ]
        read_only_fields = fields


class InvestmentProgressSerializer(serializers.Serializer):
    """
    An investment together with its progress figures

    Fed with the dicts built by InvestmentService.describe.
    """

    investment = InvestmentSerializer(read_only=True)
    total_days = serializers.IntegerField(read_only=True)
    days_elapsed = serializers.IntegerField(read_only=True)
    days_remaining = serializers.IntegerField(read_only=True)
    current_earned_interest = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    is_matured = serializers.BooleanField(read_only=True)
    can_withdraw = serializers.BooleanField(read_only=True)


class InvestmentPortfolioSerializer(serializers.Serializer):
    investments = InvestmentProgressSerializer(many=True, read_only=True)
    total_invested = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    total_earned_interest = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)


class InvestmentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        help_text=_('Principal to lock in KES')
    )
    period = serializers.ChoiceField(
        choices=INVESTMENT_PERIODS,
        help_text=_('ONE_WEEK, TWO_WEEKS or ONE_MONTH')
    )

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError(_("Amount must be greater than zero"))
        return value


class CollectInterestSerializer(serializers.Serializer):
    collected = serializers.IntegerField(read_only=True)
    total_credited = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
