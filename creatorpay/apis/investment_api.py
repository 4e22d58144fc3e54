"""
CreatorPay - Investment API Views
"""
import logging

from django.utils import timezone
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.permissions import IsOwner
from creatorpay.models import Investment
from creatorpay.serializers.investment_serializer import (
    InvestmentProgressSerializer,
    InvestmentPortfolioSerializer,
    InvestmentCreateSerializer,
)
from creatorpay.serializers.wallet_serializer import WalletSerializer
from creatorpay.services.investment_service import InvestmentService
from creatorpay.services.wallet_service import WalletService
from creatorpay.apis.common import service_error_response


logger = logging.getLogger(__name__)


class InvestmentViewSet(viewsets.GenericViewSet):
    """
    List: GET /api/investments/
    Create: POST /api/investments/ {"amount": "1000", "period": "ONE_WEEK"}
    Withdraw: POST /api/investments/{id}/withdraw/
    """

    serializer_class = InvestmentCreateSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwner]

    def get_queryset(self):
        return Investment.objects.for_user(self.request.user).order_by('-created_at')

    def list(self, request: Request) -> Response:
        portfolio = InvestmentService().list_investments(request.user)
        return Response(InvestmentPortfolioSerializer(portfolio).data, status=status.HTTP_200_OK)

    def retrieve(self, request: Request, pk=None) -> Response:
        investment = self.get_object()
        described = InvestmentService().describe(investment)
        return Response(InvestmentProgressSerializer(described).data, status=status.HTTP_200_OK)

    def create(self, request: Request) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        wallet = WalletService().get_wallet(request.user)
        service = InvestmentService()

        try:
            investment = service.create_investment(
                wallet,
                serializer.validated_data['amount'],
                serializer.validated_data['period'],
            )
        except Exception as e:
            return service_error_response(e, f"investment by user {request.user.pk}")

        data = InvestmentProgressSerializer(service.describe(investment)).data
        data['wallet'] = WalletSerializer(wallet).data
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def withdraw(self, request: Request, pk=None) -> Response:
        """Pay a matured investment out to the balance"""
        investment = self.get_object()
        service = InvestmentService()
        now = timezone.now()

        try:
            investment = service.withdraw_investment(request.user, investment.pk, now)
        except Exception as e:
            return service_error_response(e, f"withdrawal of investment {investment.pk}")

        wallet = WalletService().get_wallet(request.user)
        data = InvestmentProgressSerializer(service.describe(investment, now)).data
        data['wallet'] = WalletSerializer(wallet).data
        return Response(data, status=status.HTTP_200_OK)
