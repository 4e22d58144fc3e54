"""
CreatorPay - Wallet API Views
"""
import logging

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.models import Wallet
from creatorpay.permissions import IsWalletOwner
from creatorpay.serializers.wallet_serializer import (
    WalletSerializer,
    WalletSummarySerializer,
    EarningsBreakdownSerializer,
    WalletDepositSerializer,
    TransferEarningsSerializer,
)
from creatorpay.serializers.transaction_serializer import TransactionSerializer, TransactionListSerializer
from creatorpay.serializers.investment_serializer import CollectInterestSerializer
from creatorpay.services.wallet_service import WalletService
from creatorpay.services.payment_service import PaymentService
from creatorpay.services.investment_service import InvestmentService
from creatorpay.services.transaction_service import TransactionService
from creatorpay.apis.common import service_error_response


logger = logging.getLogger(__name__)


class WalletViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for the caller's wallet

    ``default`` can be used in place of the wallet id.

    Summary: GET /api/wallets/ or /api/wallets/default/

    Custom Actions:
    - deposit: POST /api/wallets/{id}/deposit/
    - transfer_earnings: POST /api/wallets/{id}/transfer_earnings/
    - earnings_breakdown: GET /api/wallets/{id}/earnings_breakdown/
    - collect_interest: POST /api/wallets/{id}/collect_interest/
    - transactions: GET /api/wallets/{id}/transactions/
    """

    serializer_class = WalletSerializer
    permission_classes = [permissions.IsAuthenticated, IsWalletOwner]

    def get_queryset(self):
        return Wallet.objects.filter(user=self.request.user).select_related('user')

    def get_serializer_class(self):
        action_serializers = {
            'deposit': WalletDepositSerializer,
            'transfer_earnings': TransferEarningsSerializer,
        }
        return action_serializers.get(self.action, self.serializer_class)

    def get_object(self):
        """
        Get wallet object with special handling for 'default' pk
        """
        if self.kwargs.get('pk') == 'default':
            wallet = WalletService().get_wallet(self.request.user)
            self.check_object_permissions(self.request, wallet)
            return wallet
        return super().get_object()

    def _summary_response(self, wallet: Wallet) -> Response:
        summary = WalletService().get_summary(wallet)
        return Response(WalletSummarySerializer(summary).data, status=status.HTTP_200_OK)

    def list(self, request: Request, *args, **kwargs) -> Response:
        """Every user has exactly one wallet, so the list is its summary"""
        wallet = WalletService().get_wallet(request.user)
        return self._summary_response(wallet)

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        return self._summary_response(self.get_object())

    # ==========================================
    # DEPOSIT ACTION
    # ==========================================

    @action(detail=True, methods=['post'])
    def deposit(self, request: Request, pk=None) -> Response:
        """
        Send an M-Pesa STK push for a deposit

        POST /api/wallets/{id}/deposit/
        {"amount": "500.00", "phone_number": "0712345678"}

        The wallet is credited once PayHero calls back.
        """
        wallet = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            wallet.check_active()
            result = PaymentService().initiate_deposit(
                wallet=wallet,
                amount=serializer.validated_data['amount'],
                phone_number=serializer.validated_data['phone_number'],
            )
            logger.info(f"Deposit initiated for wallet {wallet.id}: {result['transactionId']}")
            return Response(result, status=status.HTTP_200_OK)

        except Exception as e:
            return service_error_response(e, f"deposit to wallet {wallet.id}")

    # ==========================================
    # EARNINGS ACTIONS
    # ==========================================

    @action(detail=True, methods=['post'])
    def transfer_earnings(self, request: Request, pk=None) -> Response:
        """
        Move earnings into the spendable balance

        POST /api/wallets/{id}/transfer_earnings/
        {"amount": "250.00"}
        """
        wallet = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            txn = WalletService().transfer_earnings(wallet, serializer.validated_data['amount'])
            return Response(
                {
                    'transaction': TransactionSerializer(txn).data,
                    'wallet': WalletSerializer(wallet).data,
                },
                status=status.HTTP_200_OK
            )
        except Exception as e:
            return service_error_response(e, f"earnings transfer on wallet {wallet.id}")

    @action(detail=True, methods=['get'])
    def earnings_breakdown(self, request: Request, pk=None) -> Response:
        wallet = self.get_object()
        breakdown = WalletService().get_earnings_breakdown(wallet.user)
        return Response(EarningsBreakdownSerializer(breakdown).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def collect_interest(self, request: Request, pk=None) -> Response:
        """
        Withdraw every matured investment into the balance

        POST /api/wallets/{id}/collect_interest/
        """
        wallet = self.get_object()

        try:
            result = InvestmentService().collect_matured(wallet.user)
            wallet.refresh_balances()
            data = CollectInterestSerializer(result).data
            data['wallet'] = WalletSerializer(wallet).data
            return Response(data, status=status.HTTP_200_OK)
        except Exception as e:
            return service_error_response(e, f"interest collection on wallet {wallet.id}")

    # ==========================================
    # TRANSACTIONS ACTION
    # ==========================================

    @action(detail=True, methods=['get'])
    def transactions(self, request: Request, pk=None) -> Response:
        """
        Wallet transaction history

        GET /api/wallets/{id}/transactions/?type=DEPOSIT&status=COMPLETED&limit=20&offset=0
        """
        wallet = self.get_object()

        try:
            limit = min(max(1, int(request.query_params.get('limit', 20))), 100)
            offset = max(0, int(request.query_params.get('offset', 0)))
        except ValueError:
            limit, offset = 20, 0

        queryset = TransactionService().list_transactions(
            wallet.user,
            transaction_type=request.query_params.get('type'),
            status=request.query_params.get('status'),
        )
        total_count = queryset.count()
        page = queryset[offset:offset + limit]

        return Response(
            {
                'count': total_count,
                'next': offset + limit if offset + limit < total_count else None,
                'previous': max(offset - limit, 0) if offset > 0 else None,
                'results': TransactionListSerializer(page, many=True).data,
            },
            status=status.HTTP_200_OK
        )
