"""
CreatorPay - Transaction API Views
"""
import logging

from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status, permissions, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.models import Transaction
from creatorpay.permissions import IsPlatformAdmin
from creatorpay.serializers.transaction_serializer import (
    TransactionSerializer,
    TransactionListSerializer,
    AdminTransactionSerializer,
    PaymentStatusSerializer,
    TransactionStatsSerializer,
)
from creatorpay.services.transaction_service import TransactionService
from creatorpay.apis.common import build_error_response


logger = logging.getLogger(__name__)


# ==========================================
# USER TRANSACTIONS
# ==========================================

class TransactionViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only access to the caller's transactions

    List: GET /api/transactions/?type=DEPOSIT&status=PENDING
    Retrieve: GET /api/transactions/{id}/
    Payment status: GET /api/transactions/payment_status/?checkoutRequestId=...
    """

    serializer_class = TransactionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return TransactionService().list_transactions(
            self.request.user,
            transaction_type=self.request.query_params.get('type'),
            status=self.request.query_params.get('status'),
        )

    def get_serializer_class(self):
        if self.action == 'list':
            return TransactionListSerializer
        return self.serializer_class

    @action(detail=False, methods=['get'])
    def payment_status(self, request: Request) -> Response:
        """
        Poll the outcome of an STK push by its CheckoutRequestID
        """
        checkout_request_id = (
            request.query_params.get('checkoutRequestId')
            or request.query_params.get('checkout_request_id')
        )
        if not checkout_request_id:
            return build_error_response(
                _("checkoutRequestId query parameter is required"),
                status.HTTP_400_BAD_REQUEST
            )

        try:
            result = TransactionService().get_payment_status(request.user, checkout_request_id)
        except Transaction.DoesNotExist:
            return build_error_response(_("Transaction not found"), status.HTTP_404_NOT_FOUND)

        return Response(PaymentStatusSerializer(result).data, status=status.HTTP_200_OK)


# ==========================================
# ADMIN LEDGER
# ==========================================

class AdminTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Platform-wide ledger for admins

    ``?type=`` and ``?status=`` accept ``All`` to mean no filter. Exact
    field filters and search on reference and username are also available.
    """

    serializer_class = AdminTransactionSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['transaction_type', 'status', 'wallet']
    search_fields = ['reference', 'checkout_request_id', 'provider_reference', 'wallet__user__username']
    ordering_fields = ['created_at', 'amount', 'status']

    def get_queryset(self):
        return TransactionService().admin_list(
            transaction_type=self.request.query_params.get('type'),
            status=self.request.query_params.get('status'),
        )

    @action(detail=False, methods=['get'])
    def stats(self, request: Request) -> Response:
        stats = TransactionService().get_admin_stats()
        return Response(TransactionStatsSerializer(stats).data, status=status.HTTP_200_OK)
