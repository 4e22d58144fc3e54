"""
CreatorPay - Withdrawal API Views

Users request payouts; admins approve, pay, or reject them by hand.
"""
import logging

from rest_framework import mixins, viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.models import Withdrawal
from creatorpay.permissions import IsOwner, IsPlatformAdmin
from creatorpay.serializers.withdrawal_serializer import (
    WithdrawalSerializer,
    AdminWithdrawalSerializer,
    WithdrawalCreateSerializer,
    WithdrawalNoteSerializer,
    WithdrawalProcessSerializer,
)
from creatorpay.services.wallet_service import WalletService
from creatorpay.services.withdrawal_service import WithdrawalService
from creatorpay.apis.common import service_error_response


logger = logging.getLogger(__name__)


class WithdrawalViewSet(mixins.CreateModelMixin,
                        mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        viewsets.GenericViewSet):
    """
    List: GET /api/withdrawals/
    Request: POST /api/withdrawals/ {"amount": "500", "phone_number": "0712345678"}
    """

    serializer_class = WithdrawalSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwner]

    def get_queryset(self):
        return WithdrawalService().list_user_withdrawals(self.request.user)

    def get_serializer_class(self):
        if self.action == 'create':
            return WithdrawalCreateSerializer
        return self.serializer_class

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        wallet = WalletService().get_wallet(request.user)

        try:
            withdrawal, result = WithdrawalService().request_withdrawal(
                wallet=wallet,
                amount=serializer.validated_data['amount'],
                phone_number=serializer.validated_data['phone_number'],
            )
        except Exception as e:
            return service_error_response(e, f"withdrawal request by user {request.user.pk}")

        return Response(
            {
                'success': True,
                'message': result.get('message'),
                'requires_manual_approval': result.get('requires_manual_approval', True),
                'withdrawal': WithdrawalSerializer(withdrawal).data,
            },
            status=status.HTTP_201_CREATED
        )


class AdminWithdrawalViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Admin review of withdrawal requests

    List: GET /api/admin/withdrawals/?status=PENDING
    Actions: approve, mark_paid, reject, process
    """

    serializer_class = AdminWithdrawalSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]

    def get_queryset(self):
        if self.action == 'list':
            return WithdrawalService().list_withdrawals(self.request.query_params.get('status'))
        return Withdrawal.objects.with_user_details()

    def list(self, request: Request, *args, **kwargs) -> Response:
        try:
            return super().list(request, *args, **kwargs)
        except Exception as e:
            return service_error_response(e, "withdrawal listing")

    def get_serializer_class(self):
        action_serializers = {
            'approve': WithdrawalNoteSerializer,
            'mark_paid': WithdrawalNoteSerializer,
            'reject': WithdrawalNoteSerializer,
            'process': WithdrawalProcessSerializer,
        }
        return action_serializers.get(self.action, self.serializer_class)

    def _run(self, request: Request, operation: str, extra=()) -> Response:
        withdrawal = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = WithdrawalService()

        try:
            handler = getattr(service, operation)
            withdrawal = handler(
                withdrawal,
                note=serializer.validated_data.get('note'),
                admin=request.user,
                **{key: serializer.validated_data[key] for key in extra}
            )
        except Exception as e:
            return service_error_response(e, f"{operation} of withdrawal {withdrawal.id}")

        logger.info(f"Admin {request.user.pk} ran {operation} on withdrawal {withdrawal.id}")
        return Response(AdminWithdrawalSerializer(withdrawal).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def approve(self, request: Request, pk=None) -> Response:
        """POST /api/admin/withdrawals/{id}/approve/ {"note": "..."}"""
        return self._run(request, 'approve')

    @action(detail=True, methods=['post'])
    def mark_paid(self, request: Request, pk=None) -> Response:
        return self._run(request, 'mark_paid')

    @action(detail=True, methods=['post'])
    def reject(self, request: Request, pk=None) -> Response:
        """Reject and refund. A note is required."""
        return self._run(request, 'reject')

    @action(detail=True, methods=['post'])
    def process(self, request: Request, pk=None) -> Response:
        """
        One-step decision on a pending withdrawal

        POST /api/admin/withdrawals/{id}/process/
        {"action": "APPROVE" | "REJECT", "note": "..."}
        """
        return self._run(request, 'process', extra=('action',))
