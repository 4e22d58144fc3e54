"""
CreatorPay - Account API Views
"""
import logging

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.serializers.account_serializer import (
    ProfileSerializer,
    RegisterSerializer,
    ReferralsSerializer,
)
from creatorpay.serializers.wallet_serializer import WalletSerializer
from creatorpay.services.account_service import AccountService
from creatorpay.services.wallet_service import WalletService
from creatorpay.apis.common import service_error_response


logger = logging.getLogger(__name__)


class AccountViewSet(viewsets.GenericViewSet):
    """
    Register: POST /api/accounts/register/ (public)
    Profile: GET /api/accounts/me/
    Referrals: GET /api/accounts/referrals/
    """

    serializer_class = RegisterSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.action == 'register':
            return [permissions.AllowAny()]
        return super().get_permissions()

    @action(detail=False, methods=['post'])
    def register(self, request: Request) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = AccountService()

        try:
            user = service.register_user(
                username=data['username'],
                email=data['email'],
                password=data['password'],
                referral_code=data.get('referral_code'),
            )
        except Exception as e:
            return service_error_response(e, "registration")

        profile = service.ensure_user_records(user)
        return Response(
            {
                'profile': ProfileSerializer(profile).data,
                'wallet': WalletSerializer(WalletService().get_wallet(user)).data,
            },
            status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=['get'])
    def me(self, request: Request) -> Response:
        profile = AccountService().ensure_user_records(request.user)
        return Response(ProfileSerializer(profile).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'])
    def referrals(self, request: Request) -> Response:
        referrals = AccountService().get_referrals(request.user)
        return Response(ReferralsSerializer(referrals).data, status=status.HTTP_200_OK)
