"""
CreatorPay - Watch-to-earn API Views
"""
import logging

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.models import Video
from creatorpay.permissions import IsPlatformAdmin
from creatorpay.serializers.reward_serializer import (
    VideoSerializer,
    AdminVideoSerializer,
    WatchResultSerializer,
    LevelStatsSerializer,
    LevelUpgradeSerializer,
)
from creatorpay.serializers.wallet_serializer import WalletSerializer
from creatorpay.services.reward_service import RewardService
from creatorpay.services.wallet_service import WalletService
from creatorpay.apis.common import service_error_response


logger = logging.getLogger(__name__)


class VideoViewSet(viewsets.ReadOnlyModelViewSet):
    """
    List: GET /api/videos/
    Watch: POST /api/videos/{id}/watch/
    """

    serializer_class = VideoSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return RewardService().list_videos()

    @action(detail=True, methods=['post'])
    def watch(self, request: Request, pk=None) -> Response:
        """Record a watch and pay the reward for the caller's level"""
        video = self.get_object()

        try:
            result = RewardService().watch_video(request.user, video)
        except Exception as e:
            return service_error_response(e, f"watch of video {video.id}")

        data = WatchResultSerializer(result).data
        data['wallet'] = WalletSerializer(WalletService().get_wallet(request.user)).data
        return Response(data, status=status.HTTP_200_OK)


class LevelViewSet(viewsets.GenericViewSet):
    """
    Stats: GET /api/levels/me/
    Upgrade: POST /api/levels/upgrade/ {"target_level": 2}
    """

    serializer_class = LevelUpgradeSerializer
    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=['get'])
    def me(self, request: Request) -> Response:
        stats = RewardService().get_level_stats(request.user)
        return Response(LevelStatsSerializer(stats).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'])
    def upgrade(self, request: Request) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = RewardService()

        try:
            service.upgrade_level(request.user, serializer.validated_data['target_level'])
        except Exception as e:
            return service_error_response(e, f"level upgrade by user {request.user.pk}")

        data = LevelStatsSerializer(service.get_level_stats(request.user)).data
        data['wallet'] = WalletSerializer(WalletService().get_wallet(request.user)).data
        return Response(data, status=status.HTTP_200_OK)


class AdminVideoViewSet(viewsets.ModelViewSet):
    """
    Video management with per-video watch counts and rewards paid
    """

    serializer_class = AdminVideoSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]

    def get_queryset(self):
        if self.action in ('list', 'retrieve'):
            return RewardService().video_analytics()
        return Video.objects.all()

    def perform_create(self, serializer):
        video = serializer.save(uploaded_by=self.request.user)
        logger.info(f"Video {video.id} added by admin {self.request.user.pk}")
