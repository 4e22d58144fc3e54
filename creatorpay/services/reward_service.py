"""
Reward Service - watch-to-earn videos and paid level upgrades
"""
import logging
from datetime import datetime, time, timedelta
from typing import Dict, Any, Optional

import pytz
from django.db import transaction as db_transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Wallet, Video, VideoWatch, UserLevel
from creatorpay.exceptions import RewardError
from creatorpay.constants import (
    EARNING_LEVELS,
    MIN_LEVEL,
    MAX_LEVEL,
    TRANSACTION_TYPE_VIDEO_REWARD,
    TRANSACTION_TYPE_LEVEL_UPGRADE,
    TRANSACTION_STATUS_COMPLETED,
)
from creatorpay.settings import get_creatorpay_setting
from creatorpay.services.transaction_service import TransactionService


logger = logging.getLogger(__name__)


def get_level_config(level: int) -> Optional[Dict[str, Any]]:
    for config in EARNING_LEVELS:
        if config['level'] == level:
            return config
    return None


class RewardService:
    """
    Users earn a fixed amount per video watched, up to a daily limit.
    Higher levels pay more per video and are bought with an activation fee.

    Day boundaries follow REWARDS_TIMEZONE, not UTC.
    """

    def __init__(self):
        self.transaction_service = TransactionService()

    # ==========================================
    # DAY HANDLING
    # ==========================================

    @staticmethod
    def _tz():
        return pytz.timezone(get_creatorpay_setting('REWARDS_TIMEZONE'))

    def today(self, now=None):
        return (now or timezone.now()).astimezone(self._tz()).date()

    def _day_bounds(self, day):
        start = self._tz().localize(datetime.combine(day, time.min))
        return start, start + timedelta(days=1)

    @staticmethod
    def _roll_day(user_level: UserLevel, today) -> None:
        """Reset the daily counter the first time a user is seen on a new day"""
        if user_level.last_watch_date != today and user_level.videos_watched_today:
            user_level.videos_watched_today = 0
            user_level.save(update_fields=['videos_watched_today', 'updated_at'])

    def get_user_level(self, user) -> UserLevel:
        user_level, created = UserLevel.objects.get_or_create(user=user)
        if created:
            logger.info(f"Created level record for user {user.pk}")
        return user_level

    # ==========================================
    # STATS
    # ==========================================

    def get_level_stats(self, user, now=None) -> Dict[str, Any]:
        user_level = self.get_user_level(user)
        self._roll_day(user_level, self.today(now))

        config = get_level_config(user_level.level)
        next_config = get_level_config(user_level.level + 1)

        return {
            'current_level': user_level.level,
            'level_name': config['name'],
            'earnings_per_video': config['earnings_per_video'],
            'videos_watched_today': user_level.videos_watched_today,
            'max_videos_per_day': config['videos_per_day'],
            'can_watch_more': user_level.videos_watched_today < config['videos_per_day'],
            'next_level': {
                'level': next_config['level'],
                'name': next_config['name'],
                'activation_fee': next_config['activation_fee'],
                'earnings_per_video': next_config['earnings_per_video'],
            } if next_config else None,
        }

    def list_videos(self):
        return Video.objects.active()

    def video_analytics(self):
        """Per-video watch counts and rewards paid"""
        return Video.objects.with_analytics().order_by('-created_at')

    # ==========================================
    # WATCHING
    # ==========================================

    def watch_video(self, user, video: Video, now=None) -> Dict[str, Any]:
        """
        Pay ``user`` for watching ``video``

        Raises:
            RewardError: Inactive video, daily limit reached or already watched today
        """
        if not video.is_active:
            raise RewardError(_("Video is not available"))

        now = now or timezone.now()
        today = self.today(now)
        day_start, day_end = self._day_bounds(today)
        self.get_user_level(user)

        with db_transaction.atomic():
            user_level = UserLevel.objects.select_for_update().get(user=user)
            self._roll_day(user_level, today)

            config = get_level_config(user_level.level)
            if user_level.videos_watched_today >= config['videos_per_day']:
                raise RewardError(_("Daily video limit reached"))

            already_watched = VideoWatch.objects.filter(
                user=user,
                video=video,
                watched_at__gte=day_start,
                watched_at__lt=day_end,
            ).exists()
            if already_watched:
                raise RewardError(_("Video already watched today"))

            reward = config['earnings_per_video']
            watch = VideoWatch.objects.create(
                user=user,
                video=video,
                reward=reward,
                level=user_level.level,
                watched_at=now,
            )

            user_level.videos_watched_today += 1
            user_level.last_watch_date = today
            user_level.save(update_fields=['videos_watched_today', 'last_watch_date', 'updated_at'])

            wallet, _created = Wallet.objects.get_or_create(user=user)
            wallet = Wallet.objects.for_update(wallet.pk)
            wallet.credit_earnings(reward, to_balance=True)

            self.transaction_service.create_transaction(
                wallet=wallet,
                amount=reward,
                transaction_type=TRANSACTION_TYPE_VIDEO_REWARD,
                status=TRANSACTION_STATUS_COMPLETED,
                description=f"Reward for watching video (Level {user_level.level})",
                metadata={'videoId': str(video.id), 'watchId': str(watch.id)},
            )

        logger.info(f"User {user.pk} earned {reward} for video {video.id}")
        return {
            'watch': watch,
            'reward': reward,
            'videos_watched_today': user_level.videos_watched_today,
            'videos_remaining': config['videos_per_day'] - user_level.videos_watched_today,
        }

    # ==========================================
    # LEVELS
    # ==========================================

    def upgrade_level(self, user, target_level) -> UserLevel:
        """
        Pay the activation fee of ``target_level`` from the balance

        Raises:
            RewardError: Invalid target, not an upgrade or balance too low
        """
        try:
            target_level = int(target_level)
        except (TypeError, ValueError):
            raise RewardError(_("Invalid target level"))

        if not MIN_LEVEL < target_level <= MAX_LEVEL:
            raise RewardError(_("Invalid target level"))

        config = get_level_config(target_level)
        fee = config['activation_fee']
        self.get_user_level(user)

        with db_transaction.atomic():
            user_level = UserLevel.objects.select_for_update().get(user=user)
            if target_level <= user_level.level:
                raise RewardError(_("Cannot downgrade level"))

            wallet, _created = Wallet.objects.get_or_create(user=user)
            wallet = Wallet.objects.for_update(wallet.pk)
            if wallet.balance.amount < fee:
                raise RewardError(_("Insufficient balance for activation fee"))

            wallet.debit(fee)
            previous = user_level.level
            user_level.level = target_level
            user_level.save(update_fields=['level', 'updated_at'])

            self.transaction_service.create_transaction(
                wallet=wallet,
                amount=fee,
                transaction_type=TRANSACTION_TYPE_LEVEL_UPGRADE,
                status=TRANSACTION_STATUS_COMPLETED,
                description=f"Activation fee for Level {target_level}",
                metadata={'fromLevel': previous, 'toLevel': target_level},
            )

        logger.info(f"User {user.pk} upgraded from level {previous} to {target_level} for {fee}")
        return user_level
