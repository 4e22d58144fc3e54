from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Video, VideoWatch
from creatorpay.constants import MIN_LEVEL, MAX_LEVEL


# ==========================================
# VIDEOS
# ==========================================

class VideoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Video
        fields = [
            'id',
            'title',
            'description',
            'video_url',
            'thumbnail_url',
            'duration',
            'is_active',
            'created_at',
        ]
        read_only_fields = ['id', 'created_at']


class AdminVideoSerializer(VideoSerializer):
    """
    Video with watch analytics

    ``watch_count`` and ``total_earnings`` come from
    ``Video.objects.with_analytics()`` and are absent on freshly created rows.
    """

    uploaded_by = serializers.CharField(source='uploaded_by.username', read_only=True, allow_null=True)
    watch_count = serializers.IntegerField(read_only=True, default=0)
    total_earnings = serializers.DecimalField(
        max_digits=19,
        decimal_places=2,
        read_only=True,
        default=0
    )

    class Meta(VideoSerializer.Meta):
        fields = VideoSerializer.Meta.fields + [
            'uploaded_by',
            'watch_count',
            'total_earnings',
            'updated_at',
        ]
        read_only_fields = ['id', 'uploaded_by', 'watch_count', 'total_earnings', 'created_at', 'updated_at']


class VideoWatchSerializer(serializers.ModelSerializer):
    video_id = serializers.UUIDField(source='video.id', read_only=True)
    video_title = serializers.CharField(source='video.title', read_only=True)

    class Meta:
        model = VideoWatch
        fields = ['id', 'video_id', 'video_title', 'reward', 'level', 'watched_at']
        read_only_fields = fields


class WatchResultSerializer(serializers.Serializer):
    watch = VideoWatchSerializer(read_only=True)
    reward = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    videos_watched_today = serializers.IntegerField(read_only=True)
    videos_remaining = serializers.IntegerField(read_only=True)


# ==========================================
# LEVELS
# ==========================================

class NextLevelSerializer(serializers.Serializer):
    level = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    activation_fee = serializers.DecimalField(max_digits=19, decimal_places=2, read_only=True)
    earnings_per_video = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)


class LevelStatsSerializer(serializers.Serializer):
    current_level = serializers.IntegerField(read_only=True)
    level_name = serializers.CharField(read_only=True)
    earnings_per_video = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    videos_watched_today = serializers.IntegerField(read_only=True)
    max_videos_per_day = serializers.IntegerField(read_only=True)
    can_watch_more = serializers.BooleanField(read_only=True)
    next_level = NextLevelSerializer(read_only=True, allow_null=True)


class LevelUpgradeSerializer(serializers.Serializer):
    target_level = serializers.IntegerField(
        min_value=MIN_LEVEL + 1,
        max_value=MAX_LEVEL,
        help_text=_('Level to activate; the activation fee is taken from the balance')
    )
