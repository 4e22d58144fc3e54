from django.db import models
from django.db.models import Count, Sum
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from creatorpay.constants import MIN_LEVEL
from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class VideoQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def with_analytics(self):
        """Annotate how often each video was watched and how much it paid out"""
        return self.annotate(
            watch_count=Count('watches'),
            total_earnings=Sum('watches__reward'),
        )


class Video(BaseModel):
    """A video users can watch to earn a reward"""

    title = models.CharField(
        max_length=255,
        verbose_name=_('Title')
    )
    description = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('Description')
    )
    video_url = models.URLField(
        max_length=500,
        verbose_name=_('Video URL')
    )
    thumbnail_url = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        verbose_name=_('Thumbnail URL')
    )
    duration = models.PositiveIntegerField(
        default=30,
        verbose_name=_('Duration'),
        help_text=_('Length in seconds')
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        verbose_name=_('Is active')
    )
    uploaded_by = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.SET_NULL,
        related_name='uploaded_videos',
        blank=True,
        null=True,
        verbose_name=_('Uploaded by')
    )

    objects = VideoQuerySet.as_manager()

    class Meta:
        verbose_name = _('Video')
        verbose_name_plural = _('Videos')
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class VideoWatch(BaseModel):
    """One rewarded watch of a video"""

    user = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='video_watches',
        verbose_name=_('User')
    )
    video = models.ForeignKey(
        Video,
        on_delete=models.CASCADE,
        related_name='watches',
        verbose_name=_('Video')
    )
    reward = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        verbose_name=_('Reward')
    )
    level = models.PositiveSmallIntegerField(
        verbose_name=_('Level')
    )
    watched_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name=_('Watched at')
    )

    class Meta:
        verbose_name = _('Video watch')
        verbose_name_plural = _('Video watches')
        ordering = ['-watched_at']
        indexes = [
            models.Index(fields=['user', 'video', 'watched_at'], name='cp_watch_user_video_idx'),
        ]

    def __str__(self):
        return f"{self.user} watched {self.video} (+{self.reward})"


class UserLevel(BaseModel):
    """Watch-to-earn level and today's watch counter for a user"""

    user = models.OneToOneField(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='earning_level',
        verbose_name=_('User')
    )
    level = models.PositiveSmallIntegerField(
        default=MIN_LEVEL,
        verbose_name=_('Level')
    )
    videos_watched_today = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_('Videos watched today')
    )
    last_watch_date = models.DateField(
        blank=True,
        null=True,
        verbose_name=_('Last watch date')
    )

    class Meta:
        verbose_name = _('User level')
        verbose_name_plural = _('User levels')

    def __str__(self):
        return f"{self.user} - Level {self.level}"
