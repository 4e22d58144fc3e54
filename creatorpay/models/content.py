from decimal import Decimal, InvalidOperation
from django.db import models
from django.db.models import Count, Sum, Q, OuterRef, Subquery, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from model_utils.fields import MonitorField

from creatorpay.constants import (
    ARTICLE_STATUSES, ARTICLE_STATUS_PENDING, ARTICLE_STATUS_APPROVED,
)
from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class ArticleQuerySet(models.QuerySet):
    """Custom QuerySet for Article model"""

    def approved(self):
        return self.filter(status=ARTICLE_STATUS_APPROVED)

    def pending(self):
        return self.filter(status=ARTICLE_STATUS_PENDING)

    def by_author(self, user):
        return self.filter(author=user)

    def feed(self, now=None):
        """
        Public feed: approved articles, those with a running boost first
        (highest boost level first), then newest
        """
        now = now or timezone.now()
        boosted = Q(is_boosted=True) & (Q(boost_expiry__isnull=True) | Q(boost_expiry__gt=now))
        return (
            self.approved()
            .select_related('author')
            .annotate(
                boost_rank=models.Case(
                    models.When(boosted, then=models.F('boost_level')),
                    default=models.Value(0),
                    output_field=models.PositiveSmallIntegerField(),
                )
            )
            .order_by('-boost_rank', '-published_at', '-created_at')
        )

    def with_stats(self):
        """Annotate view count and total earnings per article"""
        views = (
            ArticleView.objects.filter(article=OuterRef('pk'))
            .values('article')
            .annotate(c=Count('id'))
            .values('c')
        )
        earned = (
            Earning.objects.filter(article=OuterRef('pk'))
            .values('article')
            .annotate(s=Sum('amount'))
            .values('s')
        )
        return self.annotate(
            view_count=Coalesce(Subquery(views), Value(0)),
            total_earnings=Coalesce(
                Subquery(earned),
                Value(Decimal('0')),
                output_field=models.DecimalField(max_digits=14, decimal_places=4),
            ),
        )


class Article(BaseModel):
    """
    Article written by a user.

    New articles wait for moderation; only approved articles are shown
    publicly and earn their author money per counted view.
    """

    author = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='articles',
        verbose_name=_('Author')
    )
    title = models.CharField(
        max_length=255,
        verbose_name=_('Title')
    )
    content = models.TextField(
        verbose_name=_('Content')
    )
    category = models.CharField(
        max_length=100,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Category')
    )
    status = models.CharField(
        max_length=20,
        choices=ARTICLE_STATUSES,
        default=ARTICLE_STATUS_PENDING,
        db_index=True,
        verbose_name=_('Status')
    )
    moderation_note = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('Moderation note')
    )
    published_at = MonitorField(
        monitor='status',
        when=[ARTICLE_STATUS_APPROVED],
        default=None,
        null=True,
        blank=True,
        verbose_name=_('Published at')
    )
    click_value = models.DecimalField(
        max_digits=10,
        decimal_places=4,
        blank=True,
        null=True,
        verbose_name=_('Click value'),
        help_text=_('Earning per counted view; falls back to the platform CPC')
    )
    is_boosted = models.BooleanField(
        default=False,
        verbose_name=_('Is boosted')
    )
    boost_level = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_('Boost level')
    )
    boost_expiry = models.DateTimeField(
        blank=True,
        null=True,
        verbose_name=_('Boost expiry')
    )

    objects = ArticleQuerySet.as_manager()

    class Meta:
        verbose_name = _('Article')
        verbose_name_plural = _('Articles')
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_approved(self):
        return self.status == ARTICLE_STATUS_APPROVED


class ArticleView(BaseModel):
    """A counted read of an approved article"""

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='views',
        verbose_name=_('Article')
    )
    user = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.SET_NULL,
        related_name='article_views',
        blank=True,
        null=True,
        verbose_name=_('User')
    )
    ip_address = models.GenericIPAddressField(
        blank=True,
        null=True,
        verbose_name=_('IP address')
    )
    user_agent = models.TextField(
        blank=True,
        null=True,
        verbose_name=_('User agent')
    )

    class Meta:
        verbose_name = _('Article view')
        verbose_name_plural = _('Article views')
        ordering = ['-created_at']


class Earning(BaseModel):
    """Money an author earned from one counted view"""

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='earnings',
        verbose_name=_('Article')
    )
    user = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='article_earnings',
        verbose_name=_('User')
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        verbose_name=_('Amount')
    )
    rate = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        verbose_name=_('Rate')
    )

    class Meta:
        verbose_name = _('Earning')
        verbose_name_plural = _('Earnings')
        ordering = ['-created_at']


class PlatformSettingManager(models.Manager):

    def get_decimal(self, key, default=None):
        """
        Return the setting parsed as a Decimal, or ``default`` when it is
        missing or not a number
        """
        value = self.filter(key=key).values_list('value', flat=True).first()
        if not value:
            return default
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            return default
        return parsed if parsed.is_finite() else default


class PlatformSetting(BaseModel):
    """Key/value settings editable by admins at runtime (e.g. ``CPC``)"""

    key = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Key')
    )
    value = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Value')
    )

    objects = PlatformSettingManager()

    class Meta:
        verbose_name = _('Platform setting')
        verbose_name_plural = _('Platform settings')
        ordering = ['key']

    def __str__(self):
        return f"{self.key}={self.value}"
