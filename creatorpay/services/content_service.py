"""
Content Service - article lifecycle, moderation and pay-per-view earnings
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, Optional

from django.db import transaction as db_transaction
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Article, ArticleView, Earning, PlatformSetting
from creatorpay.exceptions import ArticleError
from creatorpay.constants import (
    ARTICLE_STATUS_PENDING,
    ARTICLE_STATUS_APPROVED,
    ARTICLE_STATUS_REJECTED,
    SETTING_KEY_CPC,
)
from creatorpay.settings import get_creatorpay_setting
from creatorpay.services.account_service import is_platform_admin


logger = logging.getLogger(__name__)


EDITABLE_FIELDS = ('title', 'content', 'category')


class ContentService:
    """
    Service layer for articles

    Authors write, admins moderate. Each counted view of an approved article
    records an Earning for its author at the article's click value, or the
    platform cost per click when the article has none.
    """

    # ==========================================
    # AUTHORING
    # ==========================================

    def create_article(self, author, data: Dict[str, Any]) -> Article:
        article = Article.objects.create(
            author=author,
            status=ARTICLE_STATUS_PENDING,
            **{field: data[field] for field in EDITABLE_FIELDS if field in data}
        )
        logger.info(f"Article {article.id} submitted by user {author.pk} for moderation")
        return article

    def _check_can_edit(self, article: Article, user) -> None:
        if article.author_id != user.pk and not is_platform_admin(user):
            raise PermissionError(_("You can only modify your own articles"))

    def update_article(self, article: Article, user, data: Dict[str, Any]) -> Article:
        """
        Raises:
            PermissionError: If ``user`` is neither the author nor an admin
        """
        self._check_can_edit(article, user)
        changed = []
        for field in EDITABLE_FIELDS:
            if field in data:
                setattr(article, field, data[field])
                changed.append(field)
        if changed:
            article.save(update_fields=changed + ['updated_at'])
        return article

    def delete_article(self, article: Article, user) -> None:
        self._check_can_edit(article, user)
        logger.info(f"Article {article.id} deleted by user {user.pk}")
        article.delete()

    def public_feed(self):
        return Article.objects.feed()

    def author_articles(self, user):
        return Article.objects.by_author(user).with_stats().order_by('-created_at')

    # ==========================================
    # ADMIN
    # ==========================================

    def moderate(self, article: Article, status: str, note: Optional[str] = None) -> Article:
        """
        Approve or reject an article. Approval stamps ``published_at``.

        Raises:
            ArticleError: If ``status`` is not APPROVED or REJECTED
        """
        if status not in (ARTICLE_STATUS_APPROVED, ARTICLE_STATUS_REJECTED):
            raise ArticleError(_("Invalid status"))

        article.status = status
        article.moderation_note = note
        article.save()

        logger.info(f"Article {article.id} moderated: {status}")
        return article

    def boost(self, article: Article, boost_level: int, boost_expiry=None) -> Article:
        if boost_level is None or int(boost_level) < 0:
            raise ArticleError(_("Boost level must be zero or more"))

        article.boost_level = int(boost_level)
        article.is_boosted = article.boost_level > 0
        article.boost_expiry = boost_expiry if article.is_boosted else None
        article.save(update_fields=['boost_level', 'is_boosted', 'boost_expiry', 'updated_at'])

        logger.info(f"Article {article.id} boost set to {article.boost_level} until {article.boost_expiry}")
        return article

    def set_click_value(self, article: Article, value) -> Article:
        """
        Raises:
            ArticleError: If ``value`` is not a non-negative number
        """
        try:
            value = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ArticleError(_("Click value must be a number"))
        if not value.is_finite() or value < 0:
            raise ArticleError(_("Click value must be zero or more"))

        article.click_value = value
        article.save(update_fields=['click_value', 'updated_at'])
        return article

    # ==========================================
    # VIEWS AND EARNINGS
    # ==========================================

    def get_cpc(self, article: Article) -> Decimal:
        """Earning per view: article override, then platform setting, then default"""
        if article.click_value is not None:
            return Decimal(article.click_value)

        configured = PlatformSetting.objects.get_decimal(SETTING_KEY_CPC)
        if configured is not None:
            return configured

        return Decimal(str(get_creatorpay_setting('DEFAULT_CPC')))

    def record_view(self, article: Article, user=None, ip_address=None, user_agent=None) -> Dict[str, Any]:
        """
        Count a read and credit the author

        Views by the author or by admins are not counted.

        Raises:
            ArticleError: If the article is not approved
        """
        if article.status != ARTICLE_STATUS_APPROVED:
            raise ArticleError(_("Article not approved"))

        if user is not None and user.is_authenticated:
            if user.pk == article.author_id or is_platform_admin(user):
                return {'counted': False}
        else:
            user = None

        cpc = self.get_cpc(article)

        with db_transaction.atomic():
            ArticleView.objects.create(
                article=article,
                user=user,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            Earning.objects.create(
                article=article,
                user_id=article.author_id,
                amount=cpc,
                rate=cpc,
            )

        logger.info(f"View counted on article {article.id}, author earned {cpc}")
        return {'counted': True, 'cpc': cpc}
