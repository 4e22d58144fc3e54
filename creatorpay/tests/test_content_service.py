"""
Test cases for ContentService
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.utils import timezone

from creatorpay.models import Article, ArticleView, Earning, PlatformSetting
from creatorpay.services.content_service import ContentService
from creatorpay.services.account_service import AccountService
from creatorpay.exceptions import ArticleError
from creatorpay.constants import (
    ARTICLE_STATUS_PENDING,
    ARTICLE_STATUS_APPROVED,
    ARTICLE_STATUS_REJECTED,
    SETTING_KEY_CPC,
    ROLE_ADMIN,
)


User = get_user_model()


class ContentServiceTestCase(TestCase):
    """Test case for ContentService"""

    def setUp(self):
        self.author = User.objects.create_user(username='writer', password='testpass123')
        self.reader = User.objects.create_user(username='reader', password='testpass123')
        self.admin = User.objects.create_user(username='moderator', password='testpass123')
        AccountService().set_role(self.admin, ROLE_ADMIN)

        self.service = ContentService()
        self.article = self.service.create_article(self.author, {
            'title': 'Side hustles in Nairobi',
            'content': 'Long form content',
            'category': 'Business',
        })


class AuthoringTests(ContentServiceTestCase):

    def test_new_article_is_pending(self):
        self.assertEqual(self.article.status, ARTICLE_STATUS_PENDING)
        self.assertEqual(self.article.author, self.author)
        self.assertIsNone(self.article.published_at)

    def test_create_ignores_status_in_data(self):
        article = self.service.create_article(self.author, {
            'title': 'Sneaky',
            'content': 'x',
            'status': ARTICLE_STATUS_APPROVED,
        })
        self.assertEqual(article.status, ARTICLE_STATUS_PENDING)

    def test_author_can_update(self):
        self.service.update_article(self.article, self.author, {'title': 'New title'})
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, 'New title')

    def test_admin_can_update(self):
        self.service.update_article(self.article, self.admin, {'category': 'Finance'})
        self.article.refresh_from_db()
        self.assertEqual(self.article.category, 'Finance')

    def test_other_user_cannot_update_or_delete(self):
        with self.assertRaises(PermissionError):
            self.service.update_article(self.article, self.reader, {'title': 'Hijacked'})

        with self.assertRaises(PermissionError):
            self.service.delete_article(self.article, self.reader)

        self.assertTrue(Article.objects.filter(pk=self.article.pk).exists())

    def test_author_can_delete(self):
        self.service.delete_article(self.article, self.author)
        self.assertFalse(Article.objects.filter(pk=self.article.pk).exists())


class ModerationTests(ContentServiceTestCase):

    def test_approve_sets_published_at(self):
        article = self.service.moderate(self.article, ARTICLE_STATUS_APPROVED)

        self.assertEqual(article.status, ARTICLE_STATUS_APPROVED)
        self.assertIsNotNone(article.published_at)

    def test_reject_with_note(self):
        article = self.service.moderate(self.article, ARTICLE_STATUS_REJECTED, 'Plagiarised')

        self.assertEqual(article.status, ARTICLE_STATUS_REJECTED)
        self.assertEqual(article.moderation_note, 'Plagiarised')

    def test_invalid_status(self):
        with self.assertRaises(ArticleError):
            self.service.moderate(self.article, ARTICLE_STATUS_PENDING)

    def test_feed_orders_boosted_first(self):
        self.service.moderate(self.article, ARTICLE_STATUS_APPROVED)
        boosted = self.service.create_article(self.author, {'title': 'Boosted', 'content': 'x'})
        self.service.moderate(boosted, ARTICLE_STATUS_APPROVED)
        expired = self.service.create_article(self.author, {'title': 'Expired boost', 'content': 'x'})
        self.service.moderate(expired, ARTICLE_STATUS_APPROVED)
        hidden = self.service.create_article(self.author, {'title': 'Pending', 'content': 'x'})

        self.service.boost(boosted, 2, timezone.now() + timedelta(days=1))
        self.service.boost(expired, 5, timezone.now() - timedelta(days=1))

        feed = list(self.service.public_feed())

        self.assertEqual(feed[0], boosted)
        self.assertNotIn(hidden, feed)
        self.assertEqual(len(feed), 3)

    def test_boost_zero_clears(self):
        self.service.boost(self.article, 3, timezone.now() + timedelta(days=1))
        article = self.service.boost(self.article, 0)

        self.assertFalse(article.is_boosted)
        self.assertIsNone(article.boost_expiry)

    def test_negative_boost(self):
        with self.assertRaises(ArticleError):
            self.service.boost(self.article, -1)

    def test_set_click_value(self):
        article = self.service.set_click_value(self.article, '0.25')
        self.assertEqual(article.click_value, Decimal('0.25'))

        with self.assertRaises(ArticleError):
            self.service.set_click_value(self.article, '-1')

        with self.assertRaises(ArticleError):
            self.service.set_click_value(self.article, 'abc')


class ViewEarningTests(ContentServiceTestCase):

    def setUp(self):
        super().setUp()
        self.service.moderate(self.article, ARTICLE_STATUS_APPROVED)

    def test_view_of_pending_article(self):
        pending = self.service.create_article(self.author, {'title': 'Draft', 'content': 'x'})

        with self.assertRaises(ArticleError):
            self.service.record_view(pending, self.reader)

    def test_reader_view_credits_author(self):
        result = self.service.record_view(
            self.article, self.reader, ip_address='10.0.0.1', user_agent='pytest'
        )

        self.assertTrue(result['counted'])
        self.assertEqual(result['cpc'], Decimal('0.05'))

        earning = Earning.objects.get()
        self.assertEqual(earning.user, self.author)
        self.assertEqual(earning.amount, Decimal('0.05'))
        self.assertEqual(ArticleView.objects.get().ip_address, '10.0.0.1')

    def test_anonymous_view_counts(self):
        result = self.service.record_view(self.article, AnonymousUser())

        self.assertTrue(result['counted'])
        self.assertIsNone(ArticleView.objects.get().user)

    def test_author_and_admin_views_not_counted(self):
        self.assertEqual(self.service.record_view(self.article, self.author), {'counted': False})
        self.assertEqual(self.service.record_view(self.article, self.admin), {'counted': False})

        self.assertFalse(Earning.objects.exists())
        self.assertFalse(ArticleView.objects.exists())

    def test_cpc_precedence(self):
        self.assertEqual(self.service.get_cpc(self.article), Decimal('0.05'))

        PlatformSetting.objects.create(key=SETTING_KEY_CPC, value='0.10')
        self.assertEqual(self.service.get_cpc(self.article), Decimal('0.10'))

        self.service.set_click_value(self.article, '0.30')
        self.assertEqual(self.service.get_cpc(self.article), Decimal('0.30'))

    def test_author_stats(self):
        self.service.record_view(self.article, self.reader)
        self.service.record_view(self.article, None)

        article = self.service.author_articles(self.author).get(pk=self.article.pk)

        self.assertEqual(article.view_count, 2)
        self.assertEqual(article.total_earnings, Decimal('0.10'))
