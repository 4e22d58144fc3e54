"""
CreatorPay - API Tests
Test suite for the investment, reward, article, course, account and admin endpoints
"""
from decimal import Decimal
from unittest.mock import patch, Mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from djmoney.money import Money
from rest_framework.test import APIClient, APITestCase
from rest_framework import status

from creatorpay.models import (
    Wallet,
    Transaction,
    Investment,
    Video,
    VideoWatch,
    Article,
    Earning,
    Course,
    CourseEnrollment,
    Profile,
)
from creatorpay.services.account_service import AccountService
from creatorpay.services.content_service import ContentService
from creatorpay.constants import (
    ROLE_ADMIN,
    INVESTMENT_PERIOD_ONE_WEEK,
    INVESTMENT_STATUS_ACTIVE,
    ARTICLE_STATUS_PENDING,
    ARTICLE_STATUS_APPROVED,
    TRANSACTION_TYPE_DEPOSIT,
    TRANSACTION_TYPE_COURSE_PAYMENT,
    TRANSACTION_TYPE_LEVEL_UPGRADE,
    TRANSACTION_STATUS_COMPLETED,
    TRANSACTION_STATUS_PENDING,
)


User = get_user_model()


class CreatorPayApiTestCase(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username='member', email='member@example.com', password='testpass123')
        self.admin = User.objects.create_user(username='platformadmin', password='testpass123')
        AccountService().set_role(self.admin, ROLE_ADMIN)
        self.wallet = Wallet.objects.get(user=self.user)
        self.client.force_authenticate(user=self.user)


# ==========================================
# INVESTMENTS
# ==========================================

class InvestmentApiTests(CreatorPayApiTestCase):

    def setUp(self):
        super().setUp()
        self.wallet.credit(Decimal('2000'))

    def test_create(self):
        response = self.client.post(
            reverse('investment-list'),
            {'amount': '1000', 'period': INVESTMENT_PERIOD_ONE_WEEK}
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['investment']['total_return']), Decimal('1040'))
        self.assertEqual(response.data['investment']['status'], INVESTMENT_STATUS_ACTIVE)
        self.assertEqual(response.data['total_days'], 7)
        self.assertFalse(response.data['can_withdraw'])
        self.assertEqual(Decimal(response.data['wallet']['balance']), Decimal('1000'))
        self.assertEqual(Decimal(response.data['wallet']['investment']), Decimal('1000'))

    def test_create_invalid_period(self):
        response = self.client.post(reverse('investment-list'), {'amount': '1000', 'period': 'FOREVER'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('period', response.data)

    def test_create_below_minimum(self):
        response = self.client.post(
            reverse('investment-list'),
            {'amount': '50', 'period': INVESTMENT_PERIOD_ONE_WEEK}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Investment.objects.exists())

    def test_create_insufficient_funds(self):
        response = self.client.post(
            reverse('investment-list'),
            {'amount': '5000', 'period': INVESTMENT_PERIOD_ONE_WEEK}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list(self):
        self.client.post(reverse('investment-list'), {'amount': '1000', 'period': INVESTMENT_PERIOD_ONE_WEEK})
        self.client.post(reverse('investment-list'), {'amount': '500', 'period': INVESTMENT_PERIOD_ONE_WEEK})

        response = self.client.get(reverse('investment-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['investments']), 2)
        self.assertEqual(Decimal(response.data['total_invested']), Decimal('1500'))

    def test_withdraw_before_maturity(self):
        created = self.client.post(
            reverse('investment-list'),
            {'amount': '1000', 'period': INVESTMENT_PERIOD_ONE_WEEK}
        )
        investment_id = created.data['investment']['id']

        response = self.client.post(reverse('investment-withdraw', kwargs={'pk': investment_id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Investment.objects.get(pk=investment_id).status, INVESTMENT_STATUS_ACTIVE)

    def test_other_users_investment(self):
        created = self.client.post(
            reverse('investment-list'),
            {'amount': '1000', 'period': INVESTMENT_PERIOD_ONE_WEEK}
        )

        other = User.objects.create_user(username='nosy', password='testpass123')
        self.client.force_authenticate(user=other)
        response = self.client.get(reverse('investment-detail', kwargs={'pk': created.data['investment']['id']}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# ==========================================
# VIDEOS AND LEVELS
# ==========================================

class RewardApiTests(CreatorPayApiTestCase):

    def setUp(self):
        super().setUp()
        self.video = Video.objects.create(title='Morning show', video_url='https://videos.test/morning.mp4')
        self.hidden = Video.objects.create(
            title='Retired', video_url='https://videos.test/retired.mp4', is_active=False
        )

    def test_list_only_active(self):
        response = self.client.get(reverse('video-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([v['title'] for v in response.data], ['Morning show'])

    def test_watch(self):
        response = self.client.post(reverse('video-watch', kwargs={'pk': self.video.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['reward']), Decimal('2'))
        self.assertEqual(response.data['videos_watched_today'], 1)
        self.assertEqual(response.data['videos_remaining'], 4)
        self.assertEqual(Decimal(response.data['wallet']['balance']), Decimal('2'))

    def test_watch_twice(self):
        self.client.post(reverse('video-watch', kwargs={'pk': self.video.pk}))
        response = self.client.post(reverse('video-watch', kwargs={'pk': self.video.pk}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(VideoWatch.objects.count(), 1)

    def test_watch_inactive_video_not_found(self):
        response = self.client.post(reverse('video-watch', kwargs={'pk': self.hidden.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_level_stats(self):
        response = self.client.get(reverse('level-me'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_level'], 1)
        self.assertEqual(response.data['max_videos_per_day'], 5)
        self.assertTrue(response.data['can_watch_more'])
        self.assertEqual(response.data['next_level']['level'], 2)
        self.assertEqual(Decimal(response.data['next_level']['activation_fee']), Decimal('500'))

    def test_upgrade(self):
        self.wallet.credit(Decimal('600'))

        response = self.client.post(reverse('level-upgrade'), {'target_level': 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_level'], 2)
        self.assertEqual(Decimal(response.data['wallet']['balance']), Decimal('100'))
        self.assertTrue(
            Transaction.objects.filter(wallet=self.wallet, transaction_type=TRANSACTION_TYPE_LEVEL_UPGRADE).exists()
        )

    def test_upgrade_insufficient_balance(self):
        response = self.client.post(reverse('level-upgrade'), {'target_level': 3})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upgrade_out_of_range(self):
        response = self.client.post(reverse('level-upgrade'), {'target_level': 9})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('target_level', response.data)

    def test_admin_video_analytics(self):
        self.client.post(reverse('video-watch', kwargs={'pk': self.video.pk}))
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse('admin-video-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        by_title = {v['title']: v for v in response.data}
        self.assertEqual(by_title['Morning show']['watch_count'], 1)
        self.assertEqual(Decimal(by_title['Morning show']['total_earnings']), Decimal('2'))
        self.assertEqual(by_title['Retired']['watch_count'], 0)

    def test_admin_creates_video(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse('admin-video-list'),
            {'title': 'Evening show', 'video_url': 'https://videos.test/evening.mp4'}
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Video.objects.get(title='Evening show').uploaded_by, self.admin)

    def test_user_cannot_manage_videos(self):
        response = self.client.get(reverse('admin-video-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


# ==========================================
# ARTICLES
# ==========================================

class ArticleApiTests(CreatorPayApiTestCase):

    def setUp(self):
        super().setUp()
        self.reader = User.objects.create_user(username='reader', password='testpass123')

    def _approved(self, title='Published'):
        service = ContentService()
        article = service.create_article(self.user, {'title': title, 'content': 'Body'})
        return service.moderate(article, ARTICLE_STATUS_APPROVED)

    def test_create_starts_pending(self):
        response = self.client.post(
            reverse('article-list'),
            {'title': 'Hello', 'content': 'World', 'status': ARTICLE_STATUS_APPROVED}
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], ARTICLE_STATUS_PENDING)
        self.assertEqual(response.data['author_username'], 'member')

    def test_list_own_articles_with_stats(self):
        article = self._approved()
        ContentService().record_view(article, self.reader)
        Article.objects.create(author=self.reader, title='Not mine', content='x')

        response = self.client.get(reverse('article-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['view_count'], 1)
        self.assertEqual(Decimal(response.data[0]['total_earnings']), Decimal('0.05'))

    def test_update_by_other_user(self):
        article = self._approved()
        self.client.force_authenticate(user=self.reader)

        response = self.client.patch(reverse('article-detail', kwargs={'pk': article.pk}), {'title': 'Mine now'})

        # other users' articles are outside the editable queryset
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_own(self):
        article = self._approved()

        response = self.client.delete(reverse('article-detail', kwargs={'pk': article.pk}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Article.objects.filter(pk=article.pk).exists())

    def test_public_feed(self):
        self._approved('Visible')
        ContentService().create_article(self.user, {'title': 'Draft', 'content': 'x'})
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('article-feed'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['title'] for a in response.data], ['Visible'])

    def test_anonymous_view_counts(self):
        article = self._approved()
        self.client.force_authenticate(user=None)

        response = self.client.post(
            reverse('article-view', kwargs={'pk': article.pk}),
            HTTP_X_FORWARDED_FOR='41.90.1.2, 10.0.0.1'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['counted'])
        self.assertEqual(Decimal(response.data['cpc']), Decimal('0.05'))
        self.assertEqual(article.views.get().ip_address, '41.90.1.2')
        self.assertEqual(Earning.objects.get().user, self.user)

    def test_author_view_not_counted(self):
        article = self._approved()

        response = self.client.post(reverse('article-view', kwargs={'pk': article.pk}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['counted'])
        self.assertFalse(Earning.objects.exists())

    def test_view_of_pending_article(self):
        article = ContentService().create_article(self.user, {'title': 'Draft', 'content': 'x'})
        self.client.force_authenticate(user=self.reader)

        response = self.client.post(reverse('article-view', kwargs={'pk': article.pk}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], 'Article not approved')


class AdminArticleApiTests(CreatorPayApiTestCase):

    def setUp(self):
        super().setUp()
        self.article = ContentService().create_article(self.user, {'title': 'Queued', 'content': 'x'})

    def test_admin_edits_other_authors_article(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            reverse('article-detail', kwargs={'pk': self.article.pk}),
            {'title': 'Retitled by admin'}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.article.refresh_from_db()
        self.assertEqual(self.article.title, 'Retitled by admin')
        self.assertEqual(self.article.author, self.user)

    def test_admin_deletes_other_authors_article(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(reverse('article-detail', kwargs={'pk': self.article.pk}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Article.objects.filter(pk=self.article.pk).exists())

    def test_moderation_queue(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse('admin-article-list'), {'status': ARTICLE_STATUS_PENDING})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a['title'] for a in response.data], ['Queued'])

    def test_moderate(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse('admin-article-moderate', kwargs={'pk': self.article.pk}),
            {'status': ARTICLE_STATUS_APPROVED, 'note': 'Looks good'}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ARTICLE_STATUS_APPROVED)
        self.assertEqual(response.data['moderation_note'], 'Looks good')
        self.assertIsNotNone(response.data['published_at'])

    def test_moderate_invalid_status(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse('admin-article-moderate', kwargs={'pk': self.article.pk}),
            {'status': ARTICLE_STATUS_PENDING}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_boost_and_click_value(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse('admin-article-boost', kwargs={'pk': self.article.pk}),
            {'boost_level': 3}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_boosted'])
        self.assertEqual(response.data['boost_level'], 3)

        response = self.client.post(
            reverse('admin-article-click-value', kwargs={'pk': self.article.pk}),
            {'value': '0.25'}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['click_value']), Decimal('0.25'))

    def test_negative_boost_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse('admin-article-boost', kwargs={'pk': self.article.pk}),
            {'boost_level': -1}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_user_cannot_moderate(self):
        response = self.client.post(
            reverse('admin-article-moderate', kwargs={'pk': self.article.pk}),
            {'status': ARTICLE_STATUS_APPROVED}
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


# ==========================================
# COURSES
# ==========================================

class CourseApiTests(CreatorPayApiTestCase):

    def setUp(self):
        super().setUp()
        self.free = Course.objects.create(title='Basics', price=Money(0, 'KES'), is_free=True)
        self.paid = Course.objects.create(title='Copywriting', price=Money(1500, 'KES'))
        self.hidden = Course.objects.create(title='Draft course', price=Money(900, 'KES'), is_published=False)

    def test_list_published(self):
        response = self.client.get(reverse('course-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({c['title'] for c in response.data}, {'Basics', 'Copywriting'})

    def test_purchase_free_course(self):
        response = self.client.post(reverse('course-purchase', kwargs={'pk': self.free.pk}), {})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['enrolled'])
        self.assertTrue(CourseEnrollment.objects.filter(user=self.user, course=self.free).exists())

        enrollments = self.client.get(reverse('course-enrollments'))
        self.assertEqual([e['course']['title'] for e in enrollments.data], ['Basics'])

    @patch('requests.request')
    def test_purchase_paid_course(self, mock_request):
        mock_request.return_value = Mock(status_code=201)
        mock_request.return_value.json.return_value = {
            'success': True,
            'status': 'QUEUED',
            'CheckoutRequestID': 'ws_CO_COURSE',
        }

        response = self.client.post(
            reverse('course-purchase', kwargs={'pk': self.paid.pk}),
            {'phone_number': '0712345678'}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['enrolled'])
        self.assertEqual(response.data['checkoutRequestId'], 'ws_CO_COURSE')
        self.assertEqual(mock_request.call_args.kwargs['json']['amount'], 1500)

        txn = Transaction.objects.get(pk=response.data['transactionId'])
        self.assertEqual(txn.transaction_type, TRANSACTION_TYPE_COURSE_PAYMENT)
        self.assertEqual(txn.status, TRANSACTION_STATUS_PENDING)
        self.assertEqual(txn.metadata['courseId'], str(self.paid.id))
        self.assertFalse(CourseEnrollment.objects.exists())

    @patch('requests.request')
    def test_purchase_paid_course_without_phone(self, mock_request):
        response = self.client.post(reverse('course-purchase', kwargs={'pk': self.paid.pk}), {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_request.assert_not_called()

    def test_purchase_twice(self):
        self.client.post(reverse('course-purchase', kwargs={'pk': self.free.pk}), {})
        CourseEnrollment.objects.create(user=self.user, course=self.paid)

        response = self.client.post(
            reverse('course-purchase', kwargs={'pk': self.paid.pk}),
            {'phone_number': '0712345678'}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unpublished_course_not_found(self):
        response = self.client.post(reverse('course-purchase', kwargs={'pk': self.hidden.pk}), {})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# ==========================================
# ACCOUNTS
# ==========================================

class AccountApiTests(CreatorPayApiTestCase):

    def test_register_with_referral(self):
        code = Profile.objects.get(user=self.user).referral_code
        self.client.force_authenticate(user=None)

        response = self.client.post(reverse('account-register'), {
            'username': 'fresh',
            'email': 'Fresh@Example.com',
            'password': 'S3cure-pass!',
            'referral_code': code,
        })

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['profile']['username'], 'fresh')
        self.assertEqual(response.data['profile']['email'], 'fresh@example.com')
        self.assertEqual(Decimal(response.data['wallet']['balance']), Decimal('0'))
        self.assertEqual(Profile.objects.get(user__username='fresh').referred_by, self.user)

    def test_register_duplicate_username(self):
        self.client.force_authenticate(user=None)

        response = self.client.post(reverse('account-register'), {
            'username': 'MEMBER',
            'email': 'other@example.com',
            'password': 'S3cure-pass!',
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('username', response.data)

    def test_me(self):
        response = self.client.get(reverse('account-me'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'member')
        self.assertEqual(len(response.data['referral_code']), 8)

    def test_referrals(self):
        code = Profile.objects.get(user=self.user).referral_code
        AccountService().register_user('invitee', 'invitee@example.com', 'S3cure-pass!', referral_code=code)

        response = self.client.get(reverse('account-referrals'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['referral_count'], 1)
        self.assertEqual(response.data['referrals'][0]['username'], 'invitee')

    def test_me_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('account-me'))
        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])


# ==========================================
# ADMIN TRANSACTIONS
# ==========================================

class AdminTransactionApiTests(CreatorPayApiTestCase):

    def setUp(self):
        super().setUp()
        Transaction.objects.create(
            wallet=self.wallet,
            amount=Money(800, 'KES'),
            transaction_type=TRANSACTION_TYPE_DEPOSIT,
            status=TRANSACTION_STATUS_COMPLETED,
            reference='QK71STATS',
        )
        Transaction.objects.create(
            wallet=self.wallet,
            amount=Money(60, 'KES'),
            transaction_type=TRANSACTION_TYPE_DEPOSIT,
            status=TRANSACTION_STATUS_PENDING,
        )

    def test_stats(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse('admin-transaction-stats'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['totalDeposits']), Decimal('800'))
        self.assertEqual(Decimal(response.data['pendingAmount']), Decimal('60'))

    def test_list_filters_and_search(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse('admin-transaction-list'), {'status': 'All', 'type': 'All'})
        self.assertEqual(len(response.data), 2)

        response = self.client.get(reverse('admin-transaction-list'), {'status': TRANSACTION_STATUS_PENDING})
        self.assertEqual(len(response.data), 1)

        response = self.client.get(reverse('admin-transaction-list'), {'search': 'QK71STATS'})
        self.assertEqual(len(response.data), 1)

    def test_stats_requires_admin(self):
        response = self.client.get(reverse('admin-transaction-stats'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
