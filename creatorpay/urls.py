from django.urls import path, include
from rest_framework.routers import DefaultRouter

from creatorpay.apis.wallet_api import WalletViewSet
from creatorpay.apis.transaction_api import TransactionViewSet, AdminTransactionViewSet
from creatorpay.apis.withdrawal_api import WithdrawalViewSet, AdminWithdrawalViewSet
from creatorpay.apis.investment_api import InvestmentViewSet
from creatorpay.apis.reward_api import VideoViewSet, LevelViewSet, AdminVideoViewSet
from creatorpay.apis.content_api import ArticleViewSet, AdminArticleViewSet
from creatorpay.apis.course_api import CourseViewSet
from creatorpay.apis.account_api import AccountViewSet
from creatorpay.apis.webhook_api import payhero_webhook, payhero_b2c_webhook, WebhookEventViewSet

# Create a router and register viewsets
router = DefaultRouter()
router.register(r'wallets', WalletViewSet, basename='wallet')
router.register(r'transactions', TransactionViewSet, basename='transaction')
router.register(r'withdrawals', WithdrawalViewSet, basename='withdrawal')
router.register(r'investments', InvestmentViewSet, basename='investment')
router.register(r'videos', VideoViewSet, basename='video')
router.register(r'levels', LevelViewSet, basename='level')
router.register(r'articles', ArticleViewSet, basename='article')
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'accounts', AccountViewSet, basename='account')

# Admin routes
router.register(r'admin/withdrawals', AdminWithdrawalViewSet, basename='admin-withdrawal')
router.register(r'admin/transactions', AdminTransactionViewSet, basename='admin-transaction')
router.register(r'admin/videos', AdminVideoViewSet, basename='admin-video')
router.register(r'admin/articles', AdminArticleViewSet, basename='admin-article')
router.register(r'admin/webhook-events', WebhookEventViewSet, basename='admin-webhook-event')

urlpatterns = [
    # PayHero callback URLs
    path('api/webhooks/payhero/', payhero_webhook, name='payhero-webhook'),
    path('api/webhooks/payhero/b2c/', payhero_b2c_webhook, name='payhero-b2c-webhook'),

    # API routes
    path('api/', include(router.urls)),
]
