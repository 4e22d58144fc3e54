from creatorpay.apis.wallet_api import WalletViewSet
from creatorpay.apis.transaction_api import TransactionViewSet, AdminTransactionViewSet
from creatorpay.apis.withdrawal_api import WithdrawalViewSet, AdminWithdrawalViewSet
from creatorpay.apis.investment_api import InvestmentViewSet
from creatorpay.apis.reward_api import VideoViewSet, LevelViewSet, AdminVideoViewSet
from creatorpay.apis.content_api import ArticleViewSet, AdminArticleViewSet
from creatorpay.apis.course_api import CourseViewSet
from creatorpay.apis.account_api import AccountViewSet
from creatorpay.apis.webhook_api import payhero_webhook, payhero_b2c_webhook, WebhookEventViewSet


__all__ = [
    'WalletViewSet',
    'TransactionViewSet',
    'AdminTransactionViewSet',
    'WithdrawalViewSet',
    'AdminWithdrawalViewSet',
    'InvestmentViewSet',
    'VideoViewSet',
    'LevelViewSet',
    'AdminVideoViewSet',
    'ArticleViewSet',
    'AdminArticleViewSet',
    'CourseViewSet',
    'AccountViewSet',
    'payhero_webhook',
    'payhero_b2c_webhook',
    'WebhookEventViewSet',
]
