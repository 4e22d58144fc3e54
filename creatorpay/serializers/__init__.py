"""
CreatorPay serializers module
"""
from creatorpay.serializers.transaction_serializer import (
    TransactionSerializer,
    TransactionListSerializer,
    AdminTransactionSerializer,
    PaymentStatusSerializer,
    TransactionStatsSerializer,
)
from creatorpay.serializers.wallet_serializer import (
    WalletSerializer,
    WalletSummarySerializer,
    EarningsBreakdownSerializer,
    WalletDepositSerializer,
    TransferEarningsSerializer,
)
from creatorpay.serializers.withdrawal_serializer import (
    WithdrawalSerializer,
    AdminWithdrawalSerializer,
    WithdrawalCreateSerializer,
    WithdrawalNoteSerializer,
    WithdrawalProcessSerializer,
)
from creatorpay.serializers.investment_serializer import (
    InvestmentSerializer,
    InvestmentProgressSerializer,
    InvestmentPortfolioSerializer,
    InvestmentCreateSerializer,
    CollectInterestSerializer,
)
from creatorpay.serializers.reward_serializer import (
    VideoSerializer,
    AdminVideoSerializer,
    VideoWatchSerializer,
    WatchResultSerializer,
    LevelStatsSerializer,
    LevelUpgradeSerializer,
)
from creatorpay.serializers.content_serializer import (
    ArticleSerializer,
    AuthorArticleSerializer,
    AdminArticleSerializer,
    ArticleModerateSerializer,
    ArticleBoostSerializer,
    ArticleClickValueSerializer,
    ArticleViewResultSerializer,
)
from creatorpay.serializers.course_serializer import (
    CourseSerializer,
    CourseEnrollmentSerializer,
    CoursePurchaseSerializer,
)
from creatorpay.serializers.account_serializer import (
    ProfileSerializer,
    RegisterSerializer,
    ReferralsSerializer,
)
from creatorpay.serializers.webhook_serializer import WebhookEventSerializer


__all__ = [
    'TransactionSerializer',
    'TransactionListSerializer',
    'AdminTransactionSerializer',
    'PaymentStatusSerializer',
    'TransactionStatsSerializer',
    'WalletSerializer',
    'WalletSummarySerializer',
    'EarningsBreakdownSerializer',
    'WalletDepositSerializer',
    'TransferEarningsSerializer',
    'WithdrawalSerializer',
    'AdminWithdrawalSerializer',
    'WithdrawalCreateSerializer',
    'WithdrawalNoteSerializer',
    'WithdrawalProcessSerializer',
    'InvestmentSerializer',
    'InvestmentProgressSerializer',
    'InvestmentPortfolioSerializer',
    'InvestmentCreateSerializer',
    'CollectInterestSerializer',
    'VideoSerializer',
    'AdminVideoSerializer',
    'VideoWatchSerializer',
    'WatchResultSerializer',
    'LevelStatsSerializer',
    'LevelUpgradeSerializer',
    'ArticleSerializer',
    'AuthorArticleSerializer',
    'AdminArticleSerializer',
    'ArticleModerateSerializer',
    'ArticleBoostSerializer',
    'ArticleClickValueSerializer',
    'ArticleViewResultSerializer',
    'CourseSerializer',
    'CourseEnrollmentSerializer',
    'CoursePurchaseSerializer',
    'ProfileSerializer',
    'RegisterSerializer',
    'ReferralsSerializer',
    'WebhookEventSerializer',
]
