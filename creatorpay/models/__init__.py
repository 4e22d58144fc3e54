from creatorpay.models.profile import Profile, ProfileQuerySet, ProfileManager
from creatorpay.models.wallet import Wallet, WalletQuerySet, WalletManager
from creatorpay.models.transaction import Transaction, TransactionQuerySet, TransactionManager
from creatorpay.models.withdrawal import Withdrawal, WithdrawalQuerySet, WithdrawalManager
from creatorpay.models.investment import Investment, InvestmentQuerySet, InvestmentManager
from creatorpay.models.webhook import WebhookEvent
from creatorpay.models.content import Article, ArticleView, Earning, PlatformSetting
from creatorpay.models.rewards import Video, VideoWatch, UserLevel
from creatorpay.models.course import Course, CourseEnrollment


__all__ = [
    'Profile',
    'ProfileQuerySet',
    'ProfileManager',
    'Wallet',
    'WalletQuerySet',
    'WalletManager',
    'Transaction',
    'TransactionQuerySet',
    'TransactionManager',
    'Withdrawal',
    'WithdrawalQuerySet',
    'WithdrawalManager',
    'Investment',
    'InvestmentQuerySet',
    'InvestmentManager',
    'WebhookEvent',
    'Article',
    'ArticleView',
    'Earning',
    'PlatformSetting',
    'Video',
    'VideoWatch',
    'UserLevel',
    'Course',
    'CourseEnrollment',
]
