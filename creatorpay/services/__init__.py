from creatorpay.services.payhero_service import PayHeroService
from creatorpay.services.transaction_service import TransactionService
from creatorpay.services.wallet_service import WalletService
from creatorpay.services.course_service import CourseService
from creatorpay.services.payment_service import PaymentService
from creatorpay.services.withdrawal_service import WithdrawalService
from creatorpay.services.webhook_service import WebhookService
from creatorpay.services.investment_service import InvestmentService
from creatorpay.services.reward_service import RewardService
from creatorpay.services.content_service import ContentService
from creatorpay.services.account_service import AccountService


__all__ = [
    'PayHeroService',
    'TransactionService',
    'WalletService',
    'CourseService',
    'PaymentService',
    'WithdrawalService',
    'WebhookService',
    'InvestmentService',
    'RewardService',
    'ContentService',
    'AccountService',
]
