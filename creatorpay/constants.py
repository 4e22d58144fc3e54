from decimal import Decimal
from django.utils.translation import gettext_lazy as _


# ==========================================
# TRANSACTIONS
# ==========================================

TRANSACTION_TYPE_DEPOSIT = 'DEPOSIT'
TRANSACTION_TYPE_WITHDRAWAL = 'WITHDRAWAL'
TRANSACTION_TYPE_EARNINGS_TRANSFER = 'EARNINGS_TRANSFER'
TRANSACTION_TYPE_INVESTMENT = 'INVESTMENT'
TRANSACTION_TYPE_INVESTMENT_RETURN = 'INVESTMENT_RETURN'
TRANSACTION_TYPE_VIDEO_REWARD = 'VIDEO_REWARD'
TRANSACTION_TYPE_LEVEL_UPGRADE = 'LEVEL_UPGRADE'
TRANSACTION_TYPE_COURSE_PAYMENT = 'COURSE_PAYMENT'
TRANSACTION_TYPE_REFUND = 'REFUND'

TRANSACTION_TYPES = (
    (TRANSACTION_TYPE_DEPOSIT, _('Deposit')),
    (TRANSACTION_TYPE_WITHDRAWAL, _('Withdrawal')),
    (TRANSACTION_TYPE_EARNINGS_TRANSFER, _('Earnings transfer')),
    (TRANSACTION_TYPE_INVESTMENT, _('Investment')),
    (TRANSACTION_TYPE_INVESTMENT_RETURN, _('Investment return')),
    (TRANSACTION_TYPE_VIDEO_REWARD, _('Video reward')),
    (TRANSACTION_TYPE_LEVEL_UPGRADE, _('Level upgrade')),
    (TRANSACTION_TYPE_COURSE_PAYMENT, _('Course payment')),
    (TRANSACTION_TYPE_REFUND, _('Refund')),
)

# Types that take money out of the wallet balance
DEBIT_TRANSACTION_TYPES = (
    TRANSACTION_TYPE_WITHDRAWAL,
    TRANSACTION_TYPE_INVESTMENT,
    TRANSACTION_TYPE_LEVEL_UPGRADE,
)

# Types whose completion depends on a PayHero callback
GATEWAY_TRANSACTION_TYPES = (
    TRANSACTION_TYPE_DEPOSIT,
    TRANSACTION_TYPE_COURSE_PAYMENT,
)

TRANSACTION_STATUS_PENDING = 'PENDING'
TRANSACTION_STATUS_COMPLETED = 'COMPLETED'
TRANSACTION_STATUS_FAILED = 'FAILED'

TRANSACTION_STATUSES = (
    (TRANSACTION_STATUS_PENDING, _('Pending')),
    (TRANSACTION_STATUS_COMPLETED, _('Completed')),
    (TRANSACTION_STATUS_FAILED, _('Failed')),
)

TERMINAL_TRANSACTION_STATUSES = (
    TRANSACTION_STATUS_COMPLETED,
    TRANSACTION_STATUS_FAILED,
)

EARNINGS_TRANSFER_DESCRIPTION = 'Transfer earnings to wallet'


# ==========================================
# WITHDRAWALS
# ==========================================

WITHDRAWAL_STATUS_PENDING = 'PENDING'
WITHDRAWAL_STATUS_APPROVED = 'APPROVED'
WITHDRAWAL_STATUS_REJECTED = 'REJECTED'
WITHDRAWAL_STATUS_PAID = 'PAID'

WITHDRAWAL_STATUSES = (
    (WITHDRAWAL_STATUS_PENDING, _('Pending')),
    (WITHDRAWAL_STATUS_APPROVED, _('Approved')),
    (WITHDRAWAL_STATUS_REJECTED, _('Rejected')),
    (WITHDRAWAL_STATUS_PAID, _('Paid')),
)

WITHDRAWAL_METHOD_MPESA = 'MPESA'

WITHDRAWAL_METHODS = (
    (WITHDRAWAL_METHOD_MPESA, _('M-Pesa')),
)

WITHDRAWAL_ACTION_APPROVE = 'APPROVE'
WITHDRAWAL_ACTION_REJECT = 'REJECT'

WITHDRAWAL_ACTIONS = (
    (WITHDRAWAL_ACTION_APPROVE, _('Approve')),
    (WITHDRAWAL_ACTION_REJECT, _('Reject')),
)

WITHDRAWAL_MANUAL_NOTE = 'Manual processing required'


# ==========================================
# INVESTMENTS
# ==========================================

INVESTMENT_PERIOD_ONE_WEEK = 'ONE_WEEK'
INVESTMENT_PERIOD_TWO_WEEKS = 'TWO_WEEKS'
INVESTMENT_PERIOD_ONE_MONTH = 'ONE_MONTH'

INVESTMENT_PERIODS = (
    (INVESTMENT_PERIOD_ONE_WEEK, _('One week')),
    (INVESTMENT_PERIOD_TWO_WEEKS, _('Two weeks')),
    (INVESTMENT_PERIOD_ONE_MONTH, _('One month')),
)

# period -> (interest rate, duration in days)
INVESTMENT_PLANS = {
    INVESTMENT_PERIOD_ONE_WEEK: (Decimal('0.04'), 7),
    INVESTMENT_PERIOD_TWO_WEEKS: (Decimal('0.08'), 14),
    INVESTMENT_PERIOD_ONE_MONTH: (Decimal('0.16'), 30),
}

INVESTMENT_STATUS_ACTIVE = 'ACTIVE'
INVESTMENT_STATUS_WITHDRAWN = 'WITHDRAWN'

INVESTMENT_STATUSES = (
    (INVESTMENT_STATUS_ACTIVE, _('Active')),
    (INVESTMENT_STATUS_WITHDRAWN, _('Withdrawn')),
)


# ==========================================
# WATCH-TO-EARN LEVELS
# ==========================================

EARNING_LEVELS = (
    {'level': 1, 'name': 'Free Starter', 'videos_per_day': 5, 'earnings_per_video': Decimal('2'), 'activation_fee': Decimal('0')},
    {'level': 2, 'name': 'Bronze', 'videos_per_day': 5, 'earnings_per_video': Decimal('4'), 'activation_fee': Decimal('500')},
    {'level': 3, 'name': 'Silver', 'videos_per_day': 5, 'earnings_per_video': Decimal('8'), 'activation_fee': Decimal('1000')},
    {'level': 4, 'name': 'Gold', 'videos_per_day': 5, 'earnings_per_video': Decimal('20'), 'activation_fee': Decimal('2800')},
    {'level': 5, 'name': 'Platinum', 'videos_per_day': 5, 'earnings_per_video': Decimal('30'), 'activation_fee': Decimal('6800')},
)

MIN_LEVEL = 1
MAX_LEVEL = 5


# ==========================================
# CONTENT
# ==========================================

ARTICLE_STATUS_PENDING = 'PENDING'
ARTICLE_STATUS_APPROVED = 'APPROVED'
ARTICLE_STATUS_REJECTED = 'REJECTED'

ARTICLE_STATUSES = (
    (ARTICLE_STATUS_PENDING, _('Pending')),
    (ARTICLE_STATUS_APPROVED, _('Approved')),
    (ARTICLE_STATUS_REJECTED, _('Rejected')),
)

MODERATION_STATUSES = (
    (ARTICLE_STATUS_APPROVED, _('Approved')),
    (ARTICLE_STATUS_REJECTED, _('Rejected')),
)

SETTING_KEY_CPC = 'CPC'


# ==========================================
# ACCOUNTS
# ==========================================

ROLE_USER = 'USER'
ROLE_ADMIN = 'ADMIN'
ROLE_SUPERADMIN = 'SUPERADMIN'

USER_ROLES = (
    (ROLE_USER, _('User')),
    (ROLE_ADMIN, _('Admin')),
    (ROLE_SUPERADMIN, _('Super admin')),
)

ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPERADMIN)

REFERRAL_CODE_LENGTH = 8


# ==========================================
# WEBHOOKS
# ==========================================

WEBHOOK_EVENT_STK_CALLBACK = 'stk_callback'
WEBHOOK_EVENT_B2C_CALLBACK = 'b2c_callback'

WEBHOOK_EVENTS = (
    (WEBHOOK_EVENT_STK_CALLBACK, _('STK push callback')),
    (WEBHOOK_EVENT_B2C_CALLBACK, _('B2C payout callback')),
)

PAYHERO_SUCCESS_STATUS = 'Success'
PAYHERO_SUCCESS_RESULT_CODE = 0
