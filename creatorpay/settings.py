from django.conf import settings
from django.utils.translation import gettext_lazy as _

# Default settings for the creatorpay app
CREATORPAY_SETTINGS = {
    # Primary Keys
    'USE_UUID': getattr(settings, 'CREATORPAY_USE_UUID', True),

    # User model where wallet, profile and level are attached
    'USER_MODEL': getattr(settings, 'AUTH_USER_MODEL', 'auth.User'),

    # Async Processing
    'USE_CELERY': getattr(settings, 'CREATORPAY_USE_CELERY', False),

    # PayHero Integration
    'PAYHERO_API_URL': getattr(settings, 'PAYHERO_API_URL', 'https://backend.payhero.co.ke/api/v2'),
    'PAYHERO_API_KEY': getattr(settings, 'PAYHERO_API_KEY', ''),
    'PAYHERO_CHANNEL_ID': getattr(settings, 'PAYHERO_CHANNEL_ID', ''),
    'PAYHERO_TILL_NUMBER': getattr(settings, 'PAYHERO_TILL_NUMBER', ''),
    'PAYHERO_WEBHOOK_SECRET': getattr(settings, 'PAYHERO_WEBHOOK_SECRET', ''),
    'PAYHERO_PROVIDER': getattr(settings, 'PAYHERO_PROVIDER', 'm-pesa'),
    'PAYHERO_CUSTOMER_NAME': getattr(settings, 'PAYHERO_CUSTOMER_NAME', 'Customer'),
    'PAYHERO_TIMEOUT': getattr(settings, 'PAYHERO_TIMEOUT', 30),

    # Public root used to build callback URLs handed to PayHero
    'CALLBACK_BASE_URL': getattr(settings, 'CREATORPAY_CALLBACK_BASE_URL', 'http://localhost:8000'),

    # Wallet Settings
    'CURRENCY': getattr(settings, 'CREATORPAY_CURRENCY', 'KES'),
    'AUTO_CREATE_WALLET': getattr(settings, 'CREATORPAY_AUTO_CREATE_WALLET', True),

    # Limits
    'MINIMUM_WITHDRAWAL': getattr(settings, 'CREATORPAY_MINIMUM_WITHDRAWAL', 100),
    'MINIMUM_INVESTMENT': getattr(settings, 'CREATORPAY_MINIMUM_INVESTMENT', 100),

    # Pending STK pushes older than this are expired
    'PENDING_PAYMENT_TIMEOUT_MINUTES': getattr(settings, 'CREATORPAY_PENDING_PAYMENT_TIMEOUT_MINUTES', 30),

    # Content monetization
    'DEFAULT_CPC': getattr(settings, 'CREATORPAY_DEFAULT_CPC', '0.05'),

    # Watch-to-earn day boundaries are computed in this timezone
    'REWARDS_TIMEZONE': getattr(settings, 'CREATORPAY_REWARDS_TIMEZONE', 'Africa/Nairobi'),

    # Export Settings
    'EXPORT_PAGESIZE': getattr(settings, 'CREATORPAY_EXPORT_PAGESIZE', 'A4'),
    'EXPORT_ORIENTATION': getattr(settings, 'CREATORPAY_EXPORT_ORIENTATION', 'portrait'),

    # Logging
    'MASK_SENSITIVE_LOGS': getattr(settings, 'CREATORPAY_MASK_SENSITIVE_LOGS', True),
}


def get_creatorpay_setting(name):
    """
    Helper function to get a specific creatorpay setting
    """
    if name not in CREATORPAY_SETTINGS:
        raise ValueError(f"Unknown setting: {name}")
    return CREATORPAY_SETTINGS[name]
