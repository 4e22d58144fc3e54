from django.utils.translation import gettext_lazy as _


class CreatorPayError(Exception):
    """Base exception for all creatorpay related errors"""
    pass


class InsufficientFunds(CreatorPayError):
    """Exception raised when a wallet has insufficient funds for a transaction"""
    def __init__(self, wallet=None, amount=None):
        message = _("Insufficient balance")
        if wallet and amount:
            message = _("Insufficient balance in wallet: {wallet}. Available balance: {balance}, Required amount: {amount}").format(
                wallet=wallet.id,
                balance=wallet.balance,
                amount=amount
            )
        super().__init__(message)


class InsufficientEarnings(CreatorPayError):
    """Exception raised when earnings cannot cover a transfer"""
    def __init__(self, message=None):
        super().__init__(message or _("Insufficient earnings"))


class WalletLocked(CreatorPayError):
    """Exception raised when a wallet is locked"""
    def __init__(self, wallet=None):
        message = _("Wallet is locked")

        if wallet:
            try:
                wallet_id = wallet.id
                message = _("Wallet {wallet} is locked").format(wallet=wallet_id)
            except AttributeError:
                message = str(wallet)

        super().__init__(message)


class CurrencyMismatchError(CreatorPayError):
    """Raised when currencies don't match"""
    pass


class InvalidAmount(CreatorPayError):
    """Exception raised when an invalid amount is provided"""
    def __init__(self, amount=None):
        message = _("Invalid amount")
        if amount is not None:
            message = _("Invalid amount: {amount}").format(amount=amount)
        super().__init__(message)


class InvalidPhoneNumber(CreatorPayError):
    """Exception raised when a phone number cannot be used for M-Pesa"""
    def __init__(self, phone_number=None):
        message = _("Phone number is required")
        if phone_number:
            message = _("Invalid phone number: {phone}. Use 07XXXXXXXX or 2547XXXXXXXX").format(
                phone=phone_number
            )
        super().__init__(message)


class TransactionFailed(CreatorPayError):
    """Exception raised when a transaction fails"""
    def __init__(self, reason=None, transaction_id=None):
        message = _("Transaction failed")
        if reason:
            message = _("Transaction failed: {reason}").format(reason=reason)
        if transaction_id:
            message = _("{message} (Transaction ID: {transaction_id})").format(
                message=message,
                transaction_id=transaction_id
            )
        super().__init__(message)


class PaymentGatewayError(CreatorPayError):
    """Exception raised when a PayHero API call fails"""
    def __init__(self, message=None, status_code=None, response=None, error_code=None):
        msg = _("Payment gateway error")
        if message:
            msg = _("Payment gateway error: {message}").format(message=message)
        if status_code:
            msg = _("{msg} (Status code: {status_code})").format(msg=msg, status_code=status_code)
        super().__init__(msg)
        self.response = response
        self.status_code = status_code
        self.error_code = error_code


class MerchantAccountInactive(PaymentGatewayError):
    """Exception raised when PayHero reports the merchant account as inactive"""
    def __init__(self, status_code=None, response=None):
        super().__init__(
            message=_("PayHero merchant account is inactive. Please contact PayHero support to activate your account."),
            status_code=status_code,
            response=response,
            error_code='PERMISSION_DENIED'
        )


class PaymentGatewayConfigurationError(CreatorPayError):
    """Exception raised when required PayHero credentials are missing"""
    def __init__(self, missing=None):
        message = _("Payment gateway is not configured")
        if missing:
            message = _("Missing required PayHero settings: {missing}").format(
                missing=', '.join(missing)
            )
        super().__init__(message)
        self.missing = missing or []


class InvalidWebhookSignature(CreatorPayError):
    """Exception raised when a webhook signature is invalid"""
    def __init__(self, message=None):
        super().__init__(message or _("Invalid webhook signature"))


class WebhookPayloadError(CreatorPayError):
    """Exception raised when a webhook body cannot be used"""
    def __init__(self, message=None):
        super().__init__(message or _("Invalid webhook payload"))


class WithdrawalError(CreatorPayError):
    """Exception raised when there is an error with a withdrawal"""
    def __init__(self, message=None, withdrawal_id=None):
        msg = message or _("Withdrawal error")
        if withdrawal_id:
            msg = _("{msg} (Withdrawal ID: {withdrawal_id})").format(msg=msg, withdrawal_id=withdrawal_id)
        super().__init__(msg)


class InvestmentError(CreatorPayError):
    """Exception raised when an investment cannot be created or withdrawn"""
    def __init__(self, message=None):
        super().__init__(message or _("Investment error"))


class RewardError(CreatorPayError):
    """Exception raised when a video reward or level upgrade is refused"""
    def __init__(self, message=None):
        super().__init__(message or _("Reward error"))


class ArticleError(CreatorPayError):
    """Exception raised when an article operation is refused"""
    def __init__(self, message=None):
        super().__init__(message or _("Article error"))


class EnrollmentError(CreatorPayError):
    """Exception raised when a course enrollment is refused"""
    def __init__(self, message=None):
        super().__init__(message or _("Enrollment error"))
