import hmac
import hashlib
import logging
import requests
from decimal import Decimal

from creatorpay.settings import get_creatorpay_setting
from creatorpay.exceptions import (
    PaymentGatewayError,
    MerchantAccountInactive,
    PaymentGatewayConfigurationError,
)
from creatorpay.utils.log_sanitizer import mask_sensitive_data


logger = logging.getLogger(__name__)


MANUAL_PROCESSING = 'MANUAL_PROCESSING'


class PayHeroService:
    """
    Client for the PayHero v2 API (M-Pesa STK push and status checks)
    """
    REQUIRED_SETTINGS = (
        ('PAYHERO_API_KEY', 'api_key'),
        ('PAYHERO_CHANNEL_ID', 'channel_id'),
        ('PAYHERO_TILL_NUMBER', 'till_number'),
    )

    def __init__(self):
        self.api_url = get_creatorpay_setting('PAYHERO_API_URL').rstrip('/')
        self.api_key = get_creatorpay_setting('PAYHERO_API_KEY')
        self.channel_id = get_creatorpay_setting('PAYHERO_CHANNEL_ID')
        self.till_number = get_creatorpay_setting('PAYHERO_TILL_NUMBER')
        self.webhook_secret = get_creatorpay_setting('PAYHERO_WEBHOOK_SECRET')
        self.provider = get_creatorpay_setting('PAYHERO_PROVIDER')
        self.customer_name = get_creatorpay_setting('PAYHERO_CUSTOMER_NAME')
        self.timeout = get_creatorpay_setting('PAYHERO_TIMEOUT')

    @property
    def callback_url(self):
        base = get_creatorpay_setting('CALLBACK_BASE_URL').rstrip('/')
        return f"{base}/api/webhooks/payhero/"

    def ensure_configured(self):
        """
        Raises:
            PaymentGatewayConfigurationError: If credentials are missing
        """
        missing = [name for name, attr in self.REQUIRED_SETTINGS if not getattr(self, attr)]
        if missing:
            logger.error(f"PayHero is not configured, missing: {', '.join(missing)}")
            raise PaymentGatewayConfigurationError(missing)

    def _get_headers(self):
        return {
            'Authorization': f'Basic {self.api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }

    def _make_request(self, method, endpoint, **kwargs):
        """
        Make a request to the PayHero API

        Args:
            method (str): HTTP method
            endpoint (str): Path relative to the API root
            **kwargs: Passed through to ``requests.request``

        Returns:
            dict: Decoded JSON body

        Raises:
            MerchantAccountInactive: If PayHero reports an inactive account
            PaymentGatewayError: On network errors, invalid JSON or non-2xx
        """
        self.ensure_configured()
        url = f"{self.api_url}/{endpoint.lstrip('/')}"

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._get_headers(),
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"PayHero {method} {endpoint} failed: {str(e)}")
            raise PaymentGatewayError(message="Network error connecting to PayHero")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"PayHero returned a non-JSON body (status {response.status_code})")
            raise PaymentGatewayError(
                message="Invalid response from PayHero",
                status_code=response.status_code,
                response=getattr(response, 'text', None)
            )

        if not 200 <= response.status_code < 300:
            data = data if isinstance(data, dict) else {}
            error_code = data.get('error_code')
            error_message = data.get('error_message') or ''

            if error_code == 'PERMISSION_DENIED' and 'Inactive' in error_message:
                logger.error("PayHero merchant account is inactive")
                raise MerchantAccountInactive(status_code=response.status_code, response=data)

            message = data.get('message') or error_message or f"HTTP {response.status_code}"
            logger.error(
                f"PayHero {method} {endpoint} returned {response.status_code}: "
                f"{mask_sensitive_data(data)}"
            )
            raise PaymentGatewayError(
                message=message,
                status_code=response.status_code,
                response=data,
                error_code=error_code
            )

        return data

    @staticmethod
    def _gateway_amount(amount):
        amount = Decimal(str(getattr(amount, 'amount', amount)))
        if amount == amount.to_integral_value():
            return int(amount)
        return float(amount)

    # ---------- Payments ----------

    def initiate_stk_push(self, amount, phone_number, reference):
        """
        Send an M-Pesa STK push prompt to ``phone_number``

        Args:
            amount: Amount in KES (Decimal, int or Money)
            phone_number (str): Normalized ``2547XXXXXXXX`` number
            reference (str): External reference echoed back in the callback

        Returns:
            dict: PayHero response, including ``CheckoutRequestID``
        """
        self.ensure_configured()
        payload = {
            'amount': self._gateway_amount(amount),
            'phone_number': phone_number,
            'channel_id': int(self.channel_id),
            'provider': self.provider,
            'external_reference': reference,
            'customer_name': self.customer_name,
            'callback_url': self.callback_url,
        }

        logger.info(f"Initiating PayHero STK push: {mask_sensitive_data(payload)}")
        result = self._make_request('POST', 'payments', json=payload)
        logger.info(
            f"STK push accepted for {reference}: "
            f"checkout_request_id={result.get('CheckoutRequestID')}, status={result.get('status')}"
        )
        return result

    def get_transaction_status(self, reference):
        """Query PayHero for the state of a payment"""
        return self._make_request('GET', 'transaction-status', params={'reference': reference})

    def initiate_withdrawal(self, amount, phone_number, reference, description=None):
        """
        Register a payout. Payouts are sent by an operator, so nothing is
        sent to PayHero here.
        """
        logger.info(
            f"Withdrawal {reference} queued for manual processing: "
            f"{mask_sensitive_data({'amount': str(amount), 'phone_number': phone_number})}"
        )
        return {
            'success': True,
            'status': MANUAL_PROCESSING,
            'reference': reference,
            'message': 'Withdrawal request submitted for manual processing',
            'requires_manual_approval': True,
        }

    # ---------- Webhooks ----------

    def verify_webhook_signature(self, body, signature, timestamp):
        """
        Check an HMAC-SHA256 hex signature over ``"{timestamp}.{body}"``

        Returns True when no webhook secret is configured.
        """
        if not self.webhook_secret:
            return True

        if isinstance(body, bytes):
            body = body.decode('utf-8')

        expected = hmac.new(
            key=self.webhook_secret.encode('utf-8'),
            msg=f"{timestamp}.{body}".encode('utf-8'),
            digestmod=hashlib.sha256
        ).hexdigest()

        return hmac.compare_digest(expected, signature or '')
