"""
Test cases for PayHeroService
All HTTP calls are mocked at requests.request
"""
import hmac
import hashlib
from decimal import Decimal
from unittest.mock import Mock, patch

import requests
from django.test import TestCase

from creatorpay.services.payhero_service import PayHeroService
from creatorpay.exceptions import (
    PaymentGatewayError,
    MerchantAccountInactive,
    PaymentGatewayConfigurationError,
)


def mock_response(status_code=200, json_data=None, json_error=None):
    response = Mock()
    response.status_code = status_code
    response.text = str(json_data)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


class PayHeroServiceTestCase(TestCase):
    """Test case for PayHeroService"""

    def setUp(self):
        self.service = PayHeroService()
        self.service.api_url = 'https://payhero.test/api/v2'
        self.service.api_key = 'dGVzdDp0ZXN0'
        self.service.channel_id = '911'
        self.service.till_number = '123456'
        self.service.webhook_secret = 'whsec_test'


class ConfigurationTests(PayHeroServiceTestCase):

    def test_callback_url_points_at_webhook(self):
        self.assertTrue(self.service.callback_url.endswith('/api/webhooks/payhero/'))

    def test_missing_credentials_raise(self):
        self.service.api_key = ''
        self.service.channel_id = ''

        with self.assertRaises(PaymentGatewayConfigurationError) as ctx:
            self.service.ensure_configured()

        self.assertIn('PAYHERO_API_KEY', ctx.exception.missing)
        self.assertIn('PAYHERO_CHANNEL_ID', ctx.exception.missing)

    @patch('requests.request')
    def test_unconfigured_service_makes_no_request(self, mock_request):
        self.service.till_number = ''

        with self.assertRaises(PaymentGatewayConfigurationError):
            self.service.initiate_stk_push(100, '254712345678', 'DEPOSIT_1_1')

        mock_request.assert_not_called()


class StkPushTests(PayHeroServiceTestCase):

    @patch('requests.request')
    def test_initiate_stk_push_payload(self, mock_request):
        mock_request.return_value = mock_response(201, {
            'success': True,
            'status': 'QUEUED',
            'reference': 'E8UWT7CLUW',
            'CheckoutRequestID': 'ws_CO_15012024164321519708723462',
        })

        result = self.service.initiate_stk_push(
            amount=Decimal('500.00'),
            phone_number='254712345678',
            reference='DEPOSIT_1700000000000_1'
        )

        self.assertEqual(result['CheckoutRequestID'], 'ws_CO_15012024164321519708723462')

        kwargs = mock_request.call_args.kwargs
        self.assertEqual(kwargs['method'], 'POST')
        self.assertEqual(kwargs['url'], 'https://payhero.test/api/v2/payments')
        self.assertEqual(kwargs['headers']['Authorization'], 'Basic dGVzdDp0ZXN0')

        payload = kwargs['json']
        self.assertEqual(payload['amount'], 500)
        self.assertIsInstance(payload['amount'], int)
        self.assertEqual(payload['phone_number'], '254712345678')
        self.assertEqual(payload['channel_id'], 911)
        self.assertEqual(payload['provider'], 'm-pesa')
        self.assertEqual(payload['external_reference'], 'DEPOSIT_1700000000000_1')
        self.assertTrue(payload['callback_url'].endswith('/api/webhooks/payhero/'))

    @patch('requests.request')
    def test_fractional_amount_sent_as_float(self, mock_request):
        mock_request.return_value = mock_response(201, {'CheckoutRequestID': 'ws_CO_1'})

        self.service.initiate_stk_push(Decimal('99.50'), '254712345678', 'DEPOSIT_1_1')

        self.assertEqual(mock_request.call_args.kwargs['json']['amount'], 99.5)

    @patch('requests.request')
    def test_get_transaction_status(self, mock_request):
        mock_request.return_value = mock_response(200, {'status': 'SUCCESS'})

        result = self.service.get_transaction_status('E8UWT7CLUW')

        self.assertEqual(result['status'], 'SUCCESS')
        kwargs = mock_request.call_args.kwargs
        self.assertEqual(kwargs['method'], 'GET')
        self.assertEqual(kwargs['params'], {'reference': 'E8UWT7CLUW'})


class ErrorHandlingTests(PayHeroServiceTestCase):

    @patch('requests.request')
    def test_network_error(self, mock_request):
        mock_request.side_effect = requests.ConnectionError('connection refused')

        with self.assertRaises(PaymentGatewayError) as ctx:
            self.service.initiate_stk_push(100, '254712345678', 'DEPOSIT_1_1')

        self.assertIn('Network error connecting to PayHero', str(ctx.exception))

    @patch('requests.request')
    def test_invalid_json(self, mock_request):
        mock_request.return_value = mock_response(502, json_error=ValueError('No JSON'))

        with self.assertRaises(PaymentGatewayError) as ctx:
            self.service.initiate_stk_push(100, '254712345678', 'DEPOSIT_1_1')

        self.assertIn('Invalid response from PayHero', str(ctx.exception))
        self.assertEqual(ctx.exception.status_code, 502)

    @patch('requests.request')
    def test_inactive_merchant_account(self, mock_request):
        mock_request.return_value = mock_response(403, {
            'error_code': 'PERMISSION_DENIED',
            'error_message': 'Inactive account',
        })

        with self.assertRaises(MerchantAccountInactive) as ctx:
            self.service.initiate_stk_push(100, '254712345678', 'DEPOSIT_1_1')

        self.assertEqual(ctx.exception.error_code, 'PERMISSION_DENIED')

    @patch('requests.request')
    def test_api_error_carries_details(self, mock_request):
        mock_request.return_value = mock_response(400, {
            'error_code': 'BAD_REQUEST',
            'error_message': 'Invalid phone number',
        })

        with self.assertRaises(PaymentGatewayError) as ctx:
            self.service.initiate_stk_push(100, '254712345678', 'DEPOSIT_1_1')

        self.assertNotIsInstance(ctx.exception, MerchantAccountInactive)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.error_code, 'BAD_REQUEST')
        self.assertIn('Invalid phone number', str(ctx.exception))


class WithdrawalTests(PayHeroServiceTestCase):

    @patch('requests.request')
    def test_withdrawal_is_manual(self, mock_request):
        result = self.service.initiate_withdrawal(
            amount=Decimal('500'),
            phone_number='254712345678',
            reference='WITHDRAWAL_1_1'
        )

        mock_request.assert_not_called()
        self.assertTrue(result['success'])
        self.assertEqual(result['status'], 'MANUAL_PROCESSING')
        self.assertTrue(result['requires_manual_approval'])
        self.assertEqual(result['reference'], 'WITHDRAWAL_1_1')


class SignatureTests(PayHeroServiceTestCase):

    def _sign(self, body, timestamp):
        return hmac.new(
            b'whsec_test',
            f"{timestamp}.{body}".encode('utf-8'),
            hashlib.sha256
        ).hexdigest()

    def test_valid_signature(self):
        body = '{"status": true}'
        signature = self._sign(body, '1700000000')

        self.assertTrue(self.service.verify_webhook_signature(body, signature, '1700000000'))
        self.assertTrue(
            self.service.verify_webhook_signature(body.encode('utf-8'), signature, '1700000000')
        )

    def test_tampered_body(self):
        signature = self._sign('{"status": true}', '1700000000')

        self.assertFalse(
            self.service.verify_webhook_signature('{"status": false}', signature, '1700000000')
        )

    def test_wrong_timestamp(self):
        body = '{"status": true}'
        signature = self._sign(body, '1700000000')

        self.assertFalse(self.service.verify_webhook_signature(body, signature, '1700000001'))

    def test_no_secret_accepts_everything(self):
        self.service.webhook_secret = ''
        self.assertTrue(self.service.verify_webhook_signature('{}', 'garbage', '1'))
