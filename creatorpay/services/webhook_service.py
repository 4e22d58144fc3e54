"""
Webhook Service for PayHero callbacks

Every callback is stored as a WebhookEvent before it is applied, then
reconciled against the matching Transaction inside one database
transaction. Callbacks for transactions that already reached COMPLETED or
FAILED are recorded and otherwise ignored, so PayHero retries can never
credit or refund twice.
"""
import json
import logging
from typing import Optional, Dict, Any

from django.db import transaction as db_transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Wallet, Transaction, Withdrawal, WebhookEvent
from creatorpay.exceptions import InvalidWebhookSignature, WebhookPayloadError
from creatorpay.constants import (
    TRANSACTION_TYPE_DEPOSIT,
    TRANSACTION_TYPE_WITHDRAWAL,
    TRANSACTION_TYPE_COURSE_PAYMENT,
    WITHDRAWAL_STATUS_PAID,
    WITHDRAWAL_STATUS_REJECTED,
    WEBHOOK_EVENT_STK_CALLBACK,
    WEBHOOK_EVENT_B2C_CALLBACK,
    PAYHERO_SUCCESS_STATUS,
    PAYHERO_SUCCESS_RESULT_CODE,
)
from creatorpay.services.payhero_service import PayHeroService
from creatorpay.services.course_service import CourseService
from creatorpay.services.withdrawal_service import WithdrawalService
from creatorpay.utils.log_sanitizer import mask_sensitive_data


logger = logging.getLogger(__name__)


def _is_success(result: Dict[str, Any]) -> bool:
    try:
        result_code = int(result.get('ResultCode'))
    except (TypeError, ValueError):
        return False
    return result_code == PAYHERO_SUCCESS_RESULT_CODE and result.get('Status') == PAYHERO_SUCCESS_STATUS


class WebhookService:
    """
    Service for verifying, storing and applying PayHero callbacks
    """

    def __init__(self):
        self.payhero = PayHeroService()
        self.course_service = CourseService()
        self.withdrawal_service = WithdrawalService()

    # ==================== Parsing ====================

    def _verify(self, raw_body, signature: Optional[str], timestamp: Optional[str]) -> bool:
        """
        Check the signature when PayHero sent one

        Returns:
            bool: True only if a signature was checked against a configured secret

        Raises:
            InvalidWebhookSignature: If a signature is present but wrong
        """
        if not signature or not timestamp:
            return False

        if not self.payhero.verify_webhook_signature(raw_body, signature, timestamp):
            logger.error("PayHero webhook signature verification failed")
            raise InvalidWebhookSignature()
        return bool(self.payhero.webhook_secret)

    @staticmethod
    def _parse(raw_body) -> Dict[str, Any]:
        """
        Raises:
            WebhookPayloadError: If the body is not a JSON object
        """
        try:
            if isinstance(raw_body, bytes):
                raw_body = raw_body.decode('utf-8')
            payload = json.loads(raw_body)
        except (UnicodeDecodeError, ValueError) as e:
            logger.error(f"Invalid webhook JSON payload: {str(e)}")
            raise WebhookPayloadError(_("Invalid JSON payload"))

        if not isinstance(payload, dict):
            raise WebhookPayloadError(_("Webhook payload must be a JSON object"))
        return payload

    @staticmethod
    def _result(payload: Dict[str, Any]) -> Dict[str, Any]:
        result = payload.get('response')
        return result if isinstance(result, dict) else payload

    # ==================== Entry points ====================

    def process_stk_callback(self, raw_body, signature=None, timestamp=None) -> WebhookEvent:
        """
        Apply an STK push result

        Raises:
            InvalidWebhookSignature: Bad signature
            WebhookPayloadError: Bad JSON or missing CheckoutRequestID
            Transaction.DoesNotExist: No transaction matches the checkout id
        """
        verified = self._verify(raw_body, signature, timestamp)
        payload = self._parse(raw_body)
        result = self._result(payload)

        checkout_request_id = result.get('CheckoutRequestID')
        if not checkout_request_id:
            logger.error(f"STK callback without CheckoutRequestID: {mask_sensitive_data(payload)}")
            raise WebhookPayloadError(_("Missing CheckoutRequestID"))

        event = WebhookEvent.objects.create(
            event_type=WEBHOOK_EVENT_STK_CALLBACK,
            payload=payload,
            reference=checkout_request_id,
            signature=signature,
            signature_verified=verified,
            is_valid=True
        )
        logger.info(
            f"Received STK callback {event.id}: checkout_request_id={checkout_request_id}, "
            f"result_code={result.get('ResultCode')}"
        )

        self._run(event, self._apply_stk_result)
        return event

    def process_b2c_callback(self, raw_body, signature=None, timestamp=None) -> WebhookEvent:
        """
        Apply a payout result

        Raises:
            InvalidWebhookSignature: Bad signature
            WebhookPayloadError: Bad JSON or missing ExternalReference
            Transaction.DoesNotExist: No withdrawal transaction has that reference
        """
        verified = self._verify(raw_body, signature, timestamp)
        payload = self._parse(raw_body)
        result = self._result(payload)

        reference = result.get('ExternalReference')
        if not reference:
            logger.error(f"B2C callback without ExternalReference: {mask_sensitive_data(payload)}")
            raise WebhookPayloadError(_("Missing ExternalReference"))

        event = WebhookEvent.objects.create(
            event_type=WEBHOOK_EVENT_B2C_CALLBACK,
            payload=payload,
            reference=reference,
            signature=signature,
            signature_verified=verified,
            is_valid=True
        )
        logger.info(f"Received B2C callback {event.id}: reference={reference}")

        self._run(event, self._apply_b2c_result)
        return event

    def reprocess_event(self, event: WebhookEvent) -> WebhookEvent:
        """Re-run a stored event without signature checks"""
        handlers = {
            WEBHOOK_EVENT_STK_CALLBACK: self._apply_stk_result,
            WEBHOOK_EVENT_B2C_CALLBACK: self._apply_b2c_result,
        }
        handler = handlers.get(event.event_type)
        if handler is None:
            raise WebhookPayloadError(_("Unknown event type: {type}").format(type=event.event_type))

        event.processed = False
        event.processed_at = None
        event.processing_error = None
        event.save(update_fields=['processed', 'processed_at', 'processing_error', 'updated_at'])

        self._run(event, handler)
        return event

    def reprocess_webhook_event(self, event_id) -> WebhookEvent:
        return self.reprocess_event(WebhookEvent.objects.get(pk=event_id))

    def reprocess_unprocessed(self, limit: Optional[int] = None) -> Dict[str, int]:
        """Retry stored events that never applied, oldest first"""
        events = WebhookEvent.objects.unprocessed().order_by('created_at')
        if limit:
            events = events[:limit]

        stats = {'processed': 0, 'failed': 0}
        for event in events:
            try:
                self.reprocess_event(event)
                stats['processed'] += 1
            except Exception as e:
                stats['failed'] += 1
                logger.error(f"Reprocessing webhook event {event.id} failed: {str(e)}", exc_info=True)
        return stats

    # ==================== Application ====================

    def _run(self, event: WebhookEvent, handler) -> None:
        """
        Apply ``handler`` atomically. The event row itself survives a
        failure with the error recorded, so it can be retried.
        """
        try:
            with db_transaction.atomic():
                handler(event, self._result(event.payload))
                event.processed = True
                event.processed_at = timezone.now()
                event.save(update_fields=['processed', 'processed_at', 'transaction', 'updated_at'])
        except Exception as e:
            event.processing_error = str(e)
            event.save(update_fields=['processing_error', 'updated_at'])
            raise

    def _apply_stk_result(self, event: WebhookEvent, result: Dict[str, Any]) -> None:
        checkout_request_id = result.get('CheckoutRequestID')
        txn = (
            Transaction.objects.get_queryset()
            .select_for_update()
            .matching_checkout(checkout_request_id)
            .first()
        )
        if txn is None:
            logger.error(f"No transaction found for CheckoutRequestID {checkout_request_id}")
            raise Transaction.DoesNotExist(
                f"No transaction found for CheckoutRequestID {checkout_request_id}"
            )

        event.transaction = txn

        if txn.is_final:
            logger.info(f"Transaction {txn.id} already {txn.status}, ignoring duplicate callback")
            return

        if _is_success(result):
            self._complete_stk_payment(txn, result, event.payload)
        else:
            self._fail_stk_payment(txn, result, event.payload)

    def _complete_stk_payment(self, txn: Transaction, result: Dict[str, Any], payload) -> None:
        receipt = result.get('MpesaReceiptNumber')
        update_fields = ['updated_at']

        if receipt and not Transaction.objects.filter(reference=receipt).exclude(pk=txn.pk).exists():
            txn.reference = receipt
            update_fields.append('reference')
        if result.get('MerchantRequestID'):
            txn.merchant_request_id = result['MerchantRequestID']
            update_fields.append('merchant_request_id')
        if not txn.checkout_request_id:
            txn.checkout_request_id = result.get('CheckoutRequestID')
            update_fields.append('checkout_request_id')

        txn.save(update_fields=update_fields)
        txn.mark_as_completed(provider_reference=receipt, gateway_data=payload)

        if txn.transaction_type == TRANSACTION_TYPE_DEPOSIT:
            wallet = Wallet.objects.for_update(txn.wallet_id)
            wallet.credit(txn.amount)
            logger.info(f"Deposit {txn.id} completed, credited {txn.amount} to wallet {wallet.id}")

        elif txn.transaction_type == TRANSACTION_TYPE_COURSE_PAYMENT:
            course_id = (txn.metadata or {}).get('courseId')
            if course_id:
                self.course_service.enroll_by_id(txn.wallet.user, course_id)
            else:
                logger.error(f"Course payment {txn.id} completed without a courseId in metadata")

        elif txn.transaction_type == TRANSACTION_TYPE_WITHDRAWAL:
            self._close_withdrawal(txn, WITHDRAWAL_STATUS_PAID)
            logger.info(f"Withdrawal transaction {txn.id} confirmed via STK callback")

        else:
            logger.info(f"{txn.transaction_type} transaction {txn.id} completed via STK callback")

    def _fail_stk_payment(self, txn: Transaction, result: Dict[str, Any], payload) -> None:
        reason = result.get('ResultDesc') or _("Payment failed")
        txn.mark_as_failed(reason=reason, gateway_data=payload)
        logger.info(f"{txn.transaction_type} transaction {txn.id} failed: {reason}")

        if txn.transaction_type == TRANSACTION_TYPE_WITHDRAWAL:
            self.withdrawal_service.refund_to_wallet(
                wallet_id=txn.wallet_id,
                amount=txn.amount,
                user_id=txn.wallet.user_id,
                related=txn,
                description=f"Withdrawal failed - {reason}"
            )
            self._close_withdrawal(txn, WITHDRAWAL_STATUS_REJECTED, note=reason)

    @staticmethod
    def _close_withdrawal(txn: Transaction, status: str, note=None) -> Optional[Withdrawal]:
        """Move the withdrawal linked to ``txn`` to its terminal status"""
        withdrawal = Withdrawal.objects.select_for_update().filter(transaction=txn).first()
        if withdrawal is None:
            return None

        withdrawal.status = status
        if note:
            withdrawal.note = str(note)
        withdrawal.save()
        return withdrawal

    def _apply_b2c_result(self, event: WebhookEvent, result: Dict[str, Any]) -> None:
        reference = result.get('ExternalReference')
        txn = (
            Transaction.objects.get_queryset()
            .select_for_update()
            .filter(reference=reference, transaction_type=TRANSACTION_TYPE_WITHDRAWAL)
            .first()
        )
        if txn is None:
            logger.error(f"No withdrawal transaction found for reference {reference}")
            raise Transaction.DoesNotExist(f"No withdrawal transaction found for reference {reference}")

        event.transaction = txn

        if txn.is_final:
            logger.info(f"Withdrawal transaction {txn.id} already {txn.status}, ignoring duplicate callback")
            return

        if _is_success(result):
            txn.mark_as_completed(provider_reference=result.get('TransactionID'), gateway_data=event.payload)
            self._close_withdrawal(txn, WITHDRAWAL_STATUS_PAID)
            logger.info(f"Payout {reference} confirmed by PayHero")
            return

        reason = result.get('ResultDesc') or _("Payout failed")
        txn.mark_as_failed(reason=reason, gateway_data=event.payload)
        self.withdrawal_service.refund_to_wallet(
            wallet_id=txn.wallet_id,
            amount=txn.amount,
            user_id=txn.wallet.user_id,
            related=txn,
            description=f"Withdrawal failed - {reason}"
        )
        self._close_withdrawal(txn, WITHDRAWAL_STATUS_REJECTED, note=reason)
        logger.info(f"Payout {reference} failed and was refunded: {reason}")
