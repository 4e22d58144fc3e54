"""
Payment Service - M-Pesa STK push deposits and course purchases
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Any

from django.utils.translation import gettext_lazy as _

from creatorpay.models import Wallet, Course, CourseEnrollment
from creatorpay.exceptions import InvalidAmount, EnrollmentError
from creatorpay.constants import (
    TRANSACTION_TYPE_DEPOSIT,
    TRANSACTION_TYPE_COURSE_PAYMENT,
    TRANSACTION_STATUS_PENDING,
)
from creatorpay.services.payhero_service import PayHeroService
from creatorpay.services.transaction_service import TransactionService
from creatorpay.services.course_service import CourseService
from creatorpay.utils.id_generators import generate_deposit_reference, generate_course_reference
from creatorpay.utils.phone import normalize_phone


logger = logging.getLogger(__name__)


class PaymentService:
    """
    Starts payments that complete later through a PayHero callback.

    The STK push is sent first; the PENDING transaction is only recorded
    once PayHero has accepted the request, so a gateway failure leaves no
    trace in the ledger.
    """

    def __init__(self):
        self.payhero = PayHeroService()
        self.transaction_service = TransactionService()
        self.course_service = CourseService()

    @staticmethod
    def _positive_amount(amount) -> Decimal:
        try:
            value = Decimal(str(getattr(amount, 'amount', amount)))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmount(amount)
        if not value.is_finite() or value <= 0:
            raise InvalidAmount(amount)
        return value

    def _push(self, amount, phone_number, reference):
        """Send the STK push and pull the identifiers out of the reply"""
        result = self.payhero.initiate_stk_push(
            amount=amount,
            phone_number=phone_number,
            reference=reference
        )
        checkout_request_id = result.get('CheckoutRequestID')
        return result, checkout_request_id, result.get('MerchantRequestID')

    # ==========================================
    # DEPOSITS
    # ==========================================

    def initiate_deposit(self, wallet: Wallet, amount, phone_number: str) -> Dict[str, Any]:
        """
        Prompt the user's phone to pay ``amount`` into the wallet

        Args:
            wallet: Wallet to credit once PayHero confirms
            amount: Amount in KES
            phone_number: M-Pesa number in any accepted form

        Returns:
            dict: success, message, transactionId, checkoutRequestId, status

        Raises:
            InvalidAmount: If amount is not positive
            InvalidPhoneNumber: If the phone number is missing or invalid
            PaymentGatewayError: If PayHero refuses the request
        """
        amount = self._positive_amount(amount)
        phone = normalize_phone(phone_number)
        external_reference = generate_deposit_reference(wallet.user_id)

        logger.info(f"Initiating deposit of {amount} for wallet {wallet.id}, reference={external_reference}")

        result, checkout_request_id, merchant_request_id = self._push(amount, phone, external_reference)

        txn = self.transaction_service.create_transaction(
            wallet=wallet,
            amount=amount,
            transaction_type=TRANSACTION_TYPE_DEPOSIT,
            status=TRANSACTION_STATUS_PENDING,
            reference=checkout_request_id or external_reference,
            description=_("M-Pesa deposit"),
            metadata={'external_reference': external_reference, 'phone': phone},
            checkout_request_id=checkout_request_id,
            merchant_request_id=merchant_request_id,
            phone_number=phone,
            gateway_response=result,
        )

        return {
            'success': True,
            'message': _("STK push sent. Enter your M-Pesa PIN to complete the deposit."),
            'transactionId': str(txn.id),
            'checkoutRequestId': checkout_request_id,
            'status': txn.status,
        }

    # ==========================================
    # COURSE PAYMENTS
    # ==========================================

    def initiate_course_payment(self, user, course: Course, phone_number: str = None) -> Dict[str, Any]:
        """
        Enroll ``user`` in ``course``, charging over M-Pesa when it is paid

        Free courses are enrolled right away. Paid courses create a PENDING
        COURSE_PAYMENT transaction; enrollment follows the success callback.

        Raises:
            EnrollmentError: If the user is already enrolled or the course is unpublished
            InvalidPhoneNumber: If a paid course is bought without a valid phone
            PaymentGatewayError: If PayHero refuses the request
        """
        if not course.is_published:
            raise EnrollmentError(_("Course is not available"))

        if not course.requires_payment:
            enrollment, _created = self.course_service.enroll(user, course)
            return {'success': True, 'enrolled': True, 'enrollmentId': str(enrollment.id)}

        if CourseEnrollment.objects.filter(user=user, course=course).exists():
            raise EnrollmentError(_("Already enrolled in this course"))

        phone = normalize_phone(phone_number)
        wallet, _created = Wallet.objects.get_or_create(user=user)
        amount = course.price.amount
        external_reference = generate_course_reference(user.pk)

        logger.info(f"Initiating course payment of {amount} for course {course.id} by user {user.pk}")

        result, checkout_request_id, merchant_request_id = self._push(amount, phone, external_reference)

        txn = self.transaction_service.create_transaction(
            wallet=wallet,
            amount=amount,
            transaction_type=TRANSACTION_TYPE_COURSE_PAYMENT,
            status=TRANSACTION_STATUS_PENDING,
            reference=checkout_request_id or external_reference,
            description=_("Course payment: {title}").format(title=course.title),
            metadata={'courseId': str(course.id), 'external_reference': external_reference, 'phone': phone},
            checkout_request_id=checkout_request_id,
            merchant_request_id=merchant_request_id,
            phone_number=phone,
            gateway_response=result,
        )

        return {
            'success': True,
            'enrolled': False,
            'message': _("STK push sent. Enter your M-Pesa PIN to complete the payment."),
            'transactionId': str(txn.id),
            'checkoutRequestId': checkout_request_id,
            'status': txn.status,
        }
