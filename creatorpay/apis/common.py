"""
Helpers shared by the CreatorPay API views
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response

from creatorpay.exceptions import (
    CreatorPayError,
    WalletLocked,
    PaymentGatewayError,
    PaymentGatewayConfigurationError,
)


logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Get client IP from request"""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


def get_user_agent(request: Request) -> str:
    return request.META.get('HTTP_USER_AGENT', '')


def build_error_response(message: str, status_code: int) -> Response:
    """Build standardized error response"""
    return Response(
        {'detail': str(message)},
        status=status_code
    )


def service_error_response(exc: Exception, operation: str) -> Response:
    """
    Translate an exception raised by a service into an API response

    Args:
        exc: The exception
        operation: Short name of what was attempted, used in logs

    Returns:
        Response: 403 for locked wallets and ownership failures, 404 for
        missing rows, 502 for PayHero failures, 400 for other business
        rule errors and 500 for anything unexpected
    """
    if isinstance(exc, WalletLocked):
        logger.warning(f"{operation} refused, wallet locked: {str(exc)}")
        return build_error_response(str(exc), status.HTTP_403_FORBIDDEN)

    if isinstance(exc, PermissionError):
        return build_error_response(str(exc), status.HTTP_403_FORBIDDEN)

    if isinstance(exc, (PaymentGatewayError, PaymentGatewayConfigurationError)):
        logger.error(f"{operation} failed at the payment gateway: {str(exc)}")
        return build_error_response(str(exc), status.HTTP_502_BAD_GATEWAY)

    if isinstance(exc, ObjectDoesNotExist):
        return build_error_response(str(exc) or _("Not found"), status.HTTP_404_NOT_FOUND)

    if isinstance(exc, CreatorPayError):
        logger.info(f"{operation} rejected: {str(exc)}")
        return build_error_response(str(exc), status.HTTP_400_BAD_REQUEST)

    logger.error(f"Unexpected error during {operation}: {str(exc)}", exc_info=True)
    return build_error_response(
        _("An unexpected error occurred. Please try again later."),
        status.HTTP_500_INTERNAL_SERVER_ERROR
    )
