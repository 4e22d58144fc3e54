"""
Webhook API for CreatorPay

PayHero posts STK push results and payout (B2C) results here. Stored
events can be listed and reprocessed by admins.
"""

import logging
from rest_framework import status, viewsets, permissions
from rest_framework.decorators import api_view, permission_classes, authentication_classes, action
from rest_framework.response import Response
from django.utils.translation import gettext_lazy as _
from django.views.decorators.csrf import csrf_exempt
from django_filters.rest_framework import DjangoFilterBackend

from creatorpay.models import Transaction, WebhookEvent
from creatorpay.serializers.webhook_serializer import WebhookEventSerializer
from creatorpay.services.webhook_service import WebhookService
from creatorpay.exceptions import InvalidWebhookSignature, WebhookPayloadError
from creatorpay.permissions import IsPlatformAdmin
from creatorpay.apis.common import build_error_response, get_client_ip


logger = logging.getLogger(__name__)


SIGNATURE_HEADER = 'HTTP_X_PAYHERO_SIGNATURE'
TIMESTAMP_HEADER = 'HTTP_X_PAYHERO_TIMESTAMP'


def _handle_callback(request, processor, kind: str) -> Response:
    """
    Run ``processor`` on the raw body and map the outcome to the status
    codes PayHero acts on: 401 bad signature, 400 bad payload, 404 unknown
    transaction, 200 otherwise.
    """
    try:
        event = processor(
            request.body,
            signature=request.META.get(SIGNATURE_HEADER),
            timestamp=request.META.get(TIMESTAMP_HEADER),
        )

    except InvalidWebhookSignature:
        logger.error(f"Invalid {kind} webhook signature from IP: {get_client_ip(request)}")
        return build_error_response(_("Invalid webhook signature"), status.HTTP_401_UNAUTHORIZED)

    except WebhookPayloadError as e:
        logger.error(f"Invalid {kind} webhook payload: {str(e)}")
        return build_error_response(str(e), status.HTTP_400_BAD_REQUEST)

    except Transaction.DoesNotExist as e:
        logger.warning(f"{kind} webhook for unknown transaction: {str(e)}")
        return build_error_response(_("Transaction not found"), status.HTTP_404_NOT_FOUND)

    except Exception as e:
        logger.error(f"Unexpected error processing {kind} webhook: {str(e)}", exc_info=True)
        return build_error_response(
            _("Event received but processing failed"),
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.info(
        f"{kind} webhook processed: event_id={event.id}, reference={event.reference}"
    )
    return Response({'success': True}, status=status.HTTP_200_OK)


# ==================== PayHero Webhook Handlers ====================

@csrf_exempt
@api_view(['POST'])
@authentication_classes([])
@permission_classes([])  # No authentication required for webhooks
def payhero_webhook(request):
    """
    STK push result for deposits, course payments and withdrawals

    Request Headers:
        X-Payhero-Signature: hex HMAC-SHA256 of "{timestamp}.{body}" (optional)
        X-Payhero-Timestamp: timestamp used in the signature (optional)
    """
    return _handle_callback(request, WebhookService().process_stk_callback, 'STK')


@csrf_exempt
@api_view(['POST'])
@authentication_classes([])
@permission_classes([])
def payhero_b2c_webhook(request):
    """Payout result for a withdrawal, matched on ExternalReference"""
    return _handle_callback(request, WebhookService().process_b2c_callback, 'B2C')


# ==================== Webhook Event ViewSet ====================

class WebhookEventViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Stored PayHero callbacks, for admins

    List: GET /api/admin/webhook-events/?processed=false
    Reprocess: POST /api/admin/webhook-events/{id}/reprocess/
    """

    queryset = WebhookEvent.objects.select_related('transaction').order_by('-created_at')
    serializer_class = WebhookEventSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['event_type', 'processed', 'is_valid', 'signature_verified']

    @action(detail=True, methods=['post'])
    def reprocess(self, request, pk=None):
        event = self.get_object()

        try:
            event = WebhookService().reprocess_event(event)
        except Exception as e:
            logger.error(f"Reprocessing webhook event {event.id} failed: {str(e)}", exc_info=True)
            event.refresh_from_db()
            return Response(
                {
                    'detail': _("Reprocessing failed"),
                    'event': WebhookEventSerializer(event).data,
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info(f"Webhook event {event.id} reprocessed by {request.user.pk}")
        return Response(WebhookEventSerializer(event).data, status=status.HTTP_200_OK)
