from rest_framework import serializers

from creatorpay.models import WebhookEvent


class WebhookEventSerializer(serializers.ModelSerializer):
    """
    Serializer for stored PayHero callbacks
    """

    transaction_id = serializers.UUIDField(source='transaction.id', read_only=True, allow_null=True)

    class Meta:
        model = WebhookEvent
        fields = [
            'id',
            'event_type',
            'reference',
            'payload',
            'is_valid',
            'signature_verified',
            'processed',
            'processed_at',
            'processing_error',
            'transaction_id',
            'created_at',
        ]
        read_only_fields = fields
