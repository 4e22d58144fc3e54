from decimal import Decimal
from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Article
from creatorpay.constants import MODERATION_STATUSES


# ==========================================
# ARTICLE SERIALIZERS
# ==========================================

class ArticleSerializer(serializers.ModelSerializer):
    """
    Article as readers and authors see it

    Status and monetization fields are read-only here; admins change them
    through the moderation endpoints.
    """

    author_id = serializers.CharField(source='author.id', read_only=True)
    author_username = serializers.CharField(source='author.username', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Article
        fields = [
            'id',
            'author_id',
            'author_username',
            'title',
            'content',
            'category',
            'status',
            'status_display',
            'moderation_note',
            'published_at',
            'is_boosted',
            'boost_level',
            'boost_expiry',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'author_id',
            'author_username',
            'status',
            'status_display',
            'moderation_note',
            'published_at',
            'is_boosted',
            'boost_level',
            'boost_expiry',
            'created_at',
            'updated_at',
        ]


class AuthorArticleSerializer(ArticleSerializer):
    """An author's own article with its view and earning totals"""

    view_count = serializers.IntegerField(read_only=True, default=0)
    total_earnings = serializers.DecimalField(
        max_digits=14,
        decimal_places=4,
        read_only=True,
        default=Decimal('0')
    )

    class Meta(ArticleSerializer.Meta):
        fields = ArticleSerializer.Meta.fields + ['view_count', 'total_earnings']
        read_only_fields = ArticleSerializer.Meta.read_only_fields + ['view_count', 'total_earnings']


class AdminArticleSerializer(AuthorArticleSerializer):
    class Meta(AuthorArticleSerializer.Meta):
        fields = AuthorArticleSerializer.Meta.fields + ['click_value']
        read_only_fields = AuthorArticleSerializer.Meta.read_only_fields + ['click_value']


# ==========================================
# ADMIN OPERATION SERIALIZERS
# ==========================================

class ArticleModerateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MODERATION_STATUSES)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ArticleBoostSerializer(serializers.Serializer):
    boost_level = serializers.IntegerField(
        min_value=0,
        help_text=_('0 removes the boost')
    )
    boost_expiry = serializers.DateTimeField(required=False, allow_null=True)


class ArticleClickValueSerializer(serializers.Serializer):
    value = serializers.DecimalField(
        max_digits=10,
        decimal_places=4,
        min_value=Decimal('0'),
        help_text=_('Amount the author earns per counted view')
    )


class ArticleViewResultSerializer(serializers.Serializer):
    counted = serializers.BooleanField(read_only=True)
    cpc = serializers.DecimalField(max_digits=10, decimal_places=4, read_only=True, required=False)
