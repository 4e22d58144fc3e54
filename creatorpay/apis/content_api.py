"""
CreatorPay - Article API Views
"""
import logging

from django.db.models import Q
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.request import Request

from creatorpay.models import Article
from creatorpay.permissions import IsOwner, IsPlatformAdmin
from creatorpay.constants import ARTICLE_STATUS_APPROVED
from creatorpay.serializers.content_serializer import (
    ArticleSerializer,
    AuthorArticleSerializer,
    AdminArticleSerializer,
    ArticleModerateSerializer,
    ArticleBoostSerializer,
    ArticleClickValueSerializer,
    ArticleViewResultSerializer,
)
from creatorpay.services.content_service import ContentService
from creatorpay.services.account_service import is_platform_admin
from creatorpay.exceptions import ArticleError
from creatorpay.apis.common import (
    build_error_response,
    service_error_response,
    get_client_ip,
    get_user_agent,
)


logger = logging.getLogger(__name__)


# ==========================================
# AUTHOR / READER VIEWSET
# ==========================================

class ArticleViewSet(viewsets.ModelViewSet):
    """
    Authors manage their own articles; everyone reads approved ones

    List: GET /api/articles/ (the caller's own articles with stats)
    Feed: GET /api/articles/feed/ (public)
    View: POST /api/articles/{id}/view/ (public)
    """

    serializer_class = ArticleSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwner]
    owner_field = 'author'

    def get_permissions(self):
        if self.action in ('feed', 'view'):
            return [permissions.AllowAny()]
        if self.action == 'retrieve':
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        service = ContentService()
        if self.action == 'feed':
            return service.public_feed()
        if self.action == 'view':
            return Article.objects.select_related('author')
        if self.action == 'retrieve':
            return Article.objects.select_related('author').filter(
                Q(status=ARTICLE_STATUS_APPROVED) | Q(author=self.request.user)
            )
        if self.action in ('update', 'partial_update', 'destroy') and is_platform_admin(self.request.user):
            return Article.objects.select_related('author')
        return service.author_articles(self.request.user)

    def get_serializer_class(self):
        if self.action == 'list':
            return AuthorArticleSerializer
        return self.serializer_class

    def create(self, request: Request, *args, **kwargs) -> Response:
        """New articles always start PENDING"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = ContentService().create_article(request.user, serializer.validated_data)
        return Response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        partial = kwargs.pop('partial', False)
        article = self.get_object()
        serializer = self.get_serializer(article, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            article = ContentService().update_article(article, request.user, serializer.validated_data)
        except Exception as e:
            return service_error_response(e, f"update of article {article.id}")
        return Response(ArticleSerializer(article).data, status=status.HTTP_200_OK)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        article = self.get_object()
        try:
            ContentService().delete_article(article, request.user)
        except Exception as e:
            return service_error_response(e, f"deletion of article {article.id}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def feed(self, request: Request) -> Response:
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ArticleSerializer(page, many=True).data)
        return Response(ArticleSerializer(queryset, many=True).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def view(self, request: Request, pk=None) -> Response:
        """Count a read; the author earns the article's cost per click"""
        article = self.get_object()

        try:
            result = ContentService().record_view(
                article,
                user=request.user,
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            )
        except ArticleError as e:
            return build_error_response(str(e), status.HTTP_403_FORBIDDEN)
        except Exception as e:
            return service_error_response(e, f"view of article {article.id}")

        return Response(ArticleViewResultSerializer(result).data, status=status.HTTP_200_OK)


# ==========================================
# ADMIN VIEWSET
# ==========================================

class AdminArticleViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Moderation queue and monetization controls

    List: GET /api/admin/articles/?status=PENDING
    """

    serializer_class = AdminArticleSerializer
    permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]

    def get_queryset(self):
        queryset = Article.objects.select_related('author').with_stats().order_by('-created_at')
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return queryset

    def get_serializer_class(self):
        action_serializers = {
            'moderate': ArticleModerateSerializer,
            'boost': ArticleBoostSerializer,
            'click_value': ArticleClickValueSerializer,
        }
        return action_serializers.get(self.action, self.serializer_class)

    def _respond(self, article: Article) -> Response:
        return Response(AdminArticleSerializer(article).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def moderate(self, request: Request, pk=None) -> Response:
        """{"status": "APPROVED" | "REJECTED", "note": "..."}"""
        article = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            article = ContentService().moderate(
                article,
                serializer.validated_data['status'],
                serializer.validated_data.get('note'),
            )
        except Exception as e:
            return service_error_response(e, f"moderation of article {article.id}")

        logger.info(f"Admin {request.user.pk} moderated article {article.id}: {article.status}")
        return self._respond(article)

    @action(detail=True, methods=['post'])
    def boost(self, request: Request, pk=None) -> Response:
        article = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            article = ContentService().boost(
                article,
                serializer.validated_data['boost_level'],
                serializer.validated_data.get('boost_expiry'),
            )
        except Exception as e:
            return service_error_response(e, f"boost of article {article.id}")
        return self._respond(article)

    @action(detail=True, methods=['post'])
    def click_value(self, request: Request, pk=None) -> Response:
        article = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            article = ContentService().set_click_value(article, serializer.validated_data['value'])
        except Exception as e:
            return service_error_response(e, f"click value update of article {article.id}")
        return self._respond(article)
