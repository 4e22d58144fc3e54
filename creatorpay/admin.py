from django.contrib import admin
from django.contrib import messages
from django.db import models
from django.utils.translation import gettext_lazy as _

from creatorpay.models import (
    Profile, Wallet, Transaction, Withdrawal, Investment,
    Video, VideoWatch, UserLevel,
    Article, ArticleView, Earning, PlatformSetting,
    Course, CourseEnrollment, WebhookEvent,
)
from creatorpay.constants import ARTICLE_STATUS_APPROVED, ARTICLE_STATUS_REJECTED
from creatorpay.exceptions import CreatorPayError
from creatorpay.services.content_service import ContentService
from creatorpay.services.webhook_service import WebhookService
from creatorpay.services.withdrawal_service import WithdrawalService
from creatorpay.utils.exporters import (
    export_queryset_to_csv, export_queryset_to_excel, export_queryset_to_pdf
)

import logging
logger = logging.getLogger(__name__)


class ExportMixin:
    """Mixin to add export actions to admin"""

    actions = ['export_to_csv', 'export_to_excel', 'export_to_pdf']

    def _export_fields(self):
        return [field.name for field in self.model._meta.fields if not isinstance(field, models.JSONField)]

    def _export_prefix(self):
        return str(self.model._meta.verbose_name_plural).lower().replace(' ', '_')

    def export_to_csv(self, request, queryset):
        """Export selected items to CSV"""
        return export_queryset_to_csv(
            queryset=queryset,
            fields=self._export_fields(),
            filename_prefix=self._export_prefix()
        )
    export_to_csv.short_description = _("Export selected items to CSV")

    def export_to_excel(self, request, queryset):
        """Export selected items to Excel"""
        return export_queryset_to_excel(
            queryset=queryset,
            fields=self._export_fields(),
            filename_prefix=self._export_prefix(),
            sheet_name=str(self.model._meta.verbose_name_plural)[:31]
        )
    export_to_excel.short_description = _("Export selected items to Excel")

    def export_to_pdf(self, request, queryset):
        """Export selected items to PDF"""
        meta = self.model._meta
        return export_queryset_to_pdf(
            queryset=queryset,
            fields=self._export_fields(),
            filename_prefix=self._export_prefix(),
            title=_("{} Export").format(meta.verbose_name_plural)
        )
    export_to_pdf.short_description = _("Export selected items to PDF")


class ProfileAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('user', 'role', 'referral_code', 'referred_by', 'phone_number', 'created_at')
    list_filter = ('role', 'created_at')
    search_fields = ('user__username', 'user__email', 'referral_code', 'phone_number')
    readonly_fields = ('id', 'referral_code', 'created_at', 'updated_at')
    raw_id_fields = ('user', 'referred_by')


class WalletAdmin(ExportMixin, admin.ModelAdmin):
    """Admin for the Wallet model"""

    list_display = (
        'id', 'user', 'formatted_balance', 'earnings', 'investment',
        'is_active', 'is_locked', 'last_transaction_date', 'created_at'
    )
    list_filter = ('is_active', 'is_locked', 'created_at')
    search_fields = ('id', 'user__email', 'user__username')
    readonly_fields = (
        'id', 'user', 'balance', 'earnings', 'investment',
        'last_transaction_date', 'created_at', 'updated_at'
    )
    actions = ExportMixin.actions + ['lock_wallets', 'unlock_wallets']
    fieldsets = (
        (None, {
            'fields': ('id', 'user')
        }),
        (_('Balances'), {
            'fields': ('balance', 'earnings', 'investment')
        }),
        (_('Status'), {
            'fields': ('is_active', 'is_locked', 'last_transaction_date')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at')
        }),
    )

    def formatted_balance(self, obj):
        """Format balance for display"""
        return f"{obj.balance.amount} {obj.balance.currency.code}"
    formatted_balance.short_description = _("Balance")

    def lock_wallets(self, request, queryset):
        """Lock selected wallets"""
        for wallet in queryset:
            wallet.lock()
        messages.success(request, _("{} wallets locked successfully").format(queryset.count()))
    lock_wallets.short_description = _("Lock selected wallets")

    def unlock_wallets(self, request, queryset):
        """Unlock selected wallets"""
        for wallet in queryset:
            wallet.unlock()
        messages.success(request, _("{} wallets unlocked successfully").format(queryset.count()))
    unlock_wallets.short_description = _("Unlock selected wallets")


class TransactionAdmin(ExportMixin, admin.ModelAdmin):
    """Admin for the Transaction model; the ledger is read-only"""

    list_display = (
        'id', 'reference', 'wallet', 'amount', 'transaction_type',
        'status', 'created_at', 'completed_at',
    )
    list_filter = ('transaction_type', 'status', 'created_at', 'completed_at')
    search_fields = (
        'id', 'wallet__user__email', 'wallet__user__username', 'reference',
        'checkout_request_id', 'provider_reference', 'description'
    )
    readonly_fields = [field.name for field in Transaction._meta.fields]
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False


class WithdrawalAdmin(ExportMixin, admin.ModelAdmin):
    """Admin for manual M-Pesa payouts"""

    list_display = (
        'id', 'user', 'amount', 'phone_number', 'status', 'reference',
        'processed_by', 'approved_at', 'paid_at', 'created_at'
    )
    list_filter = ('status', 'method', 'created_at')
    search_fields = ('id', 'reference', 'phone_number', 'user__username', 'user__email')
    readonly_fields = (
        'id', 'user', 'wallet', 'amount', 'method', 'phone_number', 'reference',
        'transaction', 'status', 'approved_at', 'paid_at', 'processed_by',
        'created_at', 'updated_at'
    )
    actions = ExportMixin.actions + ['approve_withdrawals', 'mark_withdrawals_paid', 'reject_withdrawals']

    def _apply(self, request, queryset, operation, note, done_message):
        service = WithdrawalService()
        count = 0
        for withdrawal in queryset:
            try:
                getattr(service, operation)(withdrawal, note=note, admin=request.user)
                count += 1
            except CreatorPayError as e:
                messages.error(request, _("Withdrawal {}: {}").format(withdrawal.reference, str(e)))
        if count:
            messages.success(request, done_message.format(count))

    def approve_withdrawals(self, request, queryset):
        self._apply(request, queryset, 'approve', _("Approved in admin"), _("{} withdrawals approved"))
    approve_withdrawals.short_description = _("Approve selected withdrawals")

    def mark_withdrawals_paid(self, request, queryset):
        self._apply(request, queryset, 'mark_paid', None, _("{} withdrawals marked as paid"))
    mark_withdrawals_paid.short_description = _("Mark selected withdrawals as paid")

    def reject_withdrawals(self, request, queryset):
        self._apply(request, queryset, 'reject', _("Rejected in admin"), _("{} withdrawals rejected and refunded"))
    reject_withdrawals.short_description = _("Reject and refund selected withdrawals")


class InvestmentAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('id', 'user', 'amount', 'period', 'total_return', 'status', 'start_date', 'end_date')
    list_filter = ('status', 'period', 'created_at')
    search_fields = ('id', 'user__username', 'user__email')
    readonly_fields = [field.name for field in Investment._meta.fields]


class VideoAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('title', 'duration', 'is_active', 'uploaded_by', 'created_at')
    list_filter = ('is_active', 'created_at')
    search_fields = ('title', 'description')


class VideoWatchAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('user', 'video', 'reward', 'level', 'watched_at')
    list_filter = ('level', 'watched_at')
    search_fields = ('user__username', 'video__title')
    raw_id_fields = ('user', 'video')


class UserLevelAdmin(admin.ModelAdmin):
    list_display = ('user', 'level', 'videos_watched_today', 'last_watch_date')
    list_filter = ('level',)
    search_fields = ('user__username', 'user__email')


class ArticleAdmin(ExportMixin, admin.ModelAdmin):
    """Admin for articles with moderation actions"""

    list_display = (
        'title', 'author', 'category', 'status', 'click_value',
        'is_boosted', 'boost_level', 'published_at', 'created_at'
    )
    list_filter = ('status', 'is_boosted', 'category', 'created_at')
    search_fields = ('title', 'content', 'author__username')
    readonly_fields = ('id', 'published_at', 'created_at', 'updated_at')
    actions = ExportMixin.actions + ['approve_articles', 'reject_articles']

    def _moderate(self, request, queryset, status):
        service = ContentService()
        for article in queryset:
            service.moderate(article, status)
        messages.success(request, _("{} articles set to {}").format(queryset.count(), status))

    def approve_articles(self, request, queryset):
        self._moderate(request, queryset, ARTICLE_STATUS_APPROVED)
    approve_articles.short_description = _("Approve selected articles")

    def reject_articles(self, request, queryset):
        self._moderate(request, queryset, ARTICLE_STATUS_REJECTED)
    reject_articles.short_description = _("Reject selected articles")


class ArticleViewAdmin(admin.ModelAdmin):
    list_display = ('article', 'user', 'ip_address', 'created_at')
    search_fields = ('article__title', 'user__username', 'ip_address')
    raw_id_fields = ('article', 'user')


class EarningAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('user', 'article', 'amount', 'rate', 'created_at')
    search_fields = ('user__username', 'article__title')
    raw_id_fields = ('article', 'user')


class PlatformSettingAdmin(admin.ModelAdmin):
    list_display = ('key', 'value', 'updated_at')
    search_fields = ('key',)


class CourseAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('title', 'price', 'is_free', 'is_published', 'created_at')
    list_filter = ('is_free', 'is_published')
    search_fields = ('title',)


class CourseEnrollmentAdmin(ExportMixin, admin.ModelAdmin):
    list_display = ('user', 'course', 'progress', 'enrolled_at')
    search_fields = ('user__username', 'course__title')
    raw_id_fields = ('user', 'course')


class WebhookEventAdmin(ExportMixin, admin.ModelAdmin):
    """Admin for the WebhookEvent model"""

    list_display = (
        'id', 'event_type', 'reference', 'processed',
        'processed_at', 'is_valid', 'signature_verified', 'created_at'
    )
    list_filter = ('event_type', 'processed', 'is_valid', 'signature_verified', 'created_at')
    search_fields = ('id', 'reference')
    readonly_fields = (
        'id', 'event_type', 'payload', 'reference', 'processed',
        'processed_at', 'signature', 'signature_verified', 'is_valid', 'processing_error',
        'transaction', 'created_at', 'updated_at'
    )
    actions = ExportMixin.actions + ['reprocess_events']

    def reprocess_events(self, request, queryset):
        """Re-run selected webhook events"""
        webhook_service = WebhookService()
        processed = 0

        for event in queryset:
            try:
                webhook_service.reprocess_event(event)
                processed += 1
            except Exception as e:
                logger.error(f"Admin reprocess of webhook event {event.id} failed: {str(e)}")
                messages.error(request, _(
                    "Error processing webhook event {}: {}").format(event.id, str(e))
                )

        if processed:
            messages.success(request, _("Processed {} webhook events").format(processed))
        else:
            messages.info(request, _("No webhook events were processed"))
    reprocess_events.short_description = _("Reprocess selected webhook events")


admin.site.register(Profile, ProfileAdmin)
admin.site.register(Wallet, WalletAdmin)
admin.site.register(Transaction, TransactionAdmin)
admin.site.register(Withdrawal, WithdrawalAdmin)
admin.site.register(Investment, InvestmentAdmin)
admin.site.register(Video, VideoAdmin)
admin.site.register(VideoWatch, VideoWatchAdmin)
admin.site.register(UserLevel, UserLevelAdmin)
admin.site.register(Article, ArticleAdmin)
admin.site.register(ArticleView, ArticleViewAdmin)
admin.site.register(Earning, EarningAdmin)
admin.site.register(PlatformSetting, PlatformSettingAdmin)
admin.site.register(Course, CourseAdmin)
admin.site.register(CourseEnrollment, CourseEnrollmentAdmin)
admin.site.register(WebhookEvent, WebhookEventAdmin)
