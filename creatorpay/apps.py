from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class CreatorPayConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'creatorpay'
    verbose_name = _("CreatorPay")

    def ready(self):
        """Connect signal handlers"""
        from creatorpay.signals import handlers  # noqa
