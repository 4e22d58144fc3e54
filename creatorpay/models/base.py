from django.db import models
from django.utils.translation import gettext_lazy as _
from model_utils.models import UUIDModel

from creatorpay.settings import get_creatorpay_setting


class AutoIDModel(models.Model):
    """Abstract model keeping Django's auto-incrementing primary key"""
    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    """Abstract model with created_at / updated_at columns"""
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name=_('Created at')
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_('Updated at')
    )

    class Meta:
        abstract = True


def get_base_model():
    """Pick the primary key flavour (UUID or integer) from settings"""
    key_model = UUIDModel if get_creatorpay_setting('USE_UUID') else AutoIDModel
    return (TimestampedModel, key_model)


class BaseModel(*get_base_model()):
    """Base model that includes UUID or ID and timestamps"""
    class Meta:
        abstract = True
