from django.db import models
from django.utils.translation import gettext_lazy as _

from creatorpay.constants import USER_ROLES, ROLE_USER, ADMIN_ROLES, REFERRAL_CODE_LENGTH
from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class ProfileQuerySet(models.QuerySet):
    """Custom QuerySet for Profile model"""

    def admins(self):
        """Return profiles carrying an admin role"""
        return self.filter(role__in=ADMIN_ROLES)

    def referred_by(self, user):
        """Return profiles of users referred by ``user``"""
        return self.filter(referred_by=user)


class ProfileManager(models.Manager):
    """Custom Manager for Profile model"""

    def get_queryset(self):
        return ProfileQuerySet(self.model, using=self._db)

    def admins(self):
        return self.get_queryset().admins()

    def referred_by(self, user):
        return self.get_queryset().referred_by(user)


class Profile(BaseModel):
    """
    Per-user platform profile

    Holds the platform role used for admin checks, the M-Pesa phone number
    and the referral link between users.
    """

    user = models.OneToOneField(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='creator_profile',
        verbose_name=_('User')
    )

    role = models.CharField(
        max_length=20,
        choices=USER_ROLES,
        default=ROLE_USER,
        db_index=True,
        verbose_name=_('Role')
    )

    phone_number = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        verbose_name=_('Phone number'),
        help_text=_('M-Pesa number used for deposits and payouts')
    )

    referral_code = models.CharField(
        max_length=REFERRAL_CODE_LENGTH,
        unique=True,
        db_index=True,
        verbose_name=_('Referral code')
    )

    referred_by = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.SET_NULL,
        related_name='referred_profiles',
        blank=True,
        null=True,
        verbose_name=_('Referred by')
    )

    objects = ProfileManager()

    class Meta:
        verbose_name = _('Profile')
        verbose_name_plural = _('Profiles')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} ({self.role})"

    @property
    def is_admin(self):
        return self.role in ADMIN_ROLES
