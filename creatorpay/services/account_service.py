"""
Account Service - registration, platform roles and referrals
"""
import logging
from typing import Dict, Any, Optional

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError

from creatorpay.models import Profile, Wallet, UserLevel
from creatorpay.constants import ADMIN_ROLES
from creatorpay.utils.id_generators import generate_referral_code


logger = logging.getLogger(__name__)


REFERRAL_CODE_ATTEMPTS = 10


def is_platform_admin(user) -> bool:
    """Staff, superusers and users with an ADMIN or SUPERADMIN profile role"""
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    if user.is_staff or user.is_superuser:
        return True
    return Profile.objects.filter(user=user, role__in=ADMIN_ROLES).exists()


def generate_unique_referral_code() -> str:
    """
    Raises:
        RuntimeError: If no free code was found
    """
    for _attempt in range(REFERRAL_CODE_ATTEMPTS):
        code = generate_referral_code()
        if not Profile.objects.filter(referral_code=code).exists():
            return code
    raise RuntimeError("Could not generate a unique referral code")


class AccountService:
    """
    Creates users together with their profile, wallet and level records
    """

    def ensure_user_records(self, user, referred_by=None) -> Profile:
        """
        Idempotently create the Profile, Wallet and UserLevel of ``user``
        """
        profile = Profile.objects.filter(user=user).first()
        if profile is None:
            for _attempt in range(REFERRAL_CODE_ATTEMPTS):
                try:
                    with transaction.atomic():
                        profile = Profile.objects.create(
                            user=user,
                            referral_code=generate_unique_referral_code(),
                            referred_by=referred_by,
                        )
                    break
                except IntegrityError:
                    # referral code taken between the check and the insert
                    profile = Profile.objects.filter(user=user).first()
                    if profile is not None:
                        break
            else:
                raise RuntimeError("Could not create a profile with a unique referral code")

        Wallet.objects.get_or_create(user=user)
        UserLevel.objects.get_or_create(user=user)
        return profile

    def register_user(
        self,
        username: str,
        email: str,
        password: str,
        referral_code: Optional[str] = None
    ):
        """
        Create a user, linking the referrer when ``referral_code`` matches one.
        Unknown codes are ignored.
        """
        User = get_user_model()
        referrer = None
        if referral_code:
            referrer_profile = (
                Profile.objects.select_related('user')
                .filter(referral_code=referral_code.strip().upper())
                .first()
            )
            if referrer_profile is None:
                logger.warning(f"Ignoring unknown referral code {referral_code}")
            else:
                referrer = referrer_profile.user

        with transaction.atomic():
            user = User.objects.create_user(username=username, email=email, password=password)
            profile = self.ensure_user_records(user)
            if referrer is not None and profile.referred_by_id is None:
                profile.referred_by = referrer
                profile.save(update_fields=['referred_by', 'updated_at'])

        logger.info(
            f"Registered user {user.pk}"
            + (f" referred by {referrer.pk}" if referrer is not None else "")
        )
        return user

    def get_referrals(self, user) -> Dict[str, Any]:
        profile = self.ensure_user_records(user)
        referred = (
            Profile.objects.referred_by(user)
            .select_related('user')
            .order_by('-created_at')
        )
        referrals = [
            {
                'id': str(p.user.pk),
                'username': p.user.get_username(),
                'date_joined': getattr(p.user, 'date_joined', p.created_at),
            }
            for p in referred
        ]
        return {
            'referral_code': profile.referral_code,
            'referral_count': len(referrals),
            'referrals': referrals,
        }

    def set_role(self, user, role: str) -> Profile:
        profile = self.ensure_user_records(user)
        profile.role = role
        profile.save(update_fields=['role', 'updated_at'])
        logger.info(f"User {user.pk} role set to {role}")
        return profile
