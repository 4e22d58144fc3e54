"""
Test cases for AccountService and the post_save signal
"""
from django.test import TestCase
from django.contrib.auth import get_user_model

from creatorpay.models import Profile, Wallet, UserLevel
from creatorpay.services.account_service import AccountService, is_platform_admin
from creatorpay.constants import ROLE_ADMIN, ROLE_SUPERADMIN, ROLE_USER, REFERRAL_CODE_LENGTH


User = get_user_model()


class AccountServiceTestCase(TestCase):

    def setUp(self):
        self.service = AccountService()
        self.referrer = User.objects.create_user(username='referrer', password='testpass123')
        self.referrer_profile = Profile.objects.get(user=self.referrer)

    def test_signal_creates_records(self):
        self.assertEqual(self.referrer_profile.role, ROLE_USER)
        self.assertEqual(len(self.referrer_profile.referral_code), REFERRAL_CODE_LENGTH)
        self.assertTrue(Wallet.objects.filter(user=self.referrer).exists())
        self.assertTrue(UserLevel.objects.filter(user=self.referrer).exists())

    def test_ensure_user_records_is_idempotent(self):
        profile = self.service.ensure_user_records(self.referrer)

        self.assertEqual(profile.pk, self.referrer_profile.pk)
        self.assertEqual(Profile.objects.filter(user=self.referrer).count(), 1)
        self.assertEqual(Wallet.objects.filter(user=self.referrer).count(), 1)

    def test_register_with_referral_code(self):
        user = self.service.register_user(
            username='newbie',
            email='newbie@example.com',
            password='S3cure-pass!',
            referral_code=self.referrer_profile.referral_code.lower()
        )

        profile = Profile.objects.get(user=user)
        self.assertEqual(profile.referred_by, self.referrer)
        self.assertNotEqual(profile.referral_code, self.referrer_profile.referral_code)
        self.assertTrue(user.check_password('S3cure-pass!'))

    def test_register_with_unknown_code(self):
        user = self.service.register_user(
            username='newbie',
            email='newbie@example.com',
            password='S3cure-pass!',
            referral_code='NOPE1234'
        )

        self.assertIsNone(Profile.objects.get(user=user).referred_by)

    def test_get_referrals(self):
        for name in ('ann', 'ben'):
            self.service.register_user(
                username=name,
                email=f'{name}@example.com',
                password='S3cure-pass!',
                referral_code=self.referrer_profile.referral_code
            )
        self.service.register_user(username='solo', email='solo@example.com', password='S3cure-pass!')

        result = self.service.get_referrals(self.referrer)

        self.assertEqual(result['referral_code'], self.referrer_profile.referral_code)
        self.assertEqual(result['referral_count'], 2)
        self.assertEqual({r['username'] for r in result['referrals']}, {'ann', 'ben'})

    def test_platform_admin_detection(self):
        user = User.objects.create_user(username='plain', password='testpass123')
        staff = User.objects.create_user(username='staff', password='testpass123', is_staff=True)

        self.assertFalse(is_platform_admin(user))
        self.assertTrue(is_platform_admin(staff))
        self.assertFalse(is_platform_admin(None))

        self.service.set_role(user, ROLE_ADMIN)
        self.assertTrue(is_platform_admin(user))

        self.service.set_role(user, ROLE_SUPERADMIN)
        self.assertTrue(Profile.objects.get(user=user).is_admin)
