from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Profile


User = get_user_model()


class ProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.CharField(source='user.id', read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id',
            'user_id',
            'username',
            'email',
            'role',
            'phone_number',
            'referral_code',
            'created_at',
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Sign up, optionally with the referral code of an existing user
    """

    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    referral_code = serializers.CharField(
        max_length=20,
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text=_('Unknown codes are ignored')
    )

    def validate_username(self, value):
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError(_("A user with that username already exists"))
        return value

    def validate_email(self, value):
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(_("A user with that email already exists"))
        return value

    def validate_password(self, value):
        validate_password(value)
        return value


class ReferralEntrySerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    username = serializers.CharField(read_only=True)
    date_joined = serializers.DateTimeField(read_only=True)


class ReferralsSerializer(serializers.Serializer):
    referral_code = serializers.CharField(read_only=True)
    referral_count = serializers.IntegerField(read_only=True)
    referrals = ReferralEntrySerializer(many=True, read_only=True)
