from rest_framework import serializers
from django.utils.translation import gettext_lazy as _

from creatorpay.models import Course, CourseEnrollment


class CourseSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(
        source='price.amount',
        decimal_places=2,
        max_digits=19,
        read_only=True
    )
    currency = serializers.CharField(source='price.currency.code', read_only=True)
    requires_payment = serializers.BooleanField(read_only=True)

    class Meta:
        model = Course
        fields = [
            'id',
            'title',
            'price',
            'currency',
            'is_free',
            'requires_payment',
            'created_at',
        ]
        read_only_fields = fields


class CourseEnrollmentSerializer(serializers.ModelSerializer):
    course = CourseSerializer(read_only=True)

    class Meta:
        model = CourseEnrollment
        fields = ['id', 'course', 'progress', 'enrolled_at']
        read_only_fields = fields


class CoursePurchaseSerializer(serializers.Serializer):
    """
    Buy a course over M-Pesa. Free courses need no phone number.
    """

    phone_number = serializers.CharField(
        max_length=20,
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text=_('M-Pesa number to charge')
    )
