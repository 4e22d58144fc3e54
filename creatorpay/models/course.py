from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from djmoney.models.fields import MoneyField

from creatorpay.models.base import BaseModel
from creatorpay.settings import get_creatorpay_setting


class Course(BaseModel):
    """
    Purchasable course. Only what payments need is stored here; lessons
    and sections live elsewhere.
    """

    title = models.CharField(
        max_length=255,
        verbose_name=_('Title')
    )
    price = MoneyField(
        max_digits=19,
        decimal_places=2,
        default=0,
        default_currency=get_creatorpay_setting('CURRENCY'),
        verbose_name=_('Price')
    )
    is_free = models.BooleanField(
        default=False,
        verbose_name=_('Is free')
    )
    is_published = models.BooleanField(
        default=True,
        db_index=True,
        verbose_name=_('Is published')
    )

    class Meta:
        verbose_name = _('Course')
        verbose_name_plural = _('Courses')
        ordering = ['title']

    def __str__(self):
        return self.title

    @property
    def requires_payment(self):
        return not self.is_free and self.price.amount > 0


class CourseEnrollment(BaseModel):
    """Grants a user access to a course"""

    user = models.ForeignKey(
        get_creatorpay_setting('USER_MODEL'),
        on_delete=models.CASCADE,
        related_name='course_enrollments',
        verbose_name=_('User')
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='enrollments',
        verbose_name=_('Course')
    )
    progress = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_('Progress')
    )
    enrolled_at = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('Enrolled at')
    )

    class Meta:
        verbose_name = _('Course enrollment')
        verbose_name_plural = _('Course enrollments')
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'course'], name='cp_unique_enrollment'),
        ]

    def __str__(self):
        return f"{self.user} -> {self.course}"
