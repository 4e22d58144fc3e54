"""
Permissions for CreatorPay

This module provides custom permissions for the CreatorPay API.
"""

from django.utils.translation import gettext_lazy as _
from rest_framework import permissions

from creatorpay.services.account_service import is_platform_admin


class IsWalletOwner(permissions.BasePermission):
    """
    Permission to check if user is the wallet owner
    """

    message = _("You do not have permission to access this wallet")

    def has_object_permission(self, request, view, obj):
        return obj.user_id == request.user.pk


class IsOwner(permissions.BasePermission):
    """
    Object-level permission for rows that belong to a user

    Looks at ``owner_field`` on the view (``user`` by default), so articles
    can use ``author``. Platform admins pass.
    """

    message = _("You do not have permission to access this object")

    def has_object_permission(self, request, view, obj):
        owner_field = getattr(view, 'owner_field', 'user')
        if getattr(obj, f"{owner_field}_id", None) == request.user.pk:
            return True
        return is_platform_admin(request.user)


class IsPlatformAdmin(permissions.BasePermission):
    """
    Staff, superusers and users whose profile role is ADMIN or SUPERADMIN
    """

    message = _("Admin access required")

    def has_permission(self, request, view):
        return is_platform_admin(request.user)
