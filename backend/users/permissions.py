from rest_framework import permissions
from .models import User


class IsStaffMember(permissions.BasePermission):
    """Company staff placing and managing their own orders."""

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == User.Role.STAFF


class IsOperator(permissions.BasePermission):
    """Kitchen and platform admins who drive the fulfilment pipeline."""

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.is_operator


class IsCompanyAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return (
            request.user.is_authenticated
            and request.user.role == User.Role.COMPANY_ADMIN
            and request.user.company_id is not None
        )


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == User.Role.ADMIN
