"""Permission classes for the venue and booking APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def has_elevated_role(user) -> bool:
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "has_elevated_role") and user.has_elevated_role()


class IsVenueOwnerOrAdmin(permissions.BasePermission):
    """
    Only venue owners and admins reach owner-facing endpoints.

    Whether the caller owns the particular venue is decided by the
    application layer, which raises PermissionDeniedError.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if has_elevated_role(user):
            return True
        return hasattr(user, "is_venue_owner") and user.is_venue_owner()


class IsVenueOwnerOrAdminOrReadOnly(IsVenueOwnerOrAdmin):
    """Anyone authenticated may read, only owners and admins may write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
