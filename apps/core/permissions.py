"""
Permission classes for platform-authenticated shop owners.
"""

from rest_framework import permissions


class IsPlatformUser(permissions.BasePermission):
    """
    Allow access only to requests carrying a verified platform token.
    """

    message = "Unauthorized: No token provided"

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        # Shop data is owned by the auth user id stored on each row
        owner_id = getattr(obj, "user_id", None)
        if owner_id is None:
            return True
        return str(owner_id) == str(request.user.id)
