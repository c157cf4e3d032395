"""
Object-level permissions for the API.
"""
from rest_framework import permissions


class IsOwner(permissions.BasePermission):
    """Permission: a user only reaches clients, gigs and invoices they own."""

    message = "You do not have access to this resource."

    def has_object_permission(self, request, view, obj):
        if not request.user or not request.user.is_authenticated:
            return False
        return obj.user_id == request.user.id
