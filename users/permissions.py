from rest_framework.permissions import BasePermission


class IsStoreAdmin(BasePermission):
    """Staff users or users whose profile role is admin."""

    message = "Only administrators can manage users."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        profile = getattr(user, 'profile', None)
        return user.is_staff or (profile is not None and profile.is_admin)
