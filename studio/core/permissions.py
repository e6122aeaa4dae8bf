from rest_framework.permissions import BasePermission, SAFE_METHODS


def is_admin_user(user):
    """
    Check if user may manage studio data.
    Returns True for superusers, staff, and accounts with the 'admin' role.
    """
    if not user or not user.is_authenticated:
        return False
    return user.is_superuser or user.is_staff or getattr(user, 'role', None) == 'admin'


class IsStaffOrReadOnly(BasePermission):
    """Public read access for the marketing site, writes for studio staff only"""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_admin_user(request.user)


class IsStudioAdmin(BasePermission):
    """Admin dashboard only"""

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsStudioAdminOrCreateOnly(BasePermission):
    """Anyone may POST (public forms); every other method needs a studio admin"""

    def has_permission(self, request, view):
        if request.method == 'POST':
            return True
        return is_admin_user(request.user)
