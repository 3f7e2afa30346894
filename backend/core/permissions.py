from rest_framework import permissions


class IsLabStaff(permissions.BasePermission):
    """
    Generic permission for any authenticated lab staff member.
    """
    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        return bool(getattr(request.user, 'role', None)) or request.user.is_superuser


class IsAdminRole(permissions.BasePermission):
    """
    Strict permission for ADMIN role only.
    """
    def has_permission(self, request, view):
        return bool(
            request.user and request.user.is_authenticated
            and (getattr(request.user, 'role', None) == 'ADMIN' or request.user.is_superuser)
        )


def HasRole(*roles):
    """
    Build a permission class that admits admins plus the given roles.
    """
    allowed = {'ADMIN', *roles}

    class _HasRole(permissions.BasePermission):
        def has_permission(self, request, view):
            if not (request.user and request.user.is_authenticated):
                return False
            return request.user.is_superuser or getattr(request.user, 'role', None) in allowed

    _HasRole.__name__ = f"HasRole({', '.join(sorted(allowed))})"
    return _HasRole
