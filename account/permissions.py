# account/permissions.py
from rest_framework.permissions import BasePermission

from .identity import caller_from_user
from .models import Role


def role_required(*roles):
    """
    DRF permission factory: only callers whose profile role is in `roles`.
      permission_classes = [role_required(Role.OPERATOR)]
    """
    allowed = frozenset(Role(r) for r in roles)

    class _RoleRequired(BasePermission):
        message = "Your role is not allowed to perform this action."

        def has_permission(self, request, view):
            caller = caller_from_user(request.user)
            return caller is not None and caller.role in allowed

    _RoleRequired.__name__ = "RoleRequired_" + "_".join(sorted(allowed))
    return _RoleRequired
