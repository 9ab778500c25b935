from dataclasses import dataclass

from .models import Role, STAFF_ROLES


@dataclass(frozen=True)
class Caller:
    """Authenticated identity handed explicitly to every service-order call."""

    id: int
    role: Role | None

    @property
    def is_staff_role(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_operator(self) -> bool:
        return self.role == Role.OPERATOR

    @property
    def is_client(self) -> bool:
        return self.role == Role.CLIENT


def caller_from_user(user) -> Caller | None:
    if not getattr(user, "is_authenticated", False):
        return None
    prof = getattr(user, "profile", None)
    role = Role.parse(prof.role) if prof is not None else None
    # superusers without a profile still get the full view
    if role is None and getattr(user, "is_superuser", False):
        role = Role.SUPER_ADMIN
    return Caller(id=user.pk, role=role)
