from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    CLIENT = "client", "Client"
    OPERATOR = "operator", "Operator"
    ADMIN = "admin", "Admin"
    SUPER_ADMIN = "superAdmin", "Super Admin"

    @classmethod
    def parse(cls, value):
        """
        Map stored role text to a Role. Older rows use "user" for clients.
        Anything else is unknown and returns None.
        """
        if value is None:
            return None
        value = str(value).strip()
        if value == "user":
            return cls.CLIENT
        try:
            return cls(value)
        except ValueError:
            return None


STAFF_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


class UserProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CLIENT)
    phone = models.CharField(max_length=30, blank=True, default="")
    document_number = models.CharField(max_length=30, null=True, blank=True, unique=True)

    def __str__(self):
        return f"{self.user.username} ({self.get_role_display()})"
