from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    BILLED = "billed", "Billed"
    CLOSED = "closed", "Closed"


class Priority(models.TextChoices):
    LOW = "low", "Low"
    NORMAL = "normal", "Normal"
    HIGH = "high", "High"
    URGENT = "urgent", "Urgent"

    @classmethod
    def parse(cls, value):
        if value in (None, ""):
            return cls.NORMAL
        value = str(value).strip().lower()
        if value == "medium":
            return cls.NORMAL
        try:
            return cls(value)
        except ValueError:
            return None


class ServiceOrder(TimeStampedModel):
    order_number = models.CharField("Order No", max_length=40, unique=True, editable=False)

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="client_service_orders",
    )
    vehicle = models.ForeignKey(
        "vehicles.Vehicle",
        on_delete=models.PROTECT,
        related_name="service_orders",
    )

    # operator = current assignee; taken_by/taken_at = last self-assignment
    operator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assigned_service_orders",
        null=True,
        blank=True,
    )
    taken_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="taken_service_orders",
        null=True,
        blank=True,
    )
    taken_at = models.DateTimeField(null=True, blank=True)

    description = models.TextField()
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING, db_index=True)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)

    estimated_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    final_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    start_date = models.DateTimeField(null=True, blank=True)
    completion_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["operator", "status"], name="so_operator_status_idx"),
            models.Index(fields=["created_at"], name="so_created_at_idx"),
        ]

    def __str__(self):
        return self.order_number or f"ServiceOrder#{self.pk}"

    def delete(self, *args, **kwargs):
        raise models.ProtectedError("Service orders are never deleted.", {self})
