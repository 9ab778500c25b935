from django.conf import settings
from django.db import models
from django.utils import timezone

from .orders import OrderStatus


class OperatorAction(models.TextChoices):
    TAKE = "take", "Take"
    RELEASE = "release", "Release"
    COMPLETE = "complete", "Complete"
    STATUS_CHANGE = "status_change", "Status change"


class StatusHistory(models.Model):
    """Append-only: one row per status transition, never updated or deleted."""

    service_order = models.ForeignKey(
        "service_orders.ServiceOrder",
        on_delete=models.PROTECT,
        related_name="status_history",
    )
    previous_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="service_order_status_changes",
    )
    changed_at = models.DateTimeField(default=timezone.now, db_index=True)
    notes = models.TextField(blank=True, default="")
    operator_action = models.CharField(max_length=20, choices=OperatorAction.choices, null=True, blank=True)

    class Meta:
        ordering = ["changed_at", "id"]
        verbose_name_plural = "Status history"
        indexes = [
            models.Index(fields=["service_order", "changed_at"], name="so_history_order_time_idx"),
        ]

    def __str__(self):
        return f"{self.service_order} {self.previous_status} → {self.new_status} @ {self.changed_at}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Status history entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Status history entries cannot be deleted.")
