from django.conf import settings
from django.db import models


class ChecklistItem(models.Model):
    vehicle_type = models.ForeignKey(
        "vehicles.VehicleType",
        on_delete=models.PROTECT,
        related_name="checklist_items",
    )
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=50)  # engine, brakes, electrical, ...
    is_required = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["vehicle_type", "order", "id"]

    def __str__(self):
        return f"{self.vehicle_type}: {self.name}"


class ServiceOrderChecklist(models.Model):
    service_order = models.ForeignKey(
        "service_orders.ServiceOrder",
        on_delete=models.PROTECT,
        related_name="checklist",
    )
    checklist_item = models.ForeignKey(
        ChecklistItem,
        on_delete=models.PROTECT,
        related_name="order_entries",
    )
    is_completed = models.BooleanField(default=False)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="completed_checklist_entries",
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["service_order", "checklist_item"], name="uniq_checklist_item_per_order"),
        ]

    def __str__(self):
        mark = "x" if self.is_completed else " "
        return f"[{mark}] {self.checklist_item.name}"
