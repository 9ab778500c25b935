from django.conf import settings
from django.db import models


class VehicleType(models.Model):
    name = models.CharField(max_length=50, unique=True)  # sedan, hatchback, moto, ...
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Vehicle(models.Model):
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="vehicles",
        verbose_name="Owner",
    )
    plate = models.CharField(max_length=20, unique=True, db_index=True)
    brand = models.CharField(max_length=60)
    model = models.CharField(max_length=60)
    year = models.PositiveSmallIntegerField()
    color = models.CharField(max_length=30, blank=True, default="")
    vin = models.CharField(max_length=40, blank=True, default="")
    vehicle_type = models.ForeignKey(
        VehicleType,
        on_delete=models.PROTECT,
        related_name="vehicles",
        null=True,
        blank=True,
    )
    mileage = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["client"], name="vehicles_ve_client__idx"),
        ]

    def __str__(self):
        return f"{self.plate} ({self.brand} {self.model})"
