from django.db import models


class NumberSequence(models.Model):
    app_label   = models.CharField(max_length=50)                   # "service_orders"
    code        = models.CharField(max_length=50)                   # "SERVICE_ORDER"
    name        = models.CharField(max_length=100, blank=True, default="")

    prefix      = models.CharField(max_length=20, blank=True, default="")   # "SO"
    padding     = models.PositiveSmallIntegerField(default=4)

    last_number = models.PositiveIntegerField(default=0)
    updated_at  = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "core_number_sequences"
        constraints = [
            models.UniqueConstraint(fields=["app_label", "code"], name="uniq_sequence_per_app_code"),
        ]

    def __str__(self):
        return f"{self.app_label}/{self.code} → {self.prefix} ({self.last_number})"
