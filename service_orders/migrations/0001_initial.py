from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ("pending", "Pending"),
    ("in_progress", "In progress"),
    ("completed", "Completed"),
    ("billed", "Billed"),
    ("closed", "Closed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("vehicles", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ServiceOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order_number", models.CharField(editable=False, max_length=40, unique=True, verbose_name="Order No")),
                ("taken_at", models.DateTimeField(blank=True, null=True)),
                ("description", models.TextField()),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="pending", max_length=20)),
                ("priority", models.CharField(choices=[("low", "Low"), ("normal", "Normal"), ("high", "High"), ("urgent", "Urgent")], default="normal", max_length=10)),
                ("estimated_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("final_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("start_date", models.DateTimeField(blank=True, null=True)),
                ("completion_date", models.DateTimeField(blank=True, null=True)),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="client_service_orders", to=settings.AUTH_USER_MODEL)),
                ("operator", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="assigned_service_orders", to=settings.AUTH_USER_MODEL)),
                ("taken_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="taken_service_orders", to=settings.AUTH_USER_MODEL)),
                ("vehicle", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="service_orders", to="vehicles.vehicle")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["operator", "status"], name="so_operator_status_idx"),
                    models.Index(fields=["created_at"], name="so_created_at_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChecklistItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True, default="")),
                ("category", models.CharField(max_length=50)),
                ("is_required", models.BooleanField(default=True)),
                ("order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("vehicle_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="checklist_items", to="vehicles.vehicletype")),
            ],
            options={
                "ordering": ["vehicle_type", "order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ServiceOrderChecklist",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_completed", models.BooleanField(default=False)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("checklist_item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_entries", to="service_orders.checklistitem")),
                ("completed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="completed_checklist_entries", to=settings.AUTH_USER_MODEL)),
                ("service_order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="checklist", to="service_orders.serviceorder")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("service_order", "checklist_item"), name="uniq_checklist_item_per_order"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("previous_status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("new_status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("changed_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("notes", models.TextField(blank=True, default="")),
                ("operator_action", models.CharField(blank=True, choices=[("take", "Take"), ("release", "Release"), ("complete", "Complete"), ("status_change", "Status change")], max_length=20, null=True)),
                ("changed_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="service_order_status_changes", to=settings.AUTH_USER_MODEL)),
                ("service_order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="status_history", to="service_orders.serviceorder")),
            ],
            options={
                "verbose_name_plural": "Status history",
                "ordering": ["changed_at", "id"],
                "indexes": [
                    models.Index(fields=["service_order", "changed_at"], name="so_history_order_time_idx"),
                ],
            },
        ),
    ]
