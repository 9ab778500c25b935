# service_orders/admin.py
from django.contrib import admin
from .models import ChecklistItem, ServiceOrder, ServiceOrderChecklist, StatusHistory


@admin.register(ChecklistItem)
class ChecklistItemAdmin(admin.ModelAdmin):
    list_display = ("name", "vehicle_type", "category", "is_required", "order", "is_active")
    list_filter = ("vehicle_type", "category", "is_required", "is_active")
    search_fields = ("name", "category")
    ordering = ("vehicle_type", "order")


class ServiceOrderChecklistInline(admin.TabularInline):
    model = ServiceOrderChecklist
    extra = 0
    fields = ("checklist_item", "is_completed", "completed_by", "completed_at", "notes")
    readonly_fields = ("checklist_item", "is_completed", "completed_by", "completed_at")
    can_delete = False


class StatusHistoryInline(admin.TabularInline):
    model = StatusHistory
    extra = 0
    fields = ("changed_at", "previous_status", "new_status", "operator_action", "changed_by", "notes")
    readonly_fields = fields
    can_delete = False
    ordering = ("changed_at", "id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ServiceOrder)
class ServiceOrderAdmin(admin.ModelAdmin):
    """
    Read-mostly: status, assignment and dates only move through
    service_orders.services.lifecycle.
    """

    list_display = ("order_number", "status", "priority", "client", "vehicle", "operator", "created_at")
    list_filter = ("status", "priority", "created_at")
    search_fields = ("order_number", "description", "vehicle__plate", "client__username", "operator__username")
    readonly_fields = (
        "order_number", "client", "vehicle", "status",
        "operator", "taken_by", "taken_at",
        "start_date", "completion_date",
        "created_at", "updated_at",
    )
    inlines = [ServiceOrderChecklistInline, StatusHistoryInline]

    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False
