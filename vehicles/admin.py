from django.contrib import admin
from .models import Vehicle, VehicleType


@admin.register(VehicleType)
class VehicleTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("plate", "brand", "model", "year", "vehicle_type", "client", "is_active")
    list_filter = ("vehicle_type", "is_active")
    search_fields = ("plate", "brand", "model", "vin", "client__username")
    autocomplete_fields = ("client",)
