from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "to_user", "type", "service_order", "is_read", "created_at")
    list_filter = ("type", "is_read")
    search_fields = ("title", "message", "to_user__username")
