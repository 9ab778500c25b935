# core/admin.py
from django.contrib import admin
from .models import NumberSequence


@admin.register(NumberSequence)
class NumberSequenceAdmin(admin.ModelAdmin):
    list_display = ("app_label", "code", "name", "prefix", "padding", "last_number", "updated_at")
    search_fields = ("app_label", "code", "name", "prefix")
    readonly_fields = ("last_number", "updated_at")
