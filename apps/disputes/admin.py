"""Admin registration for disputes."""

from __future__ import annotations

from django.contrib import admin

from .models import Dispute


@admin.register(Dispute)
class DisputeAdmin(admin.ModelAdmin):
    """Resolution goes through the API so the deposit and the reservation follow."""

    list_display = ("id", "reservation", "reason", "opened_by_role", "status", "retained_amount", "created_at")
    list_filter = ("status", "reason")
    search_fields = ("description", "opened_by__email")
    readonly_fields = [field.name for field in Dispute._meta.fields]
