"""Admin registration for condition reports."""

from __future__ import annotations

from django.contrib import admin

from .models import ConditionReport


@admin.register(ConditionReport)
class ConditionReportAdmin(admin.ModelAdmin):
    list_display = ("reservation", "phase", "role", "submitted_by", "completed_at")
    list_filter = ("phase", "role")
    search_fields = ("submitted_by__email",)
    readonly_fields = [field.name for field in ConditionReport._meta.fields]
