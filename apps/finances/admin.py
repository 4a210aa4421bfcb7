"""Admin registration for the deposit trail."""

from __future__ import annotations

from django.contrib import admin

from .models import DepositTransaction


@admin.register(DepositTransaction)
class DepositTransactionAdmin(admin.ModelAdmin):
    list_display = ("reservation", "action", "outcome", "amount", "deposit_status", "created_at")
    list_filter = ("action", "outcome")
    readonly_fields = [field.name for field in DepositTransaction._meta.fields]
