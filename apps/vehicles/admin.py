"""Admin registration for vehicles."""

from __future__ import annotations

from django.contrib import admin

from .models import Vehicle, VehicleLockBucket


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "city", "price_per_day", "cancellation_policy", "is_active")
    list_filter = ("is_active", "cancellation_policy", "city")
    search_fields = ("title", "owner__email")
    readonly_fields = ("created_at", "updated_at")


@admin.register(VehicleLockBucket)
class VehicleLockBucketAdmin(admin.ModelAdmin):
    list_display = ("vehicle", "updated_at")
    readonly_fields = ("vehicle", "dates", "updated_at")
