"""Admin registration for reservations and their event log."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation, ReservationEvent


class ReservationEventInline(admin.TabularInline):
    model = ReservationEvent
    extra = 0
    can_delete = False
    readonly_fields = ("type", "actor_user_id", "payload", "idempotency_key", "created_at")


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    """Read-only: reservations change status through commands only."""

    list_display = (
        "id",
        "vehicle",
        "renter",
        "owner",
        "status",
        "start_date",
        "end_date",
        "total_amount",
        "payment_status",
        "deposit_status",
    )
    list_filter = ("status", "payment_status", "deposit_status")
    search_fields = ("renter__email", "owner__email", "vehicle__title")
    inlines = [ReservationEventInline]

    def get_readonly_fields(self, request, obj=None):  # type: ignore
        return [field.name for field in Reservation._meta.fields]


@admin.register(ReservationEvent)
class ReservationEventAdmin(admin.ModelAdmin):
    list_display = ("reservation", "type", "actor_user_id", "created_at")
    list_filter = ("type",)
    search_fields = ("idempotency_key",)
    readonly_fields = ("reservation", "type", "actor_user_id", "payload", "idempotency_key", "created_at")
