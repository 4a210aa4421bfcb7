"""Serializers for the reservation domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Reservation, ReservationEvent


class ReservationSerializer(serializers.ModelSerializer):
    """Read side of a reservation. Every field is written by commands only."""

    vehicle_title = serializers.CharField(source="vehicle.title", read_only=True)
    renter_name = serializers.CharField(source="renter.display_name", read_only=True)
    owner_name = serializers.CharField(source="owner.display_name", read_only=True)
    days = serializers.IntegerField(read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "vehicle",
            "vehicle_title",
            "renter",
            "renter_name",
            "owner",
            "owner_name",
            "status",
            "start_date",
            "end_date",
            "days",
            "version",
            "total_amount",
            "commission_amount",
            "owner_payout",
            "deposit_amount",
            "currency",
            "payment_status",
            "deposit_status",
            "cancellation_policy",
            "cancelled_by",
            "cancellation_reason",
            "refund_percent",
            "refund_amount",
            "penalty_amount",
            "created_at",
            "updated_at",
            "accepted_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class ReservationCreateSerializer(serializers.Serializer):
    """Dates stay strings here; the create command parses them."""

    vehicle = serializers.IntegerField()
    start_date = serializers.CharField()
    end_date = serializers.CharField()


class CancelReservationSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class ReservationEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReservationEvent
        fields = ["id", "type", "actor_user_id", "payload", "idempotency_key", "created_at"]
        read_only_fields = fields
