"""Serializers for vehicle listings."""

from __future__ import annotations

from datetime import date

from rest_framework import serializers  # type: ignore

from .models import Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_blocked_dates = serializers.ListField(
        child=serializers.DateField(),
        required=False,
    )

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "owner_id",
            "title",
            "city",
            "price_per_day",
            "currency",
            "deposit_min",
            "deposit_selected",
            "cancellation_policy",
            "owner_blocked_dates",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "owner_id", "created_at"]

    def validate_owner_blocked_dates(self, value: list[date]) -> list[str]:  # type: ignore
        return sorted({day.isoformat() for day in value})

    def validate(self, attrs):  # type: ignore
        deposit_min = attrs.get("deposit_min", getattr(self.instance, "deposit_min", None))
        deposit_selected = attrs.get("deposit_selected", getattr(self.instance, "deposit_selected", None))
        if deposit_min and deposit_selected and deposit_selected < deposit_min:
            raise serializers.ValidationError(
                {"deposit_selected": "Deposit cannot be lower than the minimum."}
            )
        return attrs
