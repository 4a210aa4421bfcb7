"""Serializers for the deposit audit trail and price quotes."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import DepositTransaction


class DepositTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DepositTransaction
        fields = [
            "id",
            "reservation",
            "action",
            "outcome",
            "amount",
            "currency",
            "deposit_status",
            "actor_user_id",
            "created_at",
        ]
        read_only_fields = fields


class PriceQuoteSerializer(serializers.Serializer):
    vehicle = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] <= attrs["start_date"]:
            raise serializers.ValidationError("end_date must be after start_date.")
        return attrs
