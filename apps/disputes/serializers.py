"""Serializers for disputes."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Dispute


class DisputeSerializer(serializers.ModelSerializer):
    vehicle_title = serializers.CharField(source="vehicle.title", read_only=True)
    deposit_amount = serializers.DecimalField(
        source="reservation.deposit_amount", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = Dispute
        fields = [
            "id",
            "reservation",
            "vehicle",
            "vehicle_title",
            "opened_by",
            "opened_by_role",
            "reason",
            "description",
            "photo_refs",
            "status",
            "retained_amount",
            "deposit_amount",
            "admin_note",
            "created_at",
            "resolved_at",
        ]
        read_only_fields = fields


class OpenDisputeSerializer(serializers.Serializer):
    """Description length is checked by the workflow so it answers ``DescriptionTooShort``."""

    reservation = serializers.IntegerField()
    reason = serializers.ChoiceField(choices=Dispute.Reason.choices)
    description = serializers.CharField(allow_blank=True, trim_whitespace=False)
    photo_refs = serializers.ListField(child=serializers.CharField(max_length=255), required=False, default=list)


class ResolveDisputeSerializer(serializers.Serializer):
    resolution = serializers.ChoiceField(choices=Dispute.Resolution.choices)
    retained_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    admin_note = serializers.CharField(required=False, allow_blank=True, default="")
