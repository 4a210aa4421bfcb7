"""Serializers for condition reports."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import ConditionReport


class DetailPhotoSerializer(serializers.Serializer):
    ref = serializers.CharField(max_length=255)
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class SubmitReportSerializer(serializers.Serializer):
    """Slot and count checks happen in the gate so they answer with domain codes."""

    reservation = serializers.IntegerField()
    phase = serializers.ChoiceField(choices=ConditionReport.Phase.choices)
    role = serializers.ChoiceField(choices=ConditionReport.Role.choices, required=False)
    required_photos = serializers.DictField(child=serializers.CharField(allow_blank=True), default=dict)
    detail_photos = DetailPhotoSerializer(many=True, required=False, default=list)
    video_360_ref = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class ReportQuerySerializer(serializers.Serializer):
    reservation = serializers.IntegerField()
    phase = serializers.ChoiceField(choices=ConditionReport.Phase.choices)
    role = serializers.ChoiceField(choices=ConditionReport.Role.choices, required=False)


class UploadSerializer(serializers.Serializer):
    reservation = serializers.IntegerField()
    file = serializers.FileField()


class ConditionReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConditionReport
        fields = [
            "id",
            "reservation",
            "phase",
            "role",
            "required_photos",
            "detail_photos",
            "video_360_ref",
            "submitted_by",
            "completed_at",
        ]
        read_only_fields = fields
