"""Serializers for reservation conversations."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Message, Thread


class MessageSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True, default=None)

    class Meta:
        model = Message
        fields = ["id", "type", "audience", "text", "actions", "author", "author_name", "created_at"]
        read_only_fields = fields


class ThreadSerializer(serializers.ModelSerializer):
    reservation_status = serializers.CharField(source="reservation.status", read_only=True)
    vehicle_title = serializers.CharField(source="reservation.vehicle.title", read_only=True)

    class Meta:
        model = Thread
        fields = [
            "id",
            "reservation",
            "reservation_status",
            "vehicle_title",
            "renter",
            "owner",
            "created_at",
            "last_message_at",
            "last_message_text",
        ]
        read_only_fields = fields


class PostMessageSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=2000, trim_whitespace=True)
