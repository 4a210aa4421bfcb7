"""Admin registration for reservation conversations."""

from __future__ import annotations

from django.contrib import admin

from .models import CurrentActions, Message, Thread


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ("type", "audience", "text", "author", "created_at")
    readonly_fields = fields


@admin.register(Thread)
class ThreadAdmin(admin.ModelAdmin):
    list_display = ("reservation", "renter", "owner", "last_message_at")
    search_fields = ("renter__email", "owner__email")
    inlines = [MessageInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("thread", "type", "audience", "created_at")
    list_filter = ("type", "audience")
    search_fields = ("text", "event_key")


@admin.register(CurrentActions)
class CurrentActionsAdmin(admin.ModelAdmin):
    list_display = ("key", "status", "updated_at")
    readonly_fields = ("key", "thread", "status", "actions", "updated_at")
