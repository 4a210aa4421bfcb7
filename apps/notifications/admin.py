from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "template_type", "title", "is_read", "created_at")
    list_filter = ("template_type", "is_read")
    search_fields = ("title", "user__email")
    readonly_fields = ("user", "template_type", "context", "title", "message", "created_at")
