"""Notification model.

In-app copy of every push the core decides to send. The push transport
itself is an external collaborator; the default sink only stores the row.
"""

from __future__ import annotations

from django.db import models  # type: ignore


class Notification(models.Model):
    """A message sent to a user about a reservation."""

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    template_type = models.CharField(max_length=64)
    context = models.JSONField(default=dict, blank=True)
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read'], name='notification_unread_idx')]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.template_type}"
