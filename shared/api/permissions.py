"""DRF permissions shared by the rental apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore

from shared.infrastructure.config import is_admin_operator


class IsAdminOperator(permissions.BasePermission):
    """Allow-list of one: the configured admin operator id."""

    message = "Only the platform operator can do this."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin_operator(request.user)
