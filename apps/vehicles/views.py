"""Owner-facing vehicle endpoints."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import locks
from .models import Vehicle
from .serializers import VehicleSerializer


class IsVehicleOwner(permissions.BasePermission):
    def has_object_permission(self, request, view, obj: Vehicle):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.owner_id == request.user.id


class VehicleViewSet(viewsets.ModelViewSet):
    """Vehicles are readable by any signed-in user and editable by their owner."""

    serializer_class = VehicleSerializer
    permission_classes = [permissions.IsAuthenticated, IsVehicleOwner]
    filterset_fields = ["city", "is_active", "cancellation_policy"]

    def get_queryset(self):  # type: ignore
        qs = Vehicle.objects.select_related("owner")
        if self.request.query_params.get("mine") == "1":
            return qs.filter(owner=self.request.user)
        if self.action in {"list", "retrieve", "locked_days"}:
            return qs.filter(is_active=True) | qs.filter(owner=self.request.user)
        return qs.filter(owner=self.request.user)

    def perform_create(self, serializer):  # type: ignore
        serializer.save(owner=self.request.user)

    @action(detail=True, methods=["get"], url_path="locked-days")
    def locked_days(self, request, pk=None):  # type: ignore
        vehicle = self.get_object()
        return Response(
            {
                "vehicle_id": vehicle.id,
                "locked_days": sorted(locks.locked_days(vehicle.id)),
                "owner_blocked_dates": sorted(vehicle.owner_blocked_dates or []),
            }
        )
