"""API views for disputes.

Participants open disputes and read them; only the configured operator
lists, counts and resolves them.
"""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.permissions import IsAdminOperator

from . import services
from .serializers import DisputeSerializer, OpenDisputeSerializer, ResolveDisputeSerializer


class DisputeViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def create(self, request):  # type: ignore
        serializer = OpenDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        dispute = services.open_dispute(
            data["reservation"],
            request.user,
            data["reason"],
            data["description"],
            photo_refs=data["photo_refs"],
        )
        return Response(DisputeSerializer(dispute).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path=r"reservation/(?P<reservation_id>\d+)")
    def for_reservation(self, request, reservation_id=None):  # type: ignore
        dispute = services.dispute_for_reservation(reservation_id, request.user)
        return Response(DisputeSerializer(dispute).data if dispute else None)

    @action(detail=False, methods=["get"], url_path=r"reservation/(?P<reservation_id>\d+)/can-open")
    def can_open(self, request, reservation_id=None):  # type: ignore
        return Response(services.can_open(reservation_id, request.user))

    # ===== Operator =====

    def list(self, request):  # type: ignore
        if not IsAdminOperator().has_permission(request, self):
            self.permission_denied(request, message=IsAdminOperator.message)
        disputes = services.admin_disputes(request.query_params.get("status"))
        return Response(DisputeSerializer(disputes, many=True).data)

    @action(detail=False, methods=["get"], permission_classes=[IsAdminOperator])
    def stats(self, request):  # type: ignore
        return Response(services.dispute_stats())

    @action(detail=True, methods=["post"], permission_classes=[IsAdminOperator])
    def resolve(self, request, pk=None):  # type: ignore
        serializer = ResolveDisputeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.resolve_dispute(
            pk,
            request.user,
            data["resolution"],
            retained_amount=data.get("retained_amount"),
            admin_note=data["admin_note"],
        )
        return Response(
            {
                **DisputeSerializer(result.dispute).data,
                "deposit_status": result.ledger.deposit_status,
                "deposit_skipped": result.ledger.skipped,
            }
        )
