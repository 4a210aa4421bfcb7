"""API views for the reservation domain.

Every state change goes through a command handler; the viewset only maps
HTTP requests onto commands and renders the resulting reservation.
"""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application import command_handlers as commands
from .domain.cancellation import compute_owner_cancellation_refund
from .serializers import (
    CancelReservationSerializer,
    ReservationCreateSerializer,
    ReservationEventSerializer,
    ReservationSerializer,
)


class ReservationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Reservations the caller takes part in, as renter or owner."""

    serializer_class = ReservationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "vehicle", "payment_status", "deposit_status"]

    def get_queryset(self):  # type: ignore
        return commands.reservations_for_user(self.request.user, self.request.query_params.get("role"))

    def get_object(self):  # type: ignore
        reservation, _ = commands.get_reservation_for(self.kwargs["pk"], self.request.user)
        return reservation

    def _render(self, result, status_code=status.HTTP_200_OK):
        reservation = getattr(result, "reservation", result)
        return Response(ReservationSerializer(reservation).data, status=status_code)

    def retrieve(self, request, pk=None):  # type: ignore
        return self._render(self.get_object())

    def create(self, request):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        reservation = commands.CreateReservationHandler().handle(
            commands.CreateReservationCommand(
                vehicle_id=data["vehicle"],
                renter=request.user,
                start_date=data["start_date"],
                end_date=data["end_date"],
            )
        )
        return self._render(reservation, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):  # type: ignore
        result = commands.AcceptReservationHandler().handle(
            commands.AcceptReservationCommand(reservation_id=pk, actor=request.user)
        )
        return self._render(result)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):  # type: ignore
        result = commands.RejectReservationHandler().handle(
            commands.RejectReservationCommand(reservation_id=pk, actor=request.user)
        )
        return self._render(result)

    @action(detail=True, methods=["post"], url_path="init-payment")
    def init_payment(self, request, pk=None):  # type: ignore
        result = commands.InitPaymentHandler().handle(
            commands.InitPaymentCommand(reservation_id=pk, actor=request.user)
        )
        return self._render(result)

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request, pk=None):  # type: ignore
        result = commands.ConfirmPaymentHandler().handle(
            commands.ConfirmPaymentCommand(reservation_id=pk, actor=request.user)
        )
        return self._render(result)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelReservationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = commands.CancelReservationHandler().handle(
            commands.CancelReservationCommand(
                reservation_id=pk,
                actor=request.user,
                note=serializer.validated_data["note"],
            )
        )
        return self._render(result)

    @action(detail=True, methods=["post"], url_path="trigger-return")
    def trigger_return(self, request, pk=None):  # type: ignore
        result = commands.TriggerReturnHandler().handle(
            commands.TriggerReturnCommand(reservation_id=pk, actor=request.user)
        )
        return self._render(result)

    @action(detail=True, methods=["get"], url_path="cancellation-quote")
    def cancellation_quote(self, request, pk=None):  # type: ignore
        """Refund the caller would get by cancelling now. Changes nothing."""
        reservation, role = commands.get_reservation_for(pk, request.user)
        if role == "owner":
            quote = compute_owner_cancellation_refund(reservation.total_amount, reservation.is_paid)
        else:
            quote = commands.quote_renter_cancellation(reservation)
        return Response({"reservation_id": reservation.pk, "role": role, **quote.as_dict()})

    @action(detail=True, methods=["get"])
    def role(self, request, pk=None):  # type: ignore
        reservation, role = commands.get_reservation_for(pk, request.user)
        return Response({"reservation_id": reservation.pk, "role": role})

    @action(detail=True, methods=["get"])
    def events(self, request, pk=None):  # type: ignore
        reservation = self.get_object()
        return Response(ReservationEventSerializer(reservation.events.all(), many=True).data)

    @action(detail=False, methods=["get"], url_path=r"vehicle/(?P<vehicle_id>\d+)/blocking")
    def blocking(self, request, vehicle_id=None):  # type: ignore
        """Date ranges during which the vehicle is held by a reservation."""
        return Response({"vehicle_id": int(vehicle_id), "ranges": commands.blocking_ranges(vehicle_id)})
