"""API views for deposits and pricing.

The deposit trail is read-only: rows are appended by the deposit ledger
when condition reports complete and disputes are resolved.
"""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.vehicles.models import Vehicle
from shared.domain.exceptions import VehicleNotFound
from shared.infrastructure.config import marketplace_setting

from .models import DepositTransaction
from .pricing import compute_pricing
from .serializers import DepositTransactionSerializer, PriceQuoteSerializer


class DepositTransactionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Deposit operations on reservations the caller takes part in."""

    serializer_class = DepositTransactionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["reservation", "action", "outcome"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        return DepositTransaction.objects.select_related("reservation").filter(
            Q(reservation__renter=user) | Q(reservation__owner=user)
        )

    @action(detail=False, methods=["post"], url_path="quote")
    def quote(self, request):  # type: ignore
        """Price breakdown for renting a vehicle over a date range."""
        serializer = PriceQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            vehicle = Vehicle.objects.get(pk=data["vehicle"], is_active=True)
        except Vehicle.DoesNotExist:
            raise VehicleNotFound()

        days = (data["end_date"] - data["start_date"]).days
        pricing = compute_pricing(days, vehicle.price_per_day)
        return Response(
            {
                "days": days,
                "subtotal": str(pricing.subtotal),
                "service_fee": str(pricing.service_fee),
                "total_amount": str(pricing.total_amount),
                "deposit_amount": str(vehicle.deposit_amount(marketplace_setting("DEFAULT_DEPOSIT_AMOUNT"))),
                "currency": vehicle.currency,
            }
        )
