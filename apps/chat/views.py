"""API views for reservation conversations.

Participants read the thread of a reservation they take part in and may
post plain text. Everything else in a thread is written by the projector.
"""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.reservations.application.command_handlers import get_reservation_for

from .models import Thread
from .projector import ensure_thread, post_user_message, refresh_current_actions, visible_audiences
from .serializers import MessageSerializer, PostMessageSerializer, ThreadSerializer


class ThreadViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """The caller's threads, most recent activity first."""

    serializer_class = ThreadSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        return Thread.objects.select_related("reservation", "reservation__vehicle").filter(
            Q(renter=user) | Q(owner=user)
        )


class ReservationChatViewSet(viewsets.ViewSet):
    """Thread, messages and current actions of one reservation (``pk`` is the reservation id)."""

    permission_classes = [permissions.IsAuthenticated]

    def retrieve(self, request, pk=None):  # type: ignore
        reservation, _ = get_reservation_for(pk, request.user)
        return Response(ThreadSerializer(ensure_thread(reservation)).data)

    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):  # type: ignore
        reservation, role = get_reservation_for(pk, request.user)
        thread = ensure_thread(reservation)

        if request.method == "POST":
            serializer = PostMessageSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            message = post_user_message(reservation, request.user, serializer.validated_data["text"])
            return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

        messages = thread.messages.select_related("author").filter(audience__in=visible_audiences(role))
        return Response(MessageSerializer(messages, many=True).data)

    @action(detail=True, methods=["get"], url_path="actions")
    def current_actions(self, request, pk=None):  # type: ignore
        reservation, role = get_reservation_for(pk, request.user)
        current = getattr(ensure_thread(reservation), "current_actions", None)
        if current is None:
            current = refresh_current_actions(reservation)
        return Response(
            {
                "reservation_id": reservation.pk,
                "status": current.status,
                "actions": [item for item in current.actions if item.get("audience") in visible_audiences(role)],
            }
        )
