"""URL routing for reservation conversations."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ReservationChatViewSet, ThreadViewSet

router = DefaultRouter()
router.register(r"threads", ThreadViewSet, basename="chat-thread")
router.register(r"reservations", ReservationChatViewSet, basename="reservation-chat")

urlpatterns = [
    path("", include(router.urls)),
]
