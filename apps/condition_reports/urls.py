"""URL routing for condition reports."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ConditionReportViewSet

router = DefaultRouter()
router.register(r"", ConditionReportViewSet, basename="condition-report")

urlpatterns = [
    path("", include(router.urls)),
]
