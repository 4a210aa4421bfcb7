"""API views for condition reports."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.parsers import FormParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.permissions import IsAdminOperator

from . import services
from .models import ConditionReport
from .serializers import (
    ConditionReportSerializer,
    ReportQuerySerializer,
    SubmitReportSerializer,
    UploadSerializer,
)


class ConditionReportViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def create(self, request):  # type: ignore
        serializer = SubmitReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.submit(
            data["reservation"],
            request.user,
            data["phase"],
            data["required_photos"],
            detail_photos=data["detail_photos"],
            video_360_ref=data["video_360_ref"],
            role=data.get("role"),
        )
        return Response(
            {
                "report": ConditionReportSerializer(result.report).data,
                "phase_completed": result.phase_completed,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="can-submit")
    def can_submit(self, request):  # type: ignore
        serializer = ReportQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response(services.can_submit(data["reservation"], request.user, data["phase"]))

    @action(detail=False, methods=["get"])
    def report(self, request):  # type: ignore
        """One report with display URLs."""
        serializer = ReportQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response(
            services.report_with_urls(data["reservation"], request.user, data["phase"], data.get("role"))
        )

    @action(detail=False, methods=["post"], parser_classes=[MultiPartParser, FormParser])
    def uploads(self, request):  # type: ignore
        serializer = UploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ref = services.store_upload(
            serializer.validated_data["reservation"],
            request.user,
            serializer.validated_data["file"],
        )
        return Response({"ref": ref, "url": services.resolve_url(ref)}, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="admin", permission_classes=[IsAdminOperator])
    def admin_list(self, request):  # type: ignore
        """Operator moderation queue, newest first."""
        reports = ConditionReport.objects.select_related("reservation")
        phase = request.query_params.get("phase")
        if phase:
            reports = reports.filter(phase=phase)
        return Response([services.serialize_report(report) for report in reports[:100]])
