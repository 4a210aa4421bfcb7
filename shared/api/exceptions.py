"""DRF exception handler rendering domain errors as ``{"code", "detail"}``."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import DomainError, Forbidden, InfrastructureError, Unauthenticated

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):  # type: ignore
    if isinstance(exc, DomainError):
        logger.info(f"Domain error {exc.code}: {exc.detail}")
        return Response({"code": exc.code, "detail": exc.detail, **exc.context}, status=exc.status_code)

    if isinstance(exc, InfrastructureError):
        logger.error(f"Infrastructure fault {exc.code}: {exc.detail}", exc_info=exc)
        return Response(
            {"code": exc.code, "detail": exc.detail},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and "code" not in response.data:
        default_code = getattr(exc, "default_code", "error")
        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            default_code = Unauthenticated.code
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            default_code = Forbidden.code
        response.data = {"code": default_code, **response.data}
    return response
