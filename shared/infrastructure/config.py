"""Access to the ``MARKETPLACE`` settings block."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings  # type: ignore
from django.core.exceptions import ImproperlyConfigured  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

DEFAULTS: dict[str, Any] = {
    "PAYMENT_TIMEOUT_MINUTES": 30,
    "DISPUTE_WINDOW_HOURS": 48,
    "REQUEST_COOLDOWN_MINUTES": 60,
    "MAX_RENTAL_DAYS": 90,
    "PICKUP_HOUR": 9,
    "DEFAULT_CURRENCY": "MAD",
    "DEFAULT_DEPOSIT_AMOUNT": 3000,
    "RENTER_SERVICE_FEE_RATE": "0.08",
    "OWNER_COMMISSION_RATE": "0.02",
    "DEFAULT_CANCELLATION_POLICY": "moderate",
    "REQUIRE_KYC": True,
    "ADMIN_USER_ID": "",
    "DEPOSIT_GATEWAY": "apps.finances.gateways.StubPaymentGateway",
    "NOTIFICATION_SINK": "apps.notifications.sinks.InAppNotificationSink",
}


def marketplace_setting(name: str) -> Any:
    """Read one business tunable, falling back to the built-in default."""
    configured = getattr(settings, "MARKETPLACE", {})
    if name in configured:
        return configured[name]
    if name in DEFAULTS:
        return DEFAULTS[name]
    raise ImproperlyConfigured(f"Unknown MARKETPLACE setting: {name}")


def marketplace_rate(name: str) -> Decimal:
    return Decimal(str(marketplace_setting(name)))


def load_component(name: str):
    """Instantiate the class whose dotted path is stored under ``name``."""
    path = marketplace_setting(name)
    try:
        component_class = import_string(path)
    except ImportError as exc:
        raise ImproperlyConfigured(f"MARKETPLACE[{name!r}] points to {path!r}: {exc}") from exc
    return component_class()


def is_admin_operator(user) -> bool:
    """The single static operator allowed to review disputes and reports."""
    admin_id = str(marketplace_setting("ADMIN_USER_ID") or "")
    if not admin_id or user is None or not getattr(user, "is_authenticated", False):
        return False
    return str(user.pk) == admin_id
