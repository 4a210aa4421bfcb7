"""
Payment gateways

The reservation core only talks to :class:`PaymentGateway`. The stub is
used in development and tests; the Stripe rail talks to the card network
over HTTP with manual-capture payment intents for deposit holds.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from decimal import Decimal

import requests
from django.conf import settings  # type: ignore

from shared.domain.exceptions import GatewayError
from shared.infrastructure.config import load_component

logger = logging.getLogger(__name__)


class PaymentGateway(ABC):
    """Authorize/capture/cancel primitives keyed by customer."""

    @abstractmethod
    def ensure_customer(self, user_id: str, email: str) -> str:
        """Return the gateway customer id for a user, creating it on the first call."""

    # --- rental payment ---
    @abstractmethod
    def create_payment(self, customer: str, amount: Decimal, currency: str, reference: str) -> str:
        """Start a payment and return its reference."""

    @abstractmethod
    def payment_succeeded(self, payment_ref: str) -> bool:
        ...

    @abstractmethod
    def refund_payment(self, payment_ref: str, amount: Decimal) -> str:
        ...

    # --- deposit hold ---
    @abstractmethod
    def authorize_hold(self, customer: str, amount: Decimal, currency: str, reference: str) -> str:
        """Reserve ``amount`` on the customer's saved card without charging it."""

    @abstractmethod
    def cancel_hold(self, hold_ref: str) -> None:
        ...

    @abstractmethod
    def capture_hold(self, hold_ref: str, amount: Decimal) -> None:
        """Charge ``amount`` (at most the held amount) and drop the rest."""


class StubPaymentGateway(PaymentGateway):
    """Accepts everything. References are random and prefixed ``stub_``."""

    def ensure_customer(self, user_id, email):
        return f"stub_cus_{user_id}"

    def create_payment(self, customer, amount, currency, reference):
        payment_ref = f"stub_pi_{uuid.uuid4().hex[:16]}"
        logger.warning(f"Stub payment {payment_ref} created for {reference}: {amount} {currency}")
        return payment_ref

    def payment_succeeded(self, payment_ref):
        return payment_ref.startswith("stub_pi_")

    def refund_payment(self, payment_ref, amount):
        logger.warning(f"Stub refund of {amount} on {payment_ref}")
        return f"stub_re_{uuid.uuid4().hex[:16]}"

    def authorize_hold(self, customer, amount, currency, reference):
        hold_ref = f"stub_hold_{uuid.uuid4().hex[:16]}"
        logger.warning(f"Stub deposit hold {hold_ref} for {reference} (customer {customer}): {amount} {currency}")
        return hold_ref

    def cancel_hold(self, hold_ref):
        logger.warning(f"Stub deposit hold {hold_ref} cancelled")

    def capture_hold(self, hold_ref, amount):
        logger.warning(f"Stub deposit hold {hold_ref} captured: {amount}")


class StripePaymentGateway(PaymentGateway):
    """Stripe payment intents over the REST API."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: int | None = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.base_url = (base_url or settings.STRIPE_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.STRIPE_TIMEOUT_SECONDS

    @staticmethod
    def _minor_units(amount) -> int:
        return int(Decimal(str(amount)) * 100)

    def _post(self, path: str, data: dict | None = None, idempotency_key: str | None = None) -> dict:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        return self._request("post", path, data=data or {}, headers=headers)

    def _request(self, method: str, path: str, **kwargs) -> dict:
        kwargs.setdefault("headers", {"Authorization": f"Bearer {self.api_key}"})
        try:
            response = requests.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Stripe request {method.upper()} {path} failed: {e}")
            raise GatewayError(f"Payment provider unavailable: {e}") from e

    def ensure_customer(self, user_id, email):
        result = self._post(
            "/customers",
            {"email": email, "metadata[user_id]": user_id},
            idempotency_key=f"customer:{user_id}",
        )
        return result["id"]

    def create_payment(self, customer, amount, currency, reference):
        # The card is saved on the customer so the deposit can be held later.
        result = self._post(
            "/payment_intents",
            {
                "amount": self._minor_units(amount),
                "currency": currency.lower(),
                "customer": customer,
                "setup_future_usage": "off_session",
                "metadata[reference]": reference,
            },
            idempotency_key=f"payment:{reference}",
        )
        logger.info(f"Stripe payment intent {result['id']} created for {reference}")
        return result["id"]

    def payment_succeeded(self, payment_ref):
        result = self._request("get", f"/payment_intents/{payment_ref}")
        return result.get("status") == "succeeded"

    def refund_payment(self, payment_ref, amount):
        result = self._post(
            "/refunds",
            {"payment_intent": payment_ref, "amount": self._minor_units(amount)},
            idempotency_key=f"refund:{payment_ref}",
        )
        logger.info(f"Stripe refund {result['id']} of {amount} on {payment_ref}")
        return result["id"]

    def _saved_card(self, customer: str) -> str:
        result = self._request("get", "/payment_methods", params={"customer": customer, "type": "card"})
        cards = result.get("data") or []
        if not cards:
            raise GatewayError(f"Customer {customer} has no saved card for the deposit hold.")
        return cards[0]["id"]

    def authorize_hold(self, customer, amount, currency, reference):
        result = self._post(
            "/payment_intents",
            {
                "amount": self._minor_units(amount),
                "currency": currency.lower(),
                "customer": customer,
                "payment_method": self._saved_card(customer),
                "capture_method": "manual",
                "confirm": "true",
                "off_session": "true",
                "metadata[reference]": reference,
                "metadata[purpose]": "deposit",
            },
            idempotency_key=f"hold:{reference}",
        )
        logger.info(f"Stripe deposit hold {result['id']} authorized for {reference}")
        return result["id"]

    def cancel_hold(self, hold_ref):
        self._post(f"/payment_intents/{hold_ref}/cancel", idempotency_key=f"cancel:{hold_ref}")

    def capture_hold(self, hold_ref, amount):
        self._post(
            f"/payment_intents/{hold_ref}/capture",
            {"amount_to_capture": self._minor_units(amount)},
            idempotency_key=f"capture:{hold_ref}",
        )


def get_gateway() -> PaymentGateway:
    return load_component("DEPOSIT_GATEWAY")


def customer_for(gateway: PaymentGateway, user) -> str:
    """The gateway customer of ``user``, created and stored on first use."""
    if not user.payment_customer_id:
        user.payment_customer_id = gateway.ensure_customer(str(user.pk), user.email)
        user.save(update_fields=["payment_customer_id"])
    return user.payment_customer_id
