"""
Deposit ledger

    none -> held -> released | retained | partially_retained

Every operation reads the current deposit status under the reservation
row lock and reports ``skipped=True`` instead of failing when there is
nothing to do, so replays after a crash are harmless. Status changes go
through the transition orchestrator as same-status patches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction  # type: ignore

from apps.reservations.application.orchestrator import lock_reservation, transition
from apps.reservations.choices import SYSTEM_ACTOR, DepositStatus, EventType
from shared.domain.exceptions import InvalidRetainedAmount
from shared.domain.value_objects import round_amount

from .gateways import PaymentGateway, customer_for, get_gateway
from .models import DepositTransaction

logger = logging.getLogger(__name__)


@dataclass
class LedgerResult:
    skipped: bool
    deposit_status: str
    amount: Decimal = Decimal("0")


class DepositLedger:
    def __init__(self, gateway: PaymentGateway | None = None):
        self.gateway = gateway or get_gateway()

    def _record(self, reservation, action, result: LedgerResult, actor_user_id) -> LedgerResult:
        DepositTransaction.objects.create(
            reservation=reservation,
            action=action,
            outcome=DepositTransaction.Outcome.SKIPPED if result.skipped else DepositTransaction.Outcome.APPLIED,
            amount=result.amount,
            currency=reservation.currency,
            deposit_status=result.deposit_status,
            actor_user_id=str(actor_user_id),
        )
        return result

    def _skip(self, reservation, action, actor_user_id) -> LedgerResult:
        logger.warning(
            f"Deposit {action} skipped for reservation {reservation.pk}: deposit is {reservation.deposit_status}"
        )
        return self._record(
            reservation, action, LedgerResult(skipped=True, deposit_status=reservation.deposit_status), actor_user_id
        )

    def hold(self, reservation_id, actor_user_id=SYSTEM_ACTOR) -> LedgerResult:
        """Authorize the deposit on the renter's card."""
        with transaction.atomic():
            reservation = lock_reservation(reservation_id)
            if reservation.deposit_status != DepositStatus.NONE:
                return self._skip(reservation, DepositTransaction.Action.HOLD, actor_user_id)

            amount = reservation.deposit_amount
            hold_ref = self.gateway.authorize_hold(
                customer_for(self.gateway, reservation.renter),
                amount,
                reservation.currency,
                reference=f"reservation-{reservation.pk}",
            )
            transition(
                reservation.pk,
                to_status=reservation.status,
                event_type=EventType.DEPOSIT_HELD,
                actor_user_id=actor_user_id,
                patch={"deposit_status": DepositStatus.HELD, "deposit_hold_ref": hold_ref},
                payload={"amount": str(amount), "currency": reservation.currency},
                idempotency_key=f"pay:{reservation.pk}:deposit_held",
            )
            logger.info(f"Deposit of {amount} {reservation.currency} held for reservation {reservation.pk}")
            return self._record(
                reservation,
                DepositTransaction.Action.HOLD,
                LedgerResult(skipped=False, deposit_status=DepositStatus.HELD, amount=amount),
                actor_user_id,
            )

    def release(self, reservation_id, actor_user_id=SYSTEM_ACTOR) -> LedgerResult:
        """Cancel the hold; the renter is not charged."""
        with transaction.atomic():
            reservation = lock_reservation(reservation_id)
            if reservation.deposit_status != DepositStatus.HELD:
                return self._skip(reservation, DepositTransaction.Action.RELEASE, actor_user_id)

            self.gateway.cancel_hold(reservation.deposit_hold_ref)
            transition(
                reservation.pk,
                to_status=reservation.status,
                event_type=EventType.DEPOSIT_RELEASED,
                actor_user_id=actor_user_id,
                patch={"deposit_status": DepositStatus.RELEASED},
                payload={"amount": str(reservation.deposit_amount)},
                idempotency_key=f"pay:{reservation.pk}:deposit_released",
            )
            logger.info(f"Deposit released for reservation {reservation.pk}")
            return self._record(
                reservation,
                DepositTransaction.Action.RELEASE,
                LedgerResult(skipped=False, deposit_status=DepositStatus.RELEASED),
                actor_user_id,
            )

    def retain(self, reservation_id, amount=None, actor_user_id=SYSTEM_ACTOR) -> LedgerResult:
        """Capture ``amount`` of the hold, or all of it when ``amount`` is None."""
        with transaction.atomic():
            reservation = lock_reservation(reservation_id)
            if reservation.deposit_status != DepositStatus.HELD:
                return self._skip(reservation, DepositTransaction.Action.RETAIN, actor_user_id)

            deposit = reservation.deposit_amount
            captured = deposit if amount is None else round_amount(amount)
            if captured <= 0 or captured > deposit:
                raise InvalidRetainedAmount(f"Retained amount must be between 1 and {deposit}.")

            new_status = DepositStatus.RETAINED if captured == deposit else DepositStatus.PARTIALLY_RETAINED
            self.gateway.capture_hold(reservation.deposit_hold_ref, captured)
            transition(
                reservation.pk,
                to_status=reservation.status,
                event_type=EventType.DEPOSIT_RETAINED,
                actor_user_id=actor_user_id,
                patch={"deposit_status": new_status},
                payload={"amount": str(captured), "deposit_amount": str(deposit)},
                idempotency_key=f"pay:{reservation.pk}:deposit_retained",
            )
            logger.info(f"Deposit {new_status} for reservation {reservation.pk}: captured {captured}")
            return self._record(
                reservation,
                DepositTransaction.Action.RETAIN,
                LedgerResult(skipped=False, deposit_status=new_status, amount=captured),
                actor_user_id,
            )
