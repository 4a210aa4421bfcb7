"""
Cancellation & Refund Policy Engine

Pure functions: no database, no clock. Callers pass ``now`` and the local
pickup hour, which makes every staircase step testable in isolation.

Policies (hours measured until the start day's pickup hour):
- flexible: >= 24h full refund, otherwise 50%
- moderate: >= 72h full refund, >= 24h 50%, otherwise nothing
- strict:   >= 168h full refund, >= 72h 50%, otherwise nothing

Unpaid reservations and owner-initiated cancellations always refund 100%.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from decimal import Decimal

from shared.domain.value_objects import round_amount

FULL = Decimal("1")
HALF = Decimal("0.5")
NOTHING = Decimal("0")

# (minimum hours before start, refund fraction, reason), checked top-down
STAIRCASES: dict[str, list[tuple[int, Decimal, str]]] = {
    "flexible": [
        (24, FULL, "Free cancellation (more than 24h before pickup)"),
        (0, HALF, "Late cancellation: 50% refund"),
    ],
    "moderate": [
        (72, FULL, "Free cancellation (more than 3 days before pickup)"),
        (24, HALF, "Cancellation between 3 days and 24h before pickup: 50% refund"),
        (0, NOTHING, "Late cancellation (less than 24h): no refund"),
    ],
    "strict": [
        (168, FULL, "Free cancellation (more than 7 days before pickup)"),
        (72, HALF, "Cancellation between 7 and 3 days before pickup: 50% refund"),
        (0, NOTHING, "Late cancellation (less than 3 days): no refund"),
    ],
}

POLICIES = tuple(STAIRCASES)


@dataclass(frozen=True)
class RefundQuote:
    refund_percent: Decimal
    refund_amount: Decimal
    penalty_amount: Decimal
    reason: str
    is_free: bool

    def as_dict(self) -> dict:
        return {
            "refund_percent": str(self.refund_percent),
            "refund_amount": str(self.refund_amount),
            "penalty_amount": str(self.penalty_amount),
            "reason": self.reason,
            "is_free": self.is_free,
        }


def pickup_instant(start_date: date, pickup_hour: int, tz: tzinfo | None) -> datetime:
    return datetime.combine(start_date, time(hour=pickup_hour), tzinfo=tz)


def hours_until_start(start_date: date, now: datetime, pickup_hour: int = 9, tz: tzinfo | None = None) -> float:
    start = pickup_instant(start_date, pickup_hour, tz or now.tzinfo)
    return (start - now).total_seconds() / 3600


def _quote(total_amount, percent: Decimal, reason: str) -> RefundQuote:
    total = round_amount(total_amount)
    refund = round_amount(total * percent)
    return RefundQuote(
        refund_percent=percent,
        refund_amount=refund,
        penalty_amount=total - refund,
        reason=reason,
        is_free=percent == FULL,
    )


def compute_refund(
    policy: str,
    start_date: date,
    total_amount,
    is_paid: bool,
    now: datetime,
    *,
    pickup_hour: int = 9,
    tz: tzinfo | None = None,
) -> RefundQuote:
    """Refund owed to a renter cancelling at ``now``."""
    if policy not in STAIRCASES:
        raise ValueError(f"Unknown cancellation policy: {policy!r}")

    if not is_paid:
        return _quote(total_amount, FULL, "Cancelled before payment: no charge")

    hours = hours_until_start(start_date, now, pickup_hour, tz)
    for min_hours, percent, reason in STAIRCASES[policy]:
        if hours >= min_hours:
            return _quote(total_amount, percent, reason)

    # Already past the pickup instant: the lowest step applies.
    _, percent, reason = STAIRCASES[policy][-1]
    return _quote(total_amount, percent, reason)


def compute_owner_cancellation_refund(total_amount, is_paid: bool) -> RefundQuote:
    """Owner cancellations refund everything that was paid."""
    return _quote(total_amount if is_paid else 0, FULL, "Cancelled by the owner: full refund")
