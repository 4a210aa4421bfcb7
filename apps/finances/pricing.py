"""
Reservation pricing

The renter pays the rental plus a service fee; the owner receives the
rental minus a commission. Example, 5 days at 300:

    subtotal          1500
    service fee (8%)   120  -> renter pays 1620
    commission (2%)     30  -> owner receives 1470
    platform keeps     150
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.value_objects import Money
from shared.infrastructure.config import marketplace_rate, marketplace_setting


@dataclass(frozen=True)
class Pricing:
    subtotal: Decimal
    service_fee: Decimal
    owner_commission: Decimal
    total_amount: Decimal
    owner_payout: Decimal

    @property
    def commission_amount(self) -> Decimal:
        """Platform revenue: service fee plus owner commission."""
        return self.service_fee + self.owner_commission


def compute_pricing(
    days: int,
    price_per_day,
    *,
    service_fee_rate: Decimal | None = None,
    commission_rate: Decimal | None = None,
) -> Pricing:
    if service_fee_rate is None:
        service_fee_rate = marketplace_rate("RENTER_SERVICE_FEE_RATE")
    if commission_rate is None:
        commission_rate = marketplace_rate("OWNER_COMMISSION_RATE")

    currency = marketplace_setting("DEFAULT_CURRENCY")
    # Rounded once on the whole rental, not per day.
    subtotal = Money(Decimal(days) * Decimal(str(price_per_day)), currency)
    service_fee = subtotal * service_fee_rate
    owner_commission = subtotal * commission_rate
    return Pricing(
        subtotal=subtotal.amount,
        service_fee=service_fee.amount,
        owner_commission=owner_commission.amount,
        total_amount=(subtotal + service_fee).amount,
        owner_payout=(subtotal - owner_commission).amount,
    )
