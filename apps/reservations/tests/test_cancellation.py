"""Refund staircase checks. No database involved."""

from __future__ import annotations

from datetime import date, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.reservations.domain.cancellation import (
    compute_owner_cancellation_refund,
    compute_refund,
    hours_until_start,
    pickup_instant,
)

START = date(2030, 6, 15)
UTC = dt_timezone.utc


def at(hours_before: float):
    return pickup_instant(START, 9, UTC) - timedelta(hours=hours_before)


def refund(policy, hours_before, total=1000, is_paid=True):
    return compute_refund(policy, START, total, is_paid, at(hours_before), pickup_hour=9, tz=UTC)


@pytest.mark.parametrize(
    "hours_before,percent",
    [(80, Decimal("1")), (50, Decimal("0.5")), (10, Decimal("0"))],
)
def test_moderate_staircase(hours_before, percent):
    quote = refund("moderate", hours_before)
    assert quote.refund_percent == percent
    assert quote.refund_amount == Decimal("1000") * percent
    assert quote.refund_amount + quote.penalty_amount == Decimal("1000")


@pytest.mark.parametrize(
    "policy,hours_before,percent",
    [
        ("flexible", 30, Decimal("1")),
        ("flexible", 5, Decimal("0.5")),
        ("strict", 200, Decimal("1")),
        ("strict", 100, Decimal("0.5")),
        ("strict", 48, Decimal("0")),
    ],
)
def test_other_tiers(policy, hours_before, percent):
    assert refund(policy, hours_before).refund_percent == percent


def test_step_boundaries_are_inclusive():
    assert refund("moderate", 72).refund_percent == Decimal("1")
    assert refund("moderate", 24).refund_percent == Decimal("0.5")


def test_after_pickup_lowest_step_applies():
    assert refund("flexible", -5).refund_percent == Decimal("0.5")
    assert refund("moderate", -5).refund_percent == Decimal("0")


@pytest.mark.parametrize("policy", ["flexible", "moderate", "strict"])
@pytest.mark.parametrize("hours_before", [500, 50, 1, -10])
def test_unpaid_always_full(policy, hours_before):
    quote = refund(policy, hours_before, is_paid=False)
    assert quote.refund_percent == Decimal("1")
    assert quote.is_free


def test_amounts_are_rounded_to_whole_units():
    quote = refund("moderate", 50, total=Decimal("1001"))
    assert quote.refund_amount == Decimal("501")
    assert quote.penalty_amount == Decimal("500")


def test_owner_cancellation():
    paid = compute_owner_cancellation_refund(Decimal("1620"), is_paid=True)
    assert paid.refund_percent == Decimal("1")
    assert paid.refund_amount == Decimal("1620")
    unpaid = compute_owner_cancellation_refund(Decimal("1620"), is_paid=False)
    assert unpaid.refund_amount == Decimal("0")


def test_unknown_policy():
    with pytest.raises(ValueError):
        refund("lenient", 100)


def test_hours_until_start_uses_pickup_hour():
    assert hours_until_start(START, at(12), pickup_hour=9, tz=UTC) == pytest.approx(12)
