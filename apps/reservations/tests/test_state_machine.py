"""Exhaustive checks of the reservation transition table."""

from __future__ import annotations

import itertools

import pytest

from apps.reservations.choices import ReservationStatus as S
from apps.reservations.domain.state_machine import (
    ALLOWED,
    BLOCKING,
    CANCELLABLE,
    TERMINAL,
    assert_status,
    assert_transition,
    can_transition,
)
from shared.domain.exceptions import InvalidStatus, InvalidTransition, UnknownStatus

EDGES = {
    (S.REQUESTED, S.ACCEPTED_PENDING_PAYMENT),
    (S.REQUESTED, S.REJECTED),
    (S.REQUESTED, S.CANCELLED),
    (S.ACCEPTED_PENDING_PAYMENT, S.PICKUP_PENDING),
    (S.ACCEPTED_PENDING_PAYMENT, S.CANCELLED),
    (S.PICKUP_PENDING, S.IN_PROGRESS),
    (S.PICKUP_PENDING, S.CANCELLED),
    (S.IN_PROGRESS, S.DROPOFF_PENDING),
    (S.DROPOFF_PENDING, S.COMPLETED),
    (S.DROPOFF_PENDING, S.DISPUTED),
    (S.COMPLETED, S.DISPUTED),
    (S.DISPUTED, S.COMPLETED),
}


@pytest.mark.parametrize("current,target", list(itertools.product(S.values, S.values)))
def test_every_pair_follows_the_table(current, target):
    expected = (current, target) in EDGES
    assert can_transition(current, target) is expected
    if expected:
        assert_transition(current, target)
    else:
        with pytest.raises(InvalidTransition):
            assert_transition(current, target)


def test_table_covers_every_status():
    assert set(ALLOWED) == set(S.values)


def test_unknown_status_is_rejected():
    with pytest.raises(UnknownStatus):
        assert_transition("teleported", S.COMPLETED)
    with pytest.raises(UnknownStatus):
        assert_transition(S.REQUESTED, "teleported")


def test_rejected_and_cancelled_have_no_way_out():
    assert not ALLOWED[S.REJECTED]
    assert not ALLOWED[S.CANCELLED]
    assert TERMINAL == {S.COMPLETED, S.REJECTED, S.CANCELLED}


def test_blocking_statuses():
    assert S.DISPUTED in BLOCKING
    assert not BLOCKING & {S.COMPLETED, S.REJECTED, S.CANCELLED}


def test_cancellable_statuses_can_reach_cancelled():
    assert all(can_transition(status, S.CANCELLED) for status in CANCELLABLE)


def test_assert_status():
    assert_status(S.REQUESTED, {S.REQUESTED})
    with pytest.raises(InvalidStatus):
        assert_status(S.IN_PROGRESS, CANCELLABLE)
