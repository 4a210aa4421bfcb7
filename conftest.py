"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient

from shared.tests import factories


@pytest.fixture
def owner(db):
    return factories.make_user("owner")


@pytest.fixture
def renter(db):
    return factories.make_user("renter")


@pytest.fixture
def vehicle(owner):
    return factories.make_vehicle(owner)


@pytest.fixture
def reservation_in(owner, renter, vehicle):
    """Factory: ``reservation_in("pickup_pending")`` returns a reservation in that status."""

    def build(status: str = "requested", **kwargs):
        return factories.make_reservation(status, owner=owner, renter=renter, vehicle=vehicle, **kwargs)

    return build


@pytest.fixture
def admin_operator(db, settings):
    operator = factories.make_user("operator")
    settings.MARKETPLACE = {**settings.MARKETPLACE, "ADMIN_USER_ID": str(operator.pk)}
    return operator


@pytest.fixture
def api_client():
    return APIClient()
