"""End-to-end walk through a rental over HTTP, dispute included."""

import pytest
from django.urls import reverse

from apps.reservations.choices import DepositStatus
from apps.reservations.choices import ReservationStatus as S
from shared.tests.factories import PHOTOS

pytestmark = pytest.mark.django_db


def post(client, user, url, data=None):
    client.force_authenticate(user)
    response = client.post(url, data or {}, format="json")
    assert response.status_code in (200, 201), response.data
    return response.data


def submit(client, user, reservation_id, phase):
    return post(
        client,
        user,
        reverse("condition-report-list"),
        {"reservation": reservation_id, "phase": phase, "required_photos": dict(PHOTOS)},
    )


def test_rental_with_damage_dispute(api_client, owner, renter, vehicle, admin_operator):
    reservation = post(
        api_client,
        renter,
        reverse("reservation-list"),
        {"vehicle": vehicle.pk, "start_date": "2031-03-01", "end_date": "2031-03-04"},
    )
    rid = reservation["id"]

    post(api_client, owner, reverse("reservation-accept", args=[rid]))
    post(api_client, renter, reverse("reservation-init-payment", args=[rid]))
    assert post(api_client, renter, reverse("reservation-confirm-payment", args=[rid]))["status"] == S.PICKUP_PENDING

    assert submit(api_client, owner, rid, "checkin")["phase_completed"] is False
    assert submit(api_client, renter, rid, "checkin")["phase_completed"] is True

    returned = post(api_client, renter, reverse("reservation-trigger-return", args=[rid]))
    assert returned["status"] == S.DROPOFF_PENDING
    assert returned["deposit_status"] == DepositStatus.HELD

    submit(api_client, owner, rid, "checkout")
    dispute = post(
        api_client,
        owner,
        reverse("dispute-list"),
        {"reservation": rid, "reason": "damage", "description": "Dent on the driver door."},
    )

    resolved = post(
        api_client,
        admin_operator,
        reverse("dispute-resolve", args=[dispute["id"]]),
        {"resolution": "partial", "retained_amount": "800"},
    )
    assert resolved["status"] == "resolved_partial"
    assert resolved["deposit_status"] == DepositStatus.PARTIALLY_RETAINED

    api_client.force_authenticate(renter)
    final = api_client.get(reverse("reservation-detail", args=[rid])).data
    assert final["status"] == S.COMPLETED
    assert final["deposit_status"] == DepositStatus.PARTIALLY_RETAINED


def test_status_fixture_matches(reservation_in):
    reservation = reservation_in(S.IN_PROGRESS)

    assert reservation.status == S.IN_PROGRESS
    assert reservation.deposit_status == DepositStatus.HELD
    assert reservation.events.filter(type="deposit_held").count() == 1
