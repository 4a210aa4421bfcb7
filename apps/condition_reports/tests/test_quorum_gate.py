"""Condition report submission and the two-report quorum."""

from __future__ import annotations

from unittest import mock

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.condition_reports import services
from apps.condition_reports.models import ConditionReport
from apps.finances.gateways import PaymentGateway
from apps.finances.ledger import DepositLedger
from apps.finances.models import DepositTransaction
from apps.reservations.choices import DepositStatus
from apps.reservations.choices import ReservationStatus as S
from shared.domain.exceptions import (
    AlreadySubmitted,
    Forbidden,
    InvalidStatus,
    MissingRequiredPhotos,
    TooManyDetailPhotos,
)
from shared.tests.factories import PHOTOS, advance, make_reservation, make_user


class QuorumGateTests(TestCase):
    def setUp(self) -> None:
        self.reservation = make_reservation(S.PICKUP_PENDING)
        self.owner = self.reservation.owner
        self.renter = self.reservation.renter
        self.gateway = mock.Mock(spec=PaymentGateway)
        self.gateway.ensure_customer.return_value = "cus_renter"
        self.gateway.authorize_hold.return_value = "hold_1"
        self.ledger = DepositLedger(gateway=self.gateway)

    def _submit(self, user, phase="checkin", **kwargs):
        kwargs.setdefault("ledger", self.ledger)
        return services.submit(self.reservation.pk, user, phase, dict(PHOTOS), **kwargs)

    def test_single_report_changes_nothing(self) -> None:
        result = self._submit(self.owner)

        self.assertFalse(result.phase_completed)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, S.PICKUP_PENDING)
        self.gateway.authorize_hold.assert_not_called()

    def test_second_report_starts_rental_and_holds_deposit_once(self) -> None:
        self._submit(self.owner)
        result = self._submit(self.renter)

        self.assertTrue(result.phase_completed)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, S.IN_PROGRESS)
        self.assertEqual(self.reservation.deposit_status, DepositStatus.HELD)
        self.assertEqual(self.reservation.deposit_hold_ref, "hold_1")
        self.gateway.authorize_hold.assert_called_once()
        customer, amount, _ = self.gateway.authorize_hold.call_args.args
        self.assertEqual(customer, "cus_renter")
        self.gateway.ensure_customer.assert_called_once_with(str(self.renter.pk), self.renter.email)
        self.assertEqual(amount, self.reservation.deposit_amount)
        self.assertEqual(self.gateway.authorize_hold.call_args.kwargs["reference"], f"reservation-{self.reservation.pk}")
        self.assertEqual(self.reservation.events.filter(type="checkin_completed").count(), 1)
        self.assertEqual(self.reservation.events.filter(type="condition_report_submitted").count(), 2)

    def test_completing_an_already_advanced_phase_is_a_no_op(self) -> None:
        self._submit(self.owner)
        self._submit(self.renter)

        self.assertFalse(services.complete_phase(self.reservation.pk, "checkin", self.ledger))
        self.gateway.authorize_hold.assert_called_once()

    def test_checkout_releases_deposit(self) -> None:
        self._submit(self.owner)
        self._submit(self.renter)
        advance(self.reservation, S.DROPOFF_PENDING)

        self._submit(self.renter, "checkout")
        result = self._submit(self.owner, "checkout")

        self.assertTrue(result.phase_completed)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, S.COMPLETED)
        self.assertEqual(self.reservation.deposit_status, DepositStatus.RELEASED)
        self.gateway.cancel_hold.assert_called_once_with("hold_1")
        self.assertEqual(
            list(DepositTransaction.objects.values_list("action", flat=True).order_by("id")),
            ["hold", "release"],
        )

    def test_missing_slots_are_listed(self) -> None:
        photos = dict(PHOTOS)
        del photos["front"]
        photos["dashboard"] = ""

        with self.assertRaises(MissingRequiredPhotos) as ctx:
            services.submit(self.reservation.pk, self.owner, "checkin", photos, ledger=self.ledger)

        self.assertEqual(set(ctx.exception.context["missing_slots"]), {"front", "dashboard"})
        self.assertFalse(ConditionReport.objects.exists())

    def test_too_many_detail_photos(self) -> None:
        details = [{"ref": f"d{i}.jpg"} for i in range(7)]

        with self.assertRaises(TooManyDetailPhotos):
            self._submit(self.owner, detail_photos=details)

    def test_stated_role_must_match(self) -> None:
        with self.assertRaises(Forbidden):
            self._submit(self.owner, role="renter")

    def test_outsider_cannot_submit(self) -> None:
        with self.assertRaises(Forbidden):
            self._submit(make_user())

    def test_one_report_per_role(self) -> None:
        self._submit(self.owner)

        with self.assertRaises(AlreadySubmitted):
            self._submit(self.owner)

    def test_duplicate_insert_is_refused_and_quorum_fires_once(self) -> None:
        self._submit(self.owner)

        # The owner's second report passes the existence check and hits the unique constraint.
        with mock.patch.object(ConditionReport.objects, "filter") as lookup:
            lookup.return_value.exists.return_value = False
            with self.assertRaises(AlreadySubmitted):
                self._submit(self.owner)

        self.assertEqual(self.reservation.events.filter(type="condition_report_submitted").count(), 1)
        self.gateway.authorize_hold.assert_not_called()

        self._submit(self.renter)

        self.assertEqual(ConditionReport.objects.filter(reservation=self.reservation).count(), 2)
        self.assertEqual(self.reservation.events.filter(type="checkin_completed").count(), 1)
        self.assertEqual(self.reservation.events.filter(type="deposit_held").count(), 1)
        self.gateway.authorize_hold.assert_called_once()

    def test_wrong_phase_for_status(self) -> None:
        with self.assertRaises(InvalidStatus):
            self._submit(self.owner, "checkout")

    def test_can_submit(self) -> None:
        self.assertTrue(services.can_submit(self.reservation.pk, self.owner, "checkin")["can_submit"])

        self._submit(self.owner)
        answer = services.can_submit(self.reservation.pk, self.owner, "checkin")
        self.assertEqual(answer["reason"], "AlreadySubmitted")

        answer = services.can_submit(self.reservation.pk, self.renter, "checkout")
        self.assertEqual(answer["reason"], "InvalidStatus")
        self.assertEqual(answer["current_status"], S.PICKUP_PENDING)

    def test_report_urls(self) -> None:
        self._submit(self.owner, detail_photos=[{"ref": "condition_reports/test/scratch.jpg", "note": "scratch"}])

        own = services.report_with_urls(self.reservation.pk, self.owner, "checkin")
        other = services.report_with_urls(self.reservation.pk, self.renter, "checkin")

        self.assertEqual(own["role"], "owner")
        self.assertTrue(own["required_urls"]["front"].endswith("front.jpg"))
        self.assertEqual(own["detail_urls"][0]["note"], "scratch")
        self.assertIsNone(other)


class ConditionReportAPITests(APITestCase):
    def setUp(self) -> None:
        self.reservation = make_reservation(S.PICKUP_PENDING)

    def _payload(self, **extra) -> dict:
        return {
            "reservation": self.reservation.pk,
            "phase": "checkin",
            "required_photos": dict(PHOTOS),
            **extra,
        }

    def test_submit_returns_report(self) -> None:
        self.client.force_authenticate(self.reservation.owner)

        response = self.client.post(reverse("condition-report-list"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["report"]["role"], "owner")
        self.assertFalse(response.data["phase_completed"])

    def test_missing_photos_code(self) -> None:
        self.client.force_authenticate(self.reservation.renter)

        response = self.client.post(
            reverse("condition-report-list"), self._payload(required_photos={}), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "MissingRequiredPhotos")
        self.assertEqual(len(response.data["missing_slots"]), 9)

    def test_admin_queue_requires_operator(self) -> None:
        self.client.force_authenticate(self.reservation.owner)

        response = self.client.get(reverse("condition-report-admin-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
