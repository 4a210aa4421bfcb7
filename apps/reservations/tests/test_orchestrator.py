"""Transition orchestrator and event store."""

from __future__ import annotations

from unittest import mock

from django.test import TestCase

from apps.chat.models import Message
from apps.reservations.application import event_store
from apps.reservations.application.orchestrator import transition
from apps.reservations.choices import EventType, PaymentStatus
from apps.reservations.choices import ReservationStatus as S
from apps.reservations.models import Reservation, ReservationEvent
from shared.domain.exceptions import ConcurrentModification, InvalidTransition, ReservationNotFound
from shared.tests.factories import make_reservation


class TransitionTests(TestCase):
    def setUp(self) -> None:
        self.reservation = make_reservation()

    def test_transition_bumps_version_and_emits(self) -> None:
        result = transition(
            self.reservation.pk,
            to_status=S.ACCEPTED_PENDING_PAYMENT,
            event_type=EventType.RESERVATION_ACCEPTED,
            actor_user_id=self.reservation.owner_id,
        )

        self.assertTrue(result.changed)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, S.ACCEPTED_PENDING_PAYMENT)
        self.assertEqual(self.reservation.version, 2)
        self.assertEqual(result.event.idempotency_key, f"res:{self.reservation.pk}:reservation_accepted")

    def test_repeated_transition_is_a_no_op(self) -> None:
        kwargs = dict(
            to_status=S.ACCEPTED_PENDING_PAYMENT,
            event_type=EventType.RESERVATION_ACCEPTED,
            actor_user_id=self.reservation.owner_id,
        )
        transition(self.reservation.pk, **kwargs)
        second = transition(self.reservation.pk, **kwargs)

        self.assertFalse(second.changed)
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.version, 2)
        self.assertEqual(
            ReservationEvent.objects.filter(reservation=self.reservation, type=EventType.RESERVATION_ACCEPTED).count(),
            1,
        )

    def test_illegal_edge_is_refused(self) -> None:
        with self.assertRaises(InvalidTransition):
            transition(
                self.reservation.pk,
                to_status=S.COMPLETED,
                event_type=EventType.CHECKOUT_COMPLETED,
                actor_user_id="system",
            )
        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.status, S.REQUESTED)
        self.assertEqual(self.reservation.version, 1)

    def test_same_status_patch_skips_edge_check(self) -> None:
        result = transition(
            self.reservation.pk,
            to_status=S.REQUESTED,
            event_type=EventType.PAYMENT_INITIALIZED,
            actor_user_id="system",
            patch={"payment_status": PaymentStatus.REQUIRES_ACTION},
        )

        self.assertTrue(result.changed)
        self.assertEqual(result.reservation.version, 2)

    def test_stale_expected_version_is_rejected(self) -> None:
        Reservation.objects.filter(pk=self.reservation.pk).update(version=5)

        with self.assertRaises(ConcurrentModification):
            transition(
                self.reservation.pk,
                to_status=S.REJECTED,
                event_type=EventType.RESERVATION_REJECTED,
                actor_user_id=self.reservation.owner_id,
                expected_version=1,
            )

    def test_missing_reservation(self) -> None:
        with self.assertRaises(ReservationNotFound):
            transition(0, to_status=S.REJECTED, event_type=EventType.RESERVATION_REJECTED, actor_user_id="x")


class EventStoreTests(TestCase):
    def setUp(self) -> None:
        self.reservation = make_reservation()

    def test_same_key_stores_and_projects_once(self) -> None:
        messages_before = Message.objects.filter(thread__reservation=self.reservation).count()

        first = event_store.emit(self.reservation, EventType.RESERVATION_REJECTED, "system", idempotency_key="k-1")
        second = event_store.emit(self.reservation, EventType.RESERVATION_REJECTED, "system", idempotency_key="k-1")

        self.assertTrue(first.created)
        self.assertFalse(second.created)
        self.assertEqual(first.event.pk, second.event.pk)
        self.assertEqual(ReservationEvent.objects.filter(idempotency_key="k-1").count(), 1)
        self.assertEqual(
            Message.objects.filter(thread__reservation=self.reservation).count(),
            messages_before + 1,
        )
        self.assertEqual(Message.objects.filter(event_key=f"event:{first.event.pk}").count(), 1)

    def test_last_event(self) -> None:
        event = event_store.last_event(self.reservation, EventType.RESERVATION_CREATED)

        self.assertIsNotNone(event)
        self.assertEqual(event.actor_user_id, str(self.reservation.renter_id))
        self.assertIsNone(event_store.last_event(self.reservation, EventType.DISPUTE_OPENED))

    def test_insert_race_returns_stored_event(self) -> None:
        stored = event_store.emit(self.reservation, EventType.RESERVATION_REJECTED, "system", idempotency_key="k-2")
        messages_before = Message.objects.filter(thread__reservation=self.reservation).count()

        # Another transaction inserted the key after the existence check ran.
        with mock.patch.object(ReservationEvent.objects, "filter") as lookup:
            lookup.return_value.first.return_value = None
            result = event_store.emit(self.reservation, EventType.RESERVATION_REJECTED, "system", idempotency_key="k-2")

        self.assertFalse(result.created)
        self.assertEqual(result.event.pk, stored.event.pk)
        self.assertEqual(ReservationEvent.objects.filter(idempotency_key="k-2").count(), 1)
        self.assertEqual(Message.objects.filter(thread__reservation=self.reservation).count(), messages_before)
