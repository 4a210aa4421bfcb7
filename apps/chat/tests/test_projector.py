"""Chat projection: message builders, replay safety and the participant API."""

from __future__ import annotations

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.chat.models import Audience, Message
from apps.chat.projector import (
    build_event_messages,
    compute_current_actions,
    project_event,
)
from apps.reservations.choices import EventType
from apps.reservations.choices import ReservationStatus as S
from shared.tests.factories import make_reservation, make_user

NAMES = {"renter": "Sara", "owner": "Youssef"}


class BuildEventMessagesTests(SimpleTestCase):
    def test_created_splits_by_audience(self) -> None:
        messages = build_event_messages(EventType.RESERVATION_CREATED, {}, NAMES)

        self.assertEqual([m.audience for m in messages], [Audience.RENTER, Audience.OWNER])
        self.assertIn("Youssef", messages[0].text)
        self.assertEqual([a["action"] for a in messages[1].actions], ["ACCEPT", "REJECT"])

    def test_cancellation_text_follows_reason(self) -> None:
        cases = {
            "owner_cancelled": "Reservation cancelled by Youssef.",
            "renter_cancelled": "Reservation cancelled by Sara.",
            "payment_timeout": "Reservation cancelled: payment was not completed in time.",
        }
        for reason, text in cases.items():
            with self.subTest(reason=reason):
                (message,) = build_event_messages(EventType.RESERVATION_CANCELLED, {"reason": reason}, NAMES)
                self.assertEqual(message.text, text)
                self.assertEqual(message.audience, Audience.ALL)

    def test_report_names_the_author(self) -> None:
        (message,) = build_event_messages(
            EventType.CONDITION_REPORT_SUBMITTED, {"role": "owner", "phase": "checkout"}, NAMES
        )
        self.assertEqual(message.text, "Youssef completed the return report.")

    def test_silent_events(self) -> None:
        for event_type in (EventType.PAYMENT_INITIALIZED, EventType.DEPOSIT_HELD, EventType.DEPOSIT_RELEASED):
            with self.subTest(event_type=event_type):
                self.assertEqual(build_event_messages(event_type, {}, NAMES), [])

    def test_unknown_event_type(self) -> None:
        with self.assertRaises(ValueError):
            build_event_messages("teleported", {}, NAMES)

    def test_current_actions(self) -> None:
        self.assertEqual(compute_current_actions(S.COMPLETED), [])
        pending = compute_current_actions(S.ACCEPTED_PENDING_PAYMENT, "requires_action")
        renter_codes = [a["action"] for a in pending if a["audience"] == Audience.RENTER]
        self.assertEqual(renter_codes, ["CONFIRM_PAYMENT", "CANCEL"])


class ProjectionTests(TestCase):
    def test_new_reservation_opens_thread_once(self) -> None:
        reservation = make_reservation()
        thread = reservation.thread

        self.assertEqual(thread.messages.filter(type=Message.Type.WELCOME).count(), 2)
        self.assertEqual(thread.messages.filter(type=Message.Type.SYSTEM).count(), 2)
        self.assertEqual(thread.current_actions.status, S.REQUESTED)

    def test_replaying_an_event_inserts_nothing(self) -> None:
        reservation = make_reservation()
        event = reservation.events.get(type=EventType.RESERVATION_CREATED)
        before = Message.objects.count()

        self.assertEqual(project_event(event), [])
        self.assertEqual(Message.objects.count(), before)

    def test_actions_follow_status(self) -> None:
        reservation = make_reservation(S.PICKUP_PENDING)

        self.assertEqual(reservation.thread.current_actions.status, S.PICKUP_PENDING)
        self.assertEqual(
            {a["action"] for a in reservation.thread.current_actions.actions},
            {"DO_CHECKIN"},
        )


class ReservationChatAPITests(APITestCase):
    def setUp(self) -> None:
        self.reservation = make_reservation()
        self.renter = self.reservation.renter
        self.owner = self.reservation.owner
        self.messages_url = reverse("reservation-chat-messages", args=[self.reservation.pk])

    def test_each_side_sees_its_own_messages(self) -> None:
        self.client.force_authenticate(self.renter)
        renter_view = self.client.get(self.messages_url)
        self.client.force_authenticate(self.owner)
        owner_view = self.client.get(self.messages_url)

        self.assertEqual({m["audience"] for m in renter_view.data}, {Audience.RENTER})
        self.assertEqual({m["audience"] for m in owner_view.data}, {Audience.OWNER})
        self.assertEqual(len(renter_view.data), 2)

    def test_posted_message_reaches_both(self) -> None:
        self.client.force_authenticate(self.renter)
        response = self.client.post(self.messages_url, {"text": "  Is the car diesel?  "}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["text"], "Is the car diesel?")
        self.assertEqual(response.data["author_name"], self.renter.display_name)

        self.client.force_authenticate(self.owner)
        texts = [m["text"] for m in self.client.get(self.messages_url).data]
        self.assertIn("Is the car diesel?", texts)

    def test_actions_are_filtered_by_role(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.get(reverse("reservation-chat-current-actions", args=[self.reservation.pk]))

        self.assertEqual([a["action"] for a in response.data["actions"]], ["ACCEPT", "REJECT"])

    def test_outsider_is_forbidden(self) -> None:
        self.client.force_authenticate(make_user())

        response = self.client.get(self.messages_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_thread_list(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.get(reverse("chat-thread-list"))

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["reservation"], self.reservation.pk)
