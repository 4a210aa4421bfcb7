from unittest import mock

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification
from apps.notifications.sinks import InAppNotificationSink, render
from apps.notifications.tasks import deliver_notification
from apps.reservations.application import command_handlers as commands
from shared.domain.exceptions import Forbidden
from shared.tests.factories import make_reservation, make_user


class RenderTests(SimpleTestCase):
    def test_known_template(self):
        title, message = render("reservation_rejected", {"vehicle_title": "Dacia Logan 2022"})

        self.assertEqual(title, "Request declined")
        self.assertEqual(message, "Your request for Dacia Logan 2022 was declined.")

    def test_missing_context_keeps_raw_body(self):
        _, message = render("reservation_requested", {})

        self.assertIn("{renter_name}", message)

    def test_unknown_template(self):
        self.assertEqual(render("brand_new_thing", {}), ("Brand new thing", ""))


class DeliveryTests(TestCase):
    def test_delivered_after_commit_only(self):
        reservation = make_reservation()

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            commands.AcceptReservationHandler().handle(
                commands.AcceptReservationCommand(reservation.pk, reservation.owner)
            )
        self.assertFalse(Notification.objects.filter(template_type="reservation_accepted").exists())

        for callback in callbacks:
            callback()
        notification = Notification.objects.get(template_type="reservation_accepted")
        self.assertEqual(notification.user, reservation.renter)
        self.assertEqual(notification.context["reservation_id"], reservation.pk)

    def test_rolled_back_command_sends_nothing(self):
        reservation = make_reservation()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(Forbidden):
                commands.AcceptReservationHandler().handle(
                    commands.AcceptReservationCommand(reservation.pk, reservation.renter)
                )

        self.assertEqual(callbacks, [])

    def test_failing_sink_is_logged_not_raised(self):
        user = make_user()

        with mock.patch.object(InAppNotificationSink, "notify", side_effect=RuntimeError("push down")):
            with self.assertLogs("apps.notifications.tasks", level="ERROR"):
                delivered = deliver_notification(user.pk, "reservation_accepted", {"vehicle_title": "Clio"})

        self.assertFalse(delivered)
        self.assertFalse(Notification.objects.exists())


class NotificationAPITests(APITestCase):
    def test_inbox_is_private_and_markable(self):
        user = make_user()
        deliver_notification(user.pk, "reservation_rejected", {"vehicle_title": "Clio"})
        deliver_notification(make_user().pk, "reservation_rejected", {"vehicle_title": "Clio"})
        self.client.force_authenticate(user)

        inbox = self.client.get(reverse("notification-list"))
        self.assertEqual(len(inbox.data), 1)

        notification_id = inbox.data[0]["id"]
        response = self.client.post(reverse("notification-mark-read", args=[notification_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(Notification.objects.get(pk=notification_id).is_read)
