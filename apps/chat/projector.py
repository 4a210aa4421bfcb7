"""
Chat projector

Turns each newly stored reservation event into conversation messages and
keeps the per-reservation "current actions" row in step with the status.
Message derivation is a pure function of (event type, payload, names);
everything touching the database is idempotent on its keys so a replayed
event projects nothing new.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.reservations.choices import EventType as E
from apps.reservations.choices import ReservationStatus as S

from .models import Audience, CurrentActions, Message, Thread

logger = logging.getLogger(__name__)

WELCOME_RENTER = (
    "Welcome! Show your driving licence to the owner, complete the condition "
    "report together in the app and never pay outside the platform."
)
WELCOME_OWNER = (
    "Welcome! Check the renter's driving licence, complete the condition "
    "report together in the app and never accept payment outside the platform."
)

PREVIEW_LENGTH = 200


@dataclass(frozen=True)
class MessageSpec:
    text: str
    audience: str = Audience.ALL
    actions: list = field(default_factory=list)


def _action(code: str, label: str) -> dict:
    return {"action": code, "label": label}


def build_event_messages(event_type: str, payload: dict | None, names: dict) -> list[MessageSpec]:
    """Messages announcing one event. Silent events return an empty list."""
    payload = payload or {}
    renter = names.get("renter", "the renter")
    owner = names.get("owner", "the owner")

    if event_type == E.RESERVATION_CREATED:
        return [
            MessageSpec(f"Your request was sent! {owner} will reply shortly.", Audience.RENTER),
            MessageSpec(
                f"New request from {renter}! Check their profile before deciding.",
                Audience.OWNER,
                [_action("ACCEPT", "Accept request"), _action("REJECT", "Decline")],
            ),
        ]
    if event_type == E.RESERVATION_ACCEPTED:
        return [
            MessageSpec(
                f"{owner} accepted your request! Pay now to confirm the reservation.",
                Audience.RENTER,
                [_action("PAY_NOW", "Pay and confirm")],
            ),
            MessageSpec(f"You accepted {renter}'s request. Waiting for payment.", Audience.OWNER),
        ]
    if event_type == E.RESERVATION_REJECTED:
        return [MessageSpec("The request was declined.")]
    if event_type == E.PAYMENT_CAPTURED:
        checkin = [_action("DO_CHECKIN", "Do the pickup report")]
        text = (
            "Payment received, the reservation is confirmed! On pickup day, "
            "complete the pickup report together before driving off."
        )
        return [MessageSpec(text, Audience.RENTER, checkin), MessageSpec(text, Audience.OWNER, checkin)]
    if event_type == E.CONDITION_REPORT_SUBMITTED:
        who = owner if payload.get("role") == "owner" else renter
        when = "pickup" if payload.get("phase") == "checkin" else "return"
        return [MessageSpec(f"{who} completed the {when} report.")]
    if event_type == E.CHECKIN_COMPLETED:
        ret = [_action("TRIGGER_RETURN", "Declare the vehicle returned")]
        text = "Pickup report validated, enjoy the ride! Declare the return here when the vehicle is back."
        return [MessageSpec(text, Audience.RENTER, ret), MessageSpec(text, Audience.OWNER, ret)]
    if event_type == E.DROPOFF_PENDING:
        checkout = [_action("DO_CHECKOUT", "Do the return report")]
        text = "Vehicle return declared. Complete the return report together to finish."
        return [MessageSpec(text, Audience.RENTER, checkout), MessageSpec(text, Audience.OWNER, checkout)]
    if event_type == E.CHECKOUT_COMPLETED:
        review = [_action("LEAVE_REVIEW", "Leave a review")]
        text = "The rental is over and the deposit has been released. Thanks for renting with us!"
        return [MessageSpec(text, Audience.RENTER, review), MessageSpec(text, Audience.OWNER, review)]
    if event_type == E.RESERVATION_CANCELLED:
        reason = payload.get("reason")
        if reason == "owner_cancelled":
            text = f"Reservation cancelled by {owner}."
        elif reason == "renter_cancelled":
            text = f"Reservation cancelled by {renter}."
        elif reason == "payment_timeout":
            text = "Reservation cancelled: payment was not completed in time."
        else:
            text = "Reservation cancelled."
        return [MessageSpec(text)]
    if event_type == E.DISPUTE_OPENED:
        return [MessageSpec("A dispute was opened. The deposit stays held until it is resolved.")]
    if event_type == E.DISPUTE_RESOLVED:
        return [MessageSpec("The dispute has been resolved.")]
    if event_type in {E.PAYMENT_INITIALIZED, E.DEPOSIT_HELD, E.DEPOSIT_RELEASED, E.DEPOSIT_RETAINED}:
        return []
    raise ValueError(f"Unknown reservation event type: {event_type!r}")


def compute_current_actions(status: str, payment_status: str | None = None) -> list[dict]:
    """Legal next moves for each participant in ``status``."""
    def both(code: str, label: str) -> list[dict]:
        return [
            {**_action(code, label), "audience": Audience.OWNER},
            {**_action(code, label), "audience": Audience.RENTER},
        ]

    if status == S.REQUESTED:
        return [
            {**_action("ACCEPT", "Accept request"), "audience": Audience.OWNER},
            {**_action("REJECT", "Decline"), "audience": Audience.OWNER},
            {**_action("CANCEL", "Cancel request"), "audience": Audience.RENTER},
        ]
    if status == S.ACCEPTED_PENDING_PAYMENT:
        pay = (
            _action("CONFIRM_PAYMENT", "Confirm payment")
            if payment_status == "requires_action"
            else _action("PAY_NOW", "Pay and confirm")
        )
        return [
            {**pay, "audience": Audience.RENTER},
            {**_action("CANCEL", "Cancel reservation"), "audience": Audience.RENTER},
            {**_action("CANCEL", "Cancel reservation"), "audience": Audience.OWNER},
        ]
    if status == S.PICKUP_PENDING:
        return both("DO_CHECKIN", "Do the pickup report")
    if status == S.IN_PROGRESS:
        return both("TRIGGER_RETURN", "Declare the vehicle returned")
    if status == S.DROPOFF_PENDING:
        return both("DO_CHECKOUT", "Do the return report")
    return []


def participant_names(reservation) -> dict:
    return {
        "renter": reservation.renter.display_name,
        "owner": reservation.owner.display_name,
    }


def ensure_thread(reservation) -> Thread:
    """The reservation's thread, created once together with the welcome messages."""
    thread, created = Thread.objects.get_or_create(
        reservation=reservation,
        defaults={"renter_id": reservation.renter_id, "owner_id": reservation.owner_id},
    )
    if created:
        for audience, text in ((Audience.RENTER, WELCOME_RENTER), (Audience.OWNER, WELCOME_OWNER)):
            Message.objects.get_or_create(
                event_key=f"welcome:{reservation.pk}:{audience}",
                defaults={"thread": thread, "type": Message.Type.WELCOME, "audience": audience, "text": text},
            )
        logger.info(f"Opened thread {thread.pk} for reservation {reservation.pk}")
    return thread


def refresh_current_actions(reservation, thread: Thread | None = None) -> CurrentActions:
    thread = thread or ensure_thread(reservation)
    current, _ = CurrentActions.objects.update_or_create(
        key=f"actions:{reservation.pk}",
        defaults={
            "thread": thread,
            "status": reservation.status,
            "actions": compute_current_actions(reservation.status, reservation.payment_status),
        },
    )
    return current


def _touch(thread: Thread, text: str) -> None:
    thread.last_message_at = timezone.now()
    thread.last_message_text = text[:PREVIEW_LENGTH]
    thread.save(update_fields=["last_message_at", "last_message_text"])


@transaction.atomic
def project_event(event) -> list[Message]:
    """Project a stored ``ReservationEvent``; returns only newly inserted messages."""
    reservation = event.reservation
    thread = ensure_thread(reservation)

    specs = build_event_messages(event.type, event.payload, participant_names(reservation))
    inserted: list[Message] = []
    for index, spec in enumerate(specs):
        key = f"event:{event.pk}" if index == 0 else f"event:{event.pk}:{index}"
        message, created = Message.objects.get_or_create(
            event_key=key,
            defaults={
                "thread": thread,
                "type": Message.Type.SYSTEM,
                "audience": spec.audience,
                "text": spec.text,
                "actions": list(spec.actions),
            },
        )
        if created:
            inserted.append(message)

    if inserted:
        _touch(thread, inserted[-1].text)
    refresh_current_actions(reservation, thread)
    return inserted


def post_user_message(reservation, author, text: str) -> Message:
    """The only participant-authored insert. Visible to both parties."""
    thread = ensure_thread(reservation)
    message = Message.objects.create(
        thread=thread,
        type=Message.Type.USER,
        audience=Audience.ALL,
        text=text,
        author=author,
    )
    _touch(thread, text)
    return message


def visible_audiences(role: str) -> tuple[str, str]:
    return (Audience.ALL, role)
