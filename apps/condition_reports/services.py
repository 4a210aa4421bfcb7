"""
Condition report quorum gate

Each phase needs one report from the owner and one from the renter. The
report that completes the pair fires the phase effect:

- checkin:  pickup_pending  -> in_progress, deposit held
- checkout: dropoff_pending -> completed,   deposit released

Submission, the quorum check and the phase effect run in one transaction
under the reservation row lock. The status is re-read right before the
effect so two "last" submitters can never both fire it.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.core.files.storage import default_storage  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore

from apps.finances.ledger import DepositLedger
from apps.reservations.application import event_store
from apps.reservations.application.command_handlers import get_reservation_for, notify
from apps.reservations.application.orchestrator import lock_reservation, transition
from apps.reservations.choices import SYSTEM_ACTOR, EventType, ParticipantRole, ReservationStatus
from apps.reservations.domain.guards import counterparty_id, role_for
from apps.reservations.domain.state_machine import assert_status
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AlreadySubmitted,
    Forbidden,
    InvalidStatus,
    MissingRequiredPhotos,
    TooManyDetailPhotos,
)

from .models import MAX_DETAIL_PHOTOS, REQUIRED_SLOTS, ConditionReport

logger = logging.getLogger(__name__)

Phase = ConditionReport.Phase

EXPECTED_STATUS = {
    Phase.CHECKIN: ReservationStatus.PICKUP_PENDING,
    Phase.CHECKOUT: ReservationStatus.DROPOFF_PENDING,
}


@dataclass
class SubmitResult:
    report: ConditionReport
    phase_completed: bool


def _check_phase(phase: str) -> str:
    if phase not in EXPECTED_STATUS:
        raise InvalidStatus(f"Unknown phase {phase!r}.")
    return phase


def can_submit(reservation_id, user, phase: str) -> dict:
    """Whether ``user`` may submit now, with the reason when not. Never raises for status."""
    _check_phase(phase)
    reservation, role = get_reservation_for(reservation_id, user)
    expected = EXPECTED_STATUS[phase]
    if reservation.status != expected:
        return {
            "can_submit": False,
            "reason": "InvalidStatus",
            "role": role,
            "expected_status": expected,
            "current_status": reservation.status,
        }
    if ConditionReport.objects.filter(reservation=reservation, phase=phase, role=role).exists():
        return {"can_submit": False, "reason": "AlreadySubmitted", "role": role}
    return {"can_submit": True, "reason": None, "role": role}


def validate_photos(required_photos: dict, detail_photos: list) -> None:
    missing = [slot for slot in REQUIRED_SLOTS if not (required_photos or {}).get(slot)]
    if missing:
        raise MissingRequiredPhotos(missing_slots=missing)
    if len(detail_photos or []) > MAX_DETAIL_PHOTOS:
        raise TooManyDetailPhotos(f"At most {MAX_DETAIL_PHOTOS} detail photos are allowed.")


def submit(
    reservation_id,
    user,
    phase: str,
    required_photos: dict,
    detail_photos: list | None = None,
    video_360_ref: str = "",
    role: str | None = None,
    ledger: DepositLedger | None = None,
) -> SubmitResult:
    _check_phase(phase)
    detail_photos = list(detail_photos or [])

    with DjangoUnitOfWork() as uow:
        reservation = lock_reservation(reservation_id)
        real_role = role_for(reservation, user.pk)
        if role and role != real_role:
            raise Forbidden("The stated role does not match your role in this reservation.")

        assert_status(reservation.status, {EXPECTED_STATUS[phase]})
        if ConditionReport.objects.filter(reservation=reservation, phase=phase, role=real_role).exists():
            raise AlreadySubmitted()
        validate_photos(required_photos, detail_photos)

        try:
            with transaction.atomic():
                report = ConditionReport.objects.create(
                    reservation=reservation,
                    phase=phase,
                    role=real_role,
                    required_photos={slot: required_photos[slot] for slot in REQUIRED_SLOTS},
                    detail_photos=[
                        {"ref": item["ref"], "note": item.get("note", "")} for item in detail_photos
                    ],
                    video_360_ref=video_360_ref or "",
                    submitted_by=user,
                )
        except IntegrityError:
            raise AlreadySubmitted()

        event_store.emit(
            reservation,
            EventType.CONDITION_REPORT_SUBMITTED,
            user.pk,
            payload={"phase": phase, "role": real_role, "report_id": report.pk},
            idempotency_key=f"report:{report.pk}",
        )
        notify(
            uow,
            counterparty_id(reservation, real_role),
            "condition_report_submitted",
            reservation,
            phase=phase,
        )
        logger.info(f"{phase} report {report.pk} submitted by {real_role} on reservation {reservation.pk}")

        roles = set(
            ConditionReport.objects.filter(reservation=reservation, phase=phase).values_list("role", flat=True)
        )
        completed = False
        if {ParticipantRole.OWNER, ParticipantRole.RENTER} <= roles:
            completed = complete_phase(reservation.pk, phase, ledger or DepositLedger())

    return SubmitResult(report=report, phase_completed=completed)


def complete_phase(reservation_id, phase: str, ledger: DepositLedger) -> bool:
    """Fire the phase effect once. Must run inside the submitting transaction."""
    fresh = lock_reservation(reservation_id)
    if fresh.status != EXPECTED_STATUS[phase]:
        logger.warning(
            f"Reservation {reservation_id} is {fresh.status}, {phase} completion already handled"
        )
        return False

    if phase == Phase.CHECKIN:
        transition(
            fresh.pk,
            to_status=ReservationStatus.IN_PROGRESS,
            event_type=EventType.CHECKIN_COMPLETED,
            actor_user_id=SYSTEM_ACTOR,
            idempotency_key=f"phase:{fresh.pk}:checkin_completed",
        )
        ledger.hold(fresh.pk)
    else:
        transition(
            fresh.pk,
            to_status=ReservationStatus.COMPLETED,
            event_type=EventType.CHECKOUT_COMPLETED,
            actor_user_id=SYSTEM_ACTOR,
            idempotency_key=f"phase:{fresh.pk}:checkout_completed",
        )
        ledger.release(fresh.pk)
    return True


def report_with_urls(reservation_id, user, phase: str, role: str | None = None) -> dict | None:
    """A participant's view of one report, photo references resolved to URLs.

    ``role`` selects whose report to read and defaults to the caller's own.
    """
    _check_phase(phase)
    reservation, own_role = get_reservation_for(reservation_id, user)
    role = role or own_role
    report = ConditionReport.objects.filter(reservation=reservation, phase=phase, role=role).first()
    if report is None:
        return None
    return serialize_report(report)


def serialize_report(report: ConditionReport) -> dict:
    return {
        "id": report.pk,
        "reservation_id": report.reservation_id,
        "phase": report.phase,
        "role": report.role,
        "required_urls": {slot: resolve_url(ref) for slot, ref in report.required_photos.items()},
        "detail_urls": [
            {"url": resolve_url(item["ref"]), "note": item.get("note", "")} for item in report.detail_photos
        ],
        "video_url": resolve_url(report.video_360_ref) if report.video_360_ref else None,
        "submitted_by": report.submitted_by_id,
        "completed_at": report.completed_at.isoformat(),
    }


def resolve_url(ref: str) -> str | None:
    if not ref:
        return None
    return default_storage.url(ref)


def store_upload(reservation_id, user, uploaded_file) -> str:
    """Save a photo or video for a reservation and return its storage reference."""
    reservation, _ = get_reservation_for(reservation_id, user)
    name = f"condition_reports/{reservation.pk}/{uuid.uuid4().hex}_{uploaded_file.name}"
    ref = default_storage.save(name, uploaded_file)
    logger.info(f"Stored upload {ref} for reservation {reservation.pk}")
    return ref
