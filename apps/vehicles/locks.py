"""Vehicle date-lock manager.

Every booked calendar day of a vehicle is a key in the vehicle's
:class:`VehicleLockBucket`. The check for foreign owners and the claim of
the days happen inside one transaction holding the bucket row lock, so
concurrent callers for the same vehicle serialize on that row and an
acquire is all-or-nothing.
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.exceptions import InvalidDateRange, VehicleUnavailable
from shared.domain.value_objects import DateRange

from .models import VehicleLockBucket

logger = logging.getLogger(__name__)


def iter_days(start: date, end: date) -> list[str]:
    """ISO days from ``start`` (inclusive) to ``end`` (exclusive)."""
    try:
        return DateRange(start, end).iso_days()
    except ValueError as exc:
        raise InvalidDateRange(str(exc)) from exc


def _lock_bucket(vehicle_id: int) -> VehicleLockBucket:
    """Fetch (creating lazily) the bucket row under a row lock."""
    VehicleLockBucket.objects.get_or_create(vehicle_id=vehicle_id)
    queryset = VehicleLockBucket.objects.filter(vehicle_id=vehicle_id)
    try:
        return queryset.select_for_update().get()
    except NotSupportedError:
        return queryset.get()


def acquire(vehicle_id: int, reservation_id: int, start: date, end: date) -> list[str]:
    """Claim every day of ``[start, end)`` for the reservation.

    Raises :class:`VehicleUnavailable` without touching the bucket if any
    day belongs to another reservation. Days already owned by the same
    reservation are accepted, which makes a retried acquire harmless.
    """
    days = iter_days(start, end)

    with transaction.atomic():
        bucket = _lock_bucket(vehicle_id)
        conflicts = [
            day for day in days
            if day in bucket.dates and bucket.dates[day] != reservation_id
        ]
        if conflicts:
            logger.info(
                f"Lock refused for vehicle {vehicle_id}, reservation {reservation_id}: "
                f"{len(conflicts)} day(s) taken starting {conflicts[0]}"
            )
            raise VehicleUnavailable(conflicting_days=conflicts)

        for day in days:
            bucket.dates[day] = reservation_id
        bucket.save(update_fields=["dates", "updated_at"])

    logger.info(f"Locked {len(days)} day(s) of vehicle {vehicle_id} for reservation {reservation_id}")
    return days


def release(vehicle_id: int, reservation_id: int, start: date, end: date) -> list[str]:
    """Free the days of ``[start, end)`` that this reservation owns.

    Days owned by other reservations are left alone; nothing to free is a
    no-op.
    """
    days = iter_days(start, end)

    with transaction.atomic():
        bucket = _lock_bucket(vehicle_id)
        released = [day for day in days if bucket.dates.get(day) == reservation_id]
        if not released:
            return []
        for day in released:
            del bucket.dates[day]
        bucket.save(update_fields=["dates", "updated_at"])

    logger.info(f"Released {len(released)} day(s) of vehicle {vehicle_id} for reservation {reservation_id}")
    return released


def locked_days(vehicle_id: int) -> dict[str, int]:
    bucket = VehicleLockBucket.objects.filter(vehicle_id=vehicle_id).first()
    return dict(bucket.dates) if bucket else {}
