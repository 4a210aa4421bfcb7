"""Test data builders shared by every app's tests.

Reservations are moved forward through the real command handlers so the
event log, the chat thread and the locks look exactly like production.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from itertools import count

from django.utils import timezone

from apps.condition_reports.models import REQUIRED_SLOTS
from apps.condition_reports.services import submit
from apps.reservations.application import command_handlers as commands
from apps.reservations.choices import ReservationStatus as S
from apps.reservations.models import Reservation
from apps.users.models import User
from apps.vehicles.models import Vehicle

_sequence = count(1)

PHOTOS = {slot: f"condition_reports/test/{slot}.jpg" for slot in REQUIRED_SLOTS}


def make_user(name: str | None = None, *, kyc: bool = True, **extra) -> User:
    name = name or f"user{next(_sequence)}"
    return User.objects.create_user(
        email=f"{name}@example.com",
        password="StrongPass123",
        username=name,
        kyc_status=User.KycStatus.VERIFIED if kyc else User.KycStatus.NONE,
        **extra,
    )


def make_vehicle(owner: User, **extra) -> Vehicle:
    defaults = {
        "title": "Dacia Logan 2022",
        "city": "Casablanca",
        "price_per_day": Decimal("300"),
        "deposit_min": Decimal("3000"),
    }
    defaults.update(extra)
    return Vehicle.objects.create(owner=owner, **defaults)


def future_range(offset_days: int = 10, days: int = 3) -> tuple[date, date]:
    start = timezone.now().date() + timedelta(days=offset_days)
    return start, start + timedelta(days=days)


def request_reservation(vehicle: Vehicle, renter: User, *, offset_days: int = 10, days: int = 3) -> Reservation:
    start, end = future_range(offset_days, days)
    return commands.CreateReservationHandler().handle(
        commands.CreateReservationCommand(
            vehicle_id=vehicle.pk,
            renter=renter,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
        )
    )


def submit_report(reservation: Reservation, user: User, phase: str, **kwargs):
    return submit(reservation.pk, user, phase, dict(PHOTOS), **kwargs)


_PATH = [
    S.REQUESTED,
    S.ACCEPTED_PENDING_PAYMENT,
    S.PICKUP_PENDING,
    S.IN_PROGRESS,
    S.DROPOFF_PENDING,
    S.COMPLETED,
]


def advance(reservation: Reservation, target: str) -> Reservation:
    """Drive a reservation along the happy path until it reaches ``target``."""
    renter, owner = reservation.renter, reservation.owner
    steps = {
        S.ACCEPTED_PENDING_PAYMENT: lambda: commands.AcceptReservationHandler().handle(
            commands.AcceptReservationCommand(reservation.pk, owner)
        ),
        S.PICKUP_PENDING: lambda: (
            commands.InitPaymentHandler().handle(commands.InitPaymentCommand(reservation.pk, renter)),
            commands.ConfirmPaymentHandler().handle(commands.ConfirmPaymentCommand(reservation.pk, renter)),
        ),
        S.IN_PROGRESS: lambda: (
            submit_report(reservation, owner, "checkin"),
            submit_report(reservation, renter, "checkin"),
        ),
        S.DROPOFF_PENDING: lambda: commands.TriggerReturnHandler().handle(
            commands.TriggerReturnCommand(reservation.pk, renter)
        ),
        S.COMPLETED: lambda: (
            submit_report(reservation, owner, "checkout"),
            submit_report(reservation, renter, "checkout"),
        ),
    }
    reservation.refresh_from_db()
    position = _PATH.index(reservation.status)
    for status in _PATH[position + 1: _PATH.index(target) + 1]:
        steps[status]()
    reservation.refresh_from_db()
    return reservation


def make_reservation(status: str = S.REQUESTED, **kwargs) -> Reservation:
    owner = kwargs.pop("owner", None) or make_user()
    renter = kwargs.pop("renter", None) or make_user()
    vehicle = kwargs.pop("vehicle", None) or make_vehicle(owner)
    reservation = request_reservation(vehicle, renter, **kwargs)
    return advance(reservation, status)
