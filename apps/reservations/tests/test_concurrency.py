"""Racing callers against real row locks.

These run on a backend with ``SELECT ... FOR UPDATE`` (set ``DB_ENGINE`` to
Postgres); SQLite serializes writers differently and is skipped.
"""

from __future__ import annotations

import threading
from datetime import date

from django.db import connection
from django.test import TransactionTestCase, skipUnlessDBFeature

from apps.condition_reports import services
from apps.finances.gateways import StubPaymentGateway
from apps.finances.ledger import DepositLedger
from apps.finances.models import DepositTransaction
from apps.reservations.choices import DepositStatus
from apps.reservations.choices import ReservationStatus as S
from apps.vehicles import locks
from apps.vehicles.models import VehicleLockBucket
from shared.domain.exceptions import VehicleUnavailable
from shared.tests.factories import PHOTOS, make_reservation, make_user, make_vehicle


def run_together(*calls):
    """Start every call at the same moment; return (results, errors) in call order."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)
    errors = [None] * len(calls)

    def worker(index, call):
        try:
            barrier.wait()
            results[index] = call()
        except Exception as e:
            errors[index] = e
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results, errors


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentLockTests(TransactionTestCase):
    def setUp(self) -> None:
        self.vehicle = make_vehicle(make_user())
        VehicleLockBucket.objects.create(vehicle=self.vehicle)

    def test_overlapping_acquires_have_one_winner(self) -> None:
        results, errors = run_together(
            lambda: locks.acquire(self.vehicle.pk, 1, date(2030, 5, 1), date(2030, 5, 5)),
            lambda: locks.acquire(self.vehicle.pk, 2, date(2030, 5, 3), date(2030, 5, 8)),
        )

        self.assertEqual(sum(result is not None for result in results), 1)
        self.assertEqual([type(e) for e in errors if e is not None], [VehicleUnavailable])
        owners = set(locks.locked_days(self.vehicle.pk).values())
        self.assertEqual(len(owners), 1)


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentCheckinTests(TransactionTestCase):
    def test_simultaneous_reports_start_the_rental_once(self) -> None:
        reservation = make_reservation(S.PICKUP_PENDING)
        ledger = DepositLedger(gateway=StubPaymentGateway())

        results, errors = run_together(
            lambda: services.submit(reservation.pk, reservation.owner, "checkin", dict(PHOTOS), ledger=ledger),
            lambda: services.submit(reservation.pk, reservation.renter, "checkin", dict(PHOTOS), ledger=ledger),
        )

        self.assertEqual(errors, [None, None])
        self.assertEqual(sum(result.phase_completed for result in results), 1)
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, S.IN_PROGRESS)
        self.assertEqual(reservation.deposit_status, DepositStatus.HELD)
        self.assertEqual(reservation.events.filter(type="checkin_completed").count(), 1)
        self.assertEqual(
            DepositTransaction.objects.filter(
                reservation=reservation,
                action=DepositTransaction.Action.HOLD,
                outcome=DepositTransaction.Outcome.APPLIED,
            ).count(),
            1,
        )
