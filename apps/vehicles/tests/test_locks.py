"""Vehicle day-lock manager."""

from __future__ import annotations

from datetime import date

from django.test import TestCase

from apps.vehicles import locks
from apps.vehicles.models import VehicleLockBucket
from shared.domain.exceptions import InvalidDateRange, VehicleUnavailable
from shared.tests.factories import make_user, make_vehicle

D = date.fromisoformat


class LockManagerTests(TestCase):
    def setUp(self) -> None:
        self.vehicle = make_vehicle(make_user())

    def test_acquire_claims_every_day_end_exclusive(self) -> None:
        days = locks.acquire(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-04"))

        self.assertEqual(days, ["2030-03-01", "2030-03-02", "2030-03-03"])
        self.assertEqual(
            locks.locked_days(self.vehicle.pk),
            {"2030-03-01": 1, "2030-03-02": 1, "2030-03-03": 1},
        )

    def test_overlapping_attempts_only_first_wins(self) -> None:
        ranges = [
            (1, D("2030-03-01"), D("2030-03-05")),
            (2, D("2030-03-04"), D("2030-03-06")),
            (3, D("2030-02-27"), D("2030-03-02")),
            (4, D("2030-03-02"), D("2030-03-03")),
        ]
        winners, losers = [], []
        for reservation_id, start, end in ranges:
            try:
                locks.acquire(self.vehicle.pk, reservation_id, start, end)
                winners.append(reservation_id)
            except VehicleUnavailable as exc:
                losers.append(reservation_id)
                self.assertTrue(exc.context["conflicting_days"])

        self.assertEqual(winners, [1])
        self.assertEqual(losers, [2, 3, 4])
        self.assertEqual(set(locks.locked_days(self.vehicle.pk).values()), {1})

    def test_refused_acquire_leaves_bucket_untouched(self) -> None:
        locks.acquire(self.vehicle.pk, 1, D("2030-03-03"), D("2030-03-04"))

        with self.assertRaises(VehicleUnavailable):
            locks.acquire(self.vehicle.pk, 2, D("2030-03-01"), D("2030-03-05"))

        self.assertEqual(locks.locked_days(self.vehicle.pk), {"2030-03-03": 1})

    def test_adjacent_ranges_do_not_conflict(self) -> None:
        locks.acquire(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-03"))
        locks.acquire(self.vehicle.pk, 2, D("2030-03-03"), D("2030-03-05"))

        self.assertEqual(len(locks.locked_days(self.vehicle.pk)), 4)

    def test_acquire_is_repeatable_for_the_same_reservation(self) -> None:
        locks.acquire(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-03"))
        locks.acquire(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-03"))

        self.assertEqual(VehicleLockBucket.objects.filter(vehicle=self.vehicle).count(), 1)

    def test_release_restores_only_own_days(self) -> None:
        locks.acquire(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-03"))
        locks.acquire(self.vehicle.pk, 2, D("2030-03-03"), D("2030-03-05"))
        before = locks.locked_days(self.vehicle.pk)

        released = locks.release(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-05"))

        self.assertEqual(released, ["2030-03-01", "2030-03-02"])
        self.assertEqual(
            locks.locked_days(self.vehicle.pk),
            {day: rid for day, rid in before.items() if rid == 2},
        )
        # The freed days can be booked again.
        locks.acquire(self.vehicle.pk, 3, D("2030-03-01"), D("2030-03-03"))

    def test_release_of_foreign_days_is_a_no_op(self) -> None:
        locks.acquire(self.vehicle.pk, 1, D("2030-03-01"), D("2030-03-03"))

        self.assertEqual(locks.release(self.vehicle.pk, 9, D("2030-03-01"), D("2030-03-03")), [])
        self.assertEqual(len(locks.locked_days(self.vehicle.pk)), 2)

    def test_invalid_range(self) -> None:
        with self.assertRaises(InvalidDateRange):
            locks.acquire(self.vehicle.pk, 1, D("2030-03-03"), D("2030-03-01"))
