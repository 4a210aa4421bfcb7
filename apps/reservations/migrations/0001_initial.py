from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import shared.infrastructure.fields


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("vehicles", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("requested", "Requested"),
                            ("accepted_pending_payment", "Accepted, awaiting payment"),
                            ("pickup_pending", "Awaiting pickup"),
                            ("in_progress", "In progress"),
                            ("dropoff_pending", "Awaiting return inspection"),
                            ("completed", "Completed"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                            ("disputed", "Disputed"),
                        ],
                        default="requested",
                        max_length=32,
                    ),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(help_text="Exclusive: the vehicle is free again on this day.")),
                ("version", models.PositiveIntegerField(default=1)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("commission_amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("owner_payout", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("deposit_amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("currency", models.CharField(default="MAD", max_length=3)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("unpaid", "Unpaid"),
                            ("requires_action", "Awaiting payment confirmation"),
                            ("captured", "Captured"),
                            ("refunded", "Refunded"),
                        ],
                        default="unpaid",
                        max_length=20,
                    ),
                ),
                ("payment_ref", models.CharField(blank=True, max_length=255)),
                (
                    "deposit_status",
                    models.CharField(
                        choices=[
                            ("none", "Not held"),
                            ("held", "Held"),
                            ("released", "Released"),
                            ("retained", "Retained"),
                            ("partially_retained", "Partially retained"),
                        ],
                        default="none",
                        max_length=20,
                    ),
                ),
                ("deposit_hold_ref", shared.infrastructure.fields.EncryptedCharField(blank=True, default="")),
                (
                    "cancellation_policy",
                    models.CharField(
                        blank=True,
                        help_text="Vehicle tier at request time, used for refunds.",
                        max_length=20,
                    ),
                ),
                (
                    "cancelled_by",
                    models.CharField(
                        blank=True,
                        choices=[("renter", "Renter"), ("owner", "Owner"), ("system", "System")],
                        max_length=10,
                    ),
                ),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("refund_percent", models.DecimalField(blank=True, decimal_places=2, max_digits=4, null=True)),
                ("refund_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("penalty_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations_as_owner",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "renter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations_as_renter",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="vehicles.vehicle",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "renter", "created_at"], name="reservation_pair_idx"),
                    models.Index(fields=["status", "accepted_at"], name="reservation_unpaid_idx"),
                    models.Index(fields=["status", "end_date"], name="reservation_ending_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gt", models.F("start_date"))),
                        name="reservation_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("reservation_created", "Reservation created"),
                            ("reservation_accepted", "Reservation accepted"),
                            ("reservation_rejected", "Reservation rejected"),
                            ("reservation_cancelled", "Reservation cancelled"),
                            ("payment_initialized", "Payment initialized"),
                            ("payment_captured", "Payment captured"),
                            ("condition_report_submitted", "Condition report submitted"),
                            ("checkin_completed", "Check-in completed"),
                            ("dropoff_pending", "Return declared"),
                            ("checkout_completed", "Checkout completed"),
                            ("deposit_held", "Deposit held"),
                            ("deposit_released", "Deposit released"),
                            ("deposit_retained", "Deposit retained"),
                            ("dispute_opened", "Dispute opened"),
                            ("dispute_resolved", "Dispute resolved"),
                        ],
                        max_length=40,
                    ),
                ),
                (
                    "actor_user_id",
                    models.CharField(help_text="Primary key of the acting user, or 'system'.", max_length=64),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("idempotency_key", models.CharField(max_length=255, unique=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation event",
                "verbose_name_plural": "Reservation events",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["reservation", "type"], name="reservation_event_type_idx"),
                ],
            },
        ),
    ]
