import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("price_per_day", models.DecimalField(decimal_places=2, max_digits=10)),
                ("currency", models.CharField(default="MAD", max_length=3)),
                (
                    "deposit_min",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Lowest deposit the owner accepts.",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "deposit_selected",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Deposit the owner asks for; falls back to the minimum.",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "cancellation_policy",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("flexible", "Flexible (full refund 24h+ before)"),
                            ("moderate", "Moderate (full refund 72h+ before)"),
                            ("strict", "Strict (full refund 7 days+ before)"),
                        ],
                        help_text="Empty means the product-wide default tier.",
                        max_length=20,
                    ),
                ),
                (
                    "owner_blocked_dates",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="ISO dates on which the owner does not rent the vehicle.",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vehicles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Vehicle",
                "verbose_name_plural": "Vehicles",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="VehicleLockBucket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("dates", models.JSONField(blank=True, default=dict)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "vehicle",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lock_bucket",
                        to="vehicles.vehicle",
                    ),
                ),
            ],
            options={
                "verbose_name": "Vehicle lock bucket",
                "verbose_name_plural": "Vehicle lock buckets",
            },
        ),
    ]
