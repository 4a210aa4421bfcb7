from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("reservations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DepositTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[("hold", "Hold"), ("release", "Release"), ("retain", "Retain")],
                        max_length=10,
                    ),
                ),
                (
                    "outcome",
                    models.CharField(
                        choices=[("applied", "Applied"), ("skipped", "Skipped")],
                        default="applied",
                        max_length=10,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12)),
                ("currency", models.CharField(default="MAD", max_length=3)),
                ("deposit_status", models.CharField(help_text="Deposit status after the call.", max_length=20)),
                ("actor_user_id", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="deposit_transactions",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Deposit transaction",
                "verbose_name_plural": "Deposit transactions",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
