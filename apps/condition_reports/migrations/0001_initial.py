import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("reservations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ConditionReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("phase", models.CharField(choices=[("checkin", "Pickup"), ("checkout", "Return")], max_length=10)),
                ("role", models.CharField(choices=[("owner", "Owner"), ("renter", "Renter")], max_length=10)),
                ("required_photos", models.JSONField(default=dict, help_text="Slot name -> storage reference.")),
                ("detail_photos", models.JSONField(blank=True, default=list, help_text="List of {ref, note}.")),
                ("video_360_ref", models.CharField(blank=True, max_length=255)),
                ("completed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="condition_reports",
                        to="reservations.reservation",
                    ),
                ),
                (
                    "submitted_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="condition_reports",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Condition report",
                "verbose_name_plural": "Condition reports",
                "ordering": ["-completed_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("reservation", "phase", "role"),
                        name="one_report_per_phase_and_role",
                    ),
                ],
            },
        ),
    ]
