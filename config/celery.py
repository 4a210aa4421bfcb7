import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("rental_core")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Unpaid accepted reservations - every 5 minutes
    "expire-unpaid-reservations": {
        "task": "reservations.expire_unpaid_reservations",
        "schedule": 300.0,
        "options": {"expires": 280},
    },
    # In-progress rentals past their end date - hourly
    "advance-finished-rentals": {
        "task": "reservations.advance_finished_rentals",
        "schedule": crontab(minute=0),
    },
}

app.conf.timezone = os.environ.get("DJANGO_TIME_ZONE", "Africa/Casablanca")
