from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings

APP_LABELS = (
    "users",
    "vehicles",
    "reservations",
    "chat",
    "condition_reports",
    "finances",
    "disputes",
    "notifications",
)


# The test run disables migration modules; read the real ones here.
@override_settings(MIGRATION_MODULES={})
class MigrationStateTests(TestCase):
    def test_models_match_migrations(self) -> None:
        out = StringIO()

        try:
            call_command("makemigrations", *APP_LABELS, check=True, dry_run=True, stdout=out)
        except SystemExit:
            self.fail(f"Models have changes not reflected in migrations:\n{out.getvalue()}")
