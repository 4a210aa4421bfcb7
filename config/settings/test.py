"""Test settings.

In-memory SQLite, eager Celery and the stub deposit gateway. The admin
operator id is set per test through the ``settings`` fixture.

Set ``DB_ENGINE`` (and the other ``DB_*`` variables) to run against Postgres;
the threaded locking tests only run on a backend with row locks.
"""

import os

from .base import *  # noqa: F401,F403

DEBUG = False

if not os.environ.get('DB_ENGINE'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

ENCRYPTION_KEY = 'test-encryption-key'

MARKETPLACE['DEPOSIT_GATEWAY'] = 'apps.finances.gateways.StubPaymentGateway'

LOGGING['root']['level'] = 'CRITICAL'
