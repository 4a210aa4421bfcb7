"""Production settings.

Sensitive values must be provided via environment variables. Deposits go
through the card-network gateway instead of the development stub.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True

MARKETPLACE['DEPOSIT_GATEWAY'] = os.environ.get(
    'DEPOSIT_GATEWAY',
    'apps.finances.gateways.StripePaymentGateway',
)
