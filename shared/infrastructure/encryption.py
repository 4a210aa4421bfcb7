"""
Encryption utilities

Symmetric (Fernet) encryption for payment references kept at rest, such
as the deposit hold reference returned by the card gateway.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def get_fernet() -> Fernet:
    """
    Build a Fernet instance from ``settings.ENCRYPTION_KEY``.

    Any string is accepted: it is hashed to the 32 bytes Fernet expects.
    """
    key = getattr(settings, 'ENCRYPTION_KEY', None)
    if not key:
        raise ImproperlyConfigured("ENCRYPTION_KEY is not configured")

    if isinstance(key, str):
        key = base64.urlsafe_b64encode(hashlib.sha256(key.encode()).digest())

    return Fernet(key)


def encrypt_string(plaintext: str) -> str:
    if not plaintext:
        return ''
    return get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_string(token: str) -> str:
    """Raises ``cryptography.fernet.InvalidToken`` when the key does not match."""
    if not token:
        return ''
    return get_fernet().decrypt(token.encode()).decode()


__all__ = ['encrypt_string', 'decrypt_string', 'get_fernet', 'InvalidToken']
