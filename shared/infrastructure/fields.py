"""Model field storing its value Fernet-encrypted."""

import logging

from django.db import models

from .encryption import InvalidToken, decrypt_string, encrypt_string

logger = logging.getLogger(__name__)


class EncryptedCharField(models.TextField):
    """
    Text column holding ciphertext; Python code only ever sees plaintext.

    Values that cannot be decrypted (rotated key) load as an empty string
    and are logged, the hold reference is then treated as missing.
    """

    description = "Encrypted text field"

    def from_db_value(self, value, expression, connection):
        if value is None or value == '':
            return value
        try:
            return decrypt_string(value)
        except InvalidToken:
            logger.warning(f"Could not decrypt value of {self.model.__name__}.{self.name}")
            return ''

    def get_prep_value(self, value):
        if value is None or value == '':
            return ''
        return encrypt_string(str(value))

    def to_python(self, value):
        if value is None:
            return value
        return str(value)
