"""
Field Encryption

Symmetric encryption for PII columns (the breeder email). Keys are Fernet
keys: 32 random bytes, url-safe base64 encoded.
"""

import logging

from cryptography.fernet import Fernet, InvalidToken

from petstore.errors import EncryptionError

logger = logging.getLogger(__name__)


def generate_key() -> str:
    """Generate a new encryption key suitable for ENCRYPTION_KEY."""
    return Fernet.generate_key().decode()


class FieldEncryptor:
    """Encrypts and decrypts single text fields."""

    def __init__(self, key: str):
        try:
            self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
        except (ValueError, TypeError) as e:
            raise EncryptionError(
                "encryption key must be 32 url-safe base64-encoded bytes"
            ) from e

    def encrypt(self, plaintext: str) -> str:
        try:
            return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")
        except (TypeError, AttributeError) as e:
            raise EncryptionError(f"failed to encrypt field: {e}") from e

    def decrypt(self, ciphertext: str) -> str:
        if not ciphertext:
            raise EncryptionError("ciphertext is empty")
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            logger.error("Failed to decrypt field: invalid token")
            raise EncryptionError("failed to decrypt field") from e


def get_encryptor() -> FieldEncryptor:
    """Build the encryptor from ENCRYPTION_KEY."""
    from petstore.settings import get_settings

    key = get_settings().ENCRYPTION_KEY
    if not key:
        raise EncryptionError("ENCRYPTION_KEY is not configured")
    return FieldEncryptor(key)
