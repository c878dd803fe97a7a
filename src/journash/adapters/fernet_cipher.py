"""Fernet cipher adapter - password-based encryption via the cryptography package."""

import base64
import binascii
import logging
import os
import textwrap

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from journash.errors import EncryptionUnavailableError

logger = logging.getLogger(__name__)

SALT_BYTES = 16
DEFAULT_ITERATIONS = 390_000
LINE_WIDTH = 64


def derive_key(password: str, salt: bytes, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    """Derive a urlsafe-base64 Fernet key from a password."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))


class FernetCipher:
    """
    Fernet (AES-128-CBC + HMAC) cipher.

    Implements Cipher protocol. Ciphertext is standard base64 of
    ``salt || fernet token``, wrapped at 64 columns so it never starts a
    line with journal markup.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        self.iterations = iterations

    def encrypt(self, plaintext: str, key: str) -> str:
        if not key:
            raise EncryptionUnavailableError("Encryption password is empty")
        salt = os.urandom(SALT_BYTES)
        try:
            token = Fernet(derive_key(key, salt, self.iterations)).encrypt(plaintext.encode("utf-8"))
        except (TypeError, ValueError) as e:
            raise EncryptionUnavailableError(f"Fernet encryption failed: {e}") from e
        payload = salt + base64.urlsafe_b64decode(token)
        return "\n".join(textwrap.wrap(base64.b64encode(payload).decode("ascii"), LINE_WIDTH))

    def decrypt(self, ciphertext: str, key: str) -> tuple[str, bool]:
        compact = "".join(ciphertext.split())
        try:
            payload = base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("Ciphertext is not valid base64")
            return "", False
        if len(payload) <= SALT_BYTES:
            return "", False

        salt, raw_token = payload[:SALT_BYTES], payload[SALT_BYTES:]
        try:
            plaintext = Fernet(derive_key(key, salt, self.iterations)).decrypt(base64.urlsafe_b64encode(raw_token))
        except InvalidToken:
            return "", False
        return plaintext.decode("utf-8", errors="replace"), True
