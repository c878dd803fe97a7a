"""Encryption password hashing and verification.

Hashes are stored as ``salt:hash`` in hex. New hashes use PBKDF2-SHA256
with a 16-byte salt. Hashes with an 8-byte salt come from the shell
version of the journal, which stored ``sha256(password + salt)``; they
still verify.
"""

import os

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

PBKDF2_ITERATIONS = 390_000
SALT_BYTES = 16
LEGACY_SALT_HEX_LEN = 16


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash a password for storage in security.conf."""
    if not password:
        raise ValueError("Password cannot be empty")
    salt = os.urandom(SALT_BYTES)
    digest = _kdf(salt, iterations).derive(password.encode("utf-8"))
    return f"{salt.hex()}:{digest.hex()}"


def _verify_legacy(password: str, salt_hex: str, hash_hex: str) -> bool:
    digest = hashes.Hash(hashes.SHA256())
    digest.update(f"{password}{salt_hex}".encode("utf-8"))
    return constant_time.bytes_eq(digest.finalize().hex().encode(), hash_hex.lower().encode())


def verify_password(password: str, stored_hash: str, iterations: int = PBKDF2_ITERATIONS) -> bool:
    """Check a password against a stored ``salt:hash`` value."""
    salt_hex, sep, hash_hex = stored_hash.strip().partition(":")
    if not sep or not salt_hex or not hash_hex:
        return False

    if len(salt_hex) == LEGACY_SALT_HEX_LEN:
        return _verify_legacy(password, salt_hex, hash_hex)

    try:
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    try:
        _kdf(salt, iterations).verify(password.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True
