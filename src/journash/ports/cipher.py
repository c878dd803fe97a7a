"""Symmetric cipher interface."""

from typing import Protocol


class Cipher(Protocol):
    """Interface for password-based text encryption."""

    def encrypt(self, plaintext: str, key: str) -> str:
        """Encrypt text. Raises EncryptionUnavailableError on failure."""
        ...

    def decrypt(self, ciphertext: str, key: str) -> tuple[str, bool]:
        """Decrypt text. Returns (plaintext, ok); ok is False on a wrong key."""
        ...
