"""OpenSSL adapter - subprocess wrapper for `openssl enc`."""

import logging
import os
import subprocess

from journash.errors import EncryptionUnavailableError

logger = logging.getLogger(__name__)

PASSWORD_ENV = "JOURNASH_CIPHER_PASSWORD"


class OpenSSLCipher:
    """
    openssl subprocess adapter.

    Implements Cipher protocol. Uses AES-256-CBC with base64 output, the
    same invocation older shell versions of the journal used, so their
    encrypted entries stay readable. The password is handed over through
    the child's environment rather than argv.
    """

    def __init__(self, binary: str = "openssl", pbkdf2: bool = False, timeout: int = 30):
        self.binary = binary
        self.pbkdf2 = pbkdf2
        self.timeout = timeout

    def _command(self, decrypt: bool) -> list[str]:
        cmd = [self.binary, "enc", "-aes-256-cbc", "-a", "-salt"]
        if decrypt:
            cmd.append("-d")
        if self.pbkdf2:
            cmd.append("-pbkdf2")
        cmd.extend(["-pass", f"env:{PASSWORD_ENV}"])
        return cmd

    def _run(self, cmd: list[str], data: str, key: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            cmd,
            input=data,
            capture_output=True,
            text=True,
            env={**os.environ, PASSWORD_ENV: key},
            timeout=self.timeout,
        )

    def encrypt(self, plaintext: str, key: str) -> str:
        if not key:
            raise EncryptionUnavailableError("Encryption password is empty")
        try:
            result = self._run(self._command(decrypt=False), plaintext, key)
        except FileNotFoundError:
            raise EncryptionUnavailableError("OpenSSL is not installed. Encryption is not available.") from None
        except subprocess.TimeoutExpired:
            raise EncryptionUnavailableError(f"openssl timed out after {self.timeout}s") from None

        if result.returncode != 0 or not result.stdout.strip():
            logger.error(f"openssl encryption failed: {result.stderr}")
            raise EncryptionUnavailableError(f"openssl encryption failed: {result.stderr.strip()}")
        return result.stdout.strip()

    def decrypt(self, ciphertext: str, key: str) -> tuple[str, bool]:
        # openssl's base64 decoder requires a trailing newline
        data = ciphertext.strip() + "\n"
        try:
            result = self._run(self._command(decrypt=True), data, key)
        except FileNotFoundError:
            logger.warning("openssl not found - cannot decrypt entries")
            return "", False
        except subprocess.TimeoutExpired:
            logger.warning(f"openssl timed out after {self.timeout}s")
            return "", False

        if result.returncode != 0:
            logger.debug(f"openssl decryption failed: {result.stderr}")
            return "", False
        return result.stdout, True
