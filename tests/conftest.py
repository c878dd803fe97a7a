"""Shared test fixtures."""

import base64
import binascii
import textwrap
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from journash.adapters.file_store import FileEntryStore
from journash.config import Settings


class FakeCipher:
    """Reversible cipher that only decrypts with the key it encrypted with."""

    def encrypt(self, plaintext: str, key: str) -> str:
        payload = f"{key}\x00{plaintext}".encode("utf-8")
        return "\n".join(textwrap.wrap(base64.b64encode(payload).decode("ascii"), 64))

    def decrypt(self, ciphertext: str, key: str) -> tuple[str, bool]:
        try:
            payload = base64.b64decode("".join(ciphertext.split()), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return "", False
        stored_key, _, plaintext = payload.partition("\x00")
        if stored_key != key:
            return "", False
        return plaintext, True


@pytest.fixture
def cipher():
    return FakeCipher()


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def store(data_dir):
    return FileEntryStore(data_dir)


@pytest.fixture
def settings(tmp_path):
    return Settings(home=tmp_path)


@pytest.fixture
def clock():
    clock = MagicMock()
    clock.now.return_value = datetime(2025, 5, 1, 14, 30, 12)
    return clock
