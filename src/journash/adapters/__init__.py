"""Adapters - I/O implementations of ports."""

from .file_store import FileEntryStore
from .fernet_cipher import FernetCipher
from .openssl_cipher import OpenSSLCipher
from .git_cli import GitCLI, NullVersionControl
from .system_clock import SystemClock

__all__ = [
    "FileEntryStore",
    "FernetCipher",
    "OpenSSLCipher",
    "GitCLI",
    "NullVersionControl",
    "SystemClock",
]
