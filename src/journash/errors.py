"""Journash error taxonomy."""

from pathlib import Path


class JournashError(Exception):
    """Base class for all journash errors."""

    pass


class NotFoundError(JournashError):
    """Raised when a requested period has no entry file."""

    def __init__(self, period_key: str, message: str | None = None):
        self.period_key = period_key
        super().__init__(message or f"No entries found for {period_key}")


class EntryStoreIOError(JournashError):
    """Raised when reading or writing a period file fails."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class DecryptionError(JournashError):
    """Raised when an encrypted block cannot be decrypted with the given key."""

    pass


class EncryptionUnavailableError(JournashError):
    """Raised when the cipher backend is missing or fails to encrypt."""

    pass


class MalformedEntryError(JournashError):
    """Raised when a block cannot be interpreted as a journal entry."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message if line is None else f"{message} (line {line})")
