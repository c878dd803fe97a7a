"""Entry store interface."""

from datetime import datetime
from pathlib import Path
from typing import Protocol

from journash.core.entry import EntryRecord


class EntryStore(Protocol):
    """Interface for the period-file layout of a content directory."""

    def period_key_for(self, timestamp: datetime) -> str:
        """Period key a timestamp falls into."""
        ...

    def append(self, period_key: str, record: EntryRecord) -> Path:
        """Append a serialized record to the period file. Returns its path."""
        ...

    def list_periods(self) -> list[str]:
        """Period keys with a file on disk, most recent first."""
        ...

    def load_raw(self, period_key: str) -> str:
        """Full text of a period file. Raises NotFoundError if missing."""
        ...

    def parse_key(self, period_key: str) -> datetime | None:
        """Calendar date of a period key, or None if it does not match."""
        ...

    def display_label(self, period_key: str) -> str:
        """Human-readable period name."""
        ...

    @property
    def is_daily(self) -> bool:
        """Whether periods are days (otherwise months)."""
        ...

    def size_bytes(self) -> int:
        """Total size of all period files."""
        ...
