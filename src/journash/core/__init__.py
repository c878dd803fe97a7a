"""Functional core - pure business logic with no I/O."""

from .entry import EncryptedBlock, EntryKind, EntryRecord, ParsedEntry
from .formatter import parse_entries, parse_record, serialize
from .search import SearchHit, SearchReport, search_periods, search_text
from .stats import StatsStatus, StatsSummary, aggregate
from .encryption import DecryptedView, DecryptOutcome, decrypt_for_display, encrypt_record

__all__ = [
    # Entries
    "EncryptedBlock",
    "EntryKind",
    "EntryRecord",
    "ParsedEntry",
    # Formatting
    "parse_entries",
    "parse_record",
    "serialize",
    # Search
    "SearchHit",
    "SearchReport",
    "search_periods",
    "search_text",
    # Stats
    "StatsStatus",
    "StatsSummary",
    "aggregate",
    # Encryption
    "DecryptedView",
    "DecryptOutcome",
    "decrypt_for_display",
    "encrypt_record",
]
