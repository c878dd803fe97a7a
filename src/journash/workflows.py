"""Shared workflow layer between the CLI and the journal core.

The Journal service ties the entry store, cipher, version control and
clock together and exposes the operations the CLI calls: append, list,
view, search and stats.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .adapters.fernet_cipher import FernetCipher
from .adapters.file_store import FileEntryStore
from .adapters.git_cli import GitCLI, NullVersionControl
from .adapters.openssl_cipher import OpenSSLCipher
from .adapters.system_clock import SystemClock
from .config import Settings
from .core.encryption import DecryptedView, decrypt_for_display, encrypt_record
from .core.entry import EntryKind, EntryRecord, ParsedEntry
from .core.formatter import parse_entries
from .core.search import SearchReport, search_periods
from .core.stats import StatsSummary, aggregate
from .errors import EncryptionUnavailableError, JournashError, NotFoundError
from .ports import Cipher, Clock, EntryStore, VersionControl

logger = logging.getLogger(__name__)

MONTH_YEAR_RE = re.compile(r"^(?P<month>\d{2})-(?P<year>\d{4})$")
YEAR_MONTH_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})$")


@dataclass
class AppendResult:
    """Outcome of saving one entry."""

    path: Path
    period_key: str
    encrypted: bool
    warnings: list[str] = field(default_factory=list)


@dataclass
class PeriodSummary:
    """One period file with its entry counts."""

    key: str
    display_label: str
    entry_count: int
    coding_count: int = 0
    personal_count: int = 0
    encrypted_count: int = 0


@dataclass
class PeriodView:
    """Text of one or more period files, ready for display."""

    keys: list[str]
    text: str
    decrypted: DecryptedView | None = None
    warnings: list[str] = field(default_factory=list)


class Journal:
    """Journal operations over injected collaborators."""

    def __init__(
        self,
        settings: Settings,
        store: EntryStore,
        cipher: Cipher | None = None,
        version_control: VersionControl | None = None,
        clock: Clock | None = None,
    ):
        self.settings = settings
        self.store = store
        self.cipher = cipher
        self.version_control = version_control or NullVersionControl()
        self.clock = clock or SystemClock()

    # ============== Append ==============

    def append_entry(
        self,
        kind: EntryKind,
        answers: dict[str, str],
        duration: str | None = None,
        encrypt_requested: bool = False,
        key: str | None = None,
    ) -> AppendResult:
        """
        Save a new entry to the current period file.

        If encryption is requested but unavailable or fails, the entry is
        stored in plaintext and the reason is returned as a warning.
        Storage errors propagate.
        """
        record = EntryRecord.create(kind, self.clock.now(), answers, duration)
        warnings: list[str] = []

        if encrypt_requested:
            try:
                record = self._encrypt(record, key)
            except EncryptionUnavailableError as e:
                message = f"Encryption failed ({e}). Saving entry without encryption."
                logger.warning(message)
                warnings.append(message)

        period_key = self.store.period_key_for(record.timestamp)
        path = self.store.append(period_key, record)

        if self.settings.git_enabled and self.settings.git_auto_commit:
            try:
                self.version_control.commit(f"Journal update - {record.timestamp:%d-%m-%Y %H:%M}")
            except RuntimeError as e:
                message = f"Failed to commit changes to git repository: {e}"
                logger.warning(message)
                warnings.append(message)

        return AppendResult(path=path, period_key=period_key, encrypted=record.encrypted, warnings=warnings)

    def _encrypt(self, record: EntryRecord, key: str | None) -> EntryRecord:
        if self.cipher is None:
            raise EncryptionUnavailableError("No cipher configured")
        if not key:
            raise EncryptionUnavailableError("No encryption password given")
        return encrypt_record(record, key, self.cipher)

    # ============== Reading ==============

    def _load_parsed(self, warnings: list[str]) -> list[tuple[str, str, list[ParsedEntry]]]:
        """Load and parse every period, skipping unreadable files."""
        loaded = []
        for period_key in self.store.list_periods():
            try:
                text = self.store.load_raw(period_key)
            except JournashError as e:
                message = f"Cannot read {period_key}: {e}. Skipping."
                logger.warning(message)
                warnings.append(message)
                continue
            parse_warnings: list[str] = []
            entries = parse_entries(text, warnings=parse_warnings)
            warnings.extend(f"{period_key}: {message}" for message in parse_warnings)
            loaded.append((period_key, text, entries))
        return loaded

    def list_periods(self, warnings: list[str] | None = None) -> list[PeriodSummary]:
        """
        Summaries of every period, most recent first.

        Unreadable or malformed files are reported through ``warnings``
        when given.
        """
        if warnings is None:
            warnings = []
        summaries = []
        for period_key, _, entries in self._load_parsed(warnings):
            summaries.append(
                PeriodSummary(
                    key=period_key,
                    display_label=self.store.display_label(period_key),
                    entry_count=len(entries),
                    coding_count=sum(1 for e in entries if e.kind is EntryKind.CODING),
                    personal_count=sum(1 for e in entries if e.kind is EntryKind.PERSONAL),
                    encrypted_count=sum(1 for e in entries if e.encrypted),
                )
            )
        return summaries

    def resolve_periods(self, key: str) -> list[str]:
        """
        Period keys a view request refers to, oldest first.

        Accepts an exact period key, or a month (MM-YYYY, or the
        deprecated YYYY-MM) which covers every stored period in it.
        """
        stored = self.store.list_periods()
        if key in stored:
            return [key]
        if self.store.parse_key(key) is not None:
            raise NotFoundError(key)

        match = MONTH_YEAR_RE.match(key)
        if not match:
            match = YEAR_MONTH_RE.match(key)
            if match:
                logger.warning("The YYYY-MM format is deprecated. Please use MM-YYYY format instead.")
        if not match:
            raise NotFoundError(key, f"Invalid date format: {key}. Use DD-MM-YYYY or MM-YYYY.")

        month, year = int(match.group("month")), int(match.group("year"))
        in_month = []
        for period_key in stored:
            parsed = self.store.parse_key(period_key)
            if parsed and parsed.month == month and parsed.year == year:
                in_month.append(period_key)
        if not in_month:
            raise NotFoundError(key, f"No entries found for {month:02d}-{year}")
        return list(reversed(in_month))

    def view_period(self, key: str, decrypt_key: str | None = None) -> PeriodView:
        """
        Text of the requested period(s).

        With ``decrypt_key``, encrypted entries are decrypted in the
        returned text only; files on disk are never rewritten.
        """
        keys = self.resolve_periods(key)
        text = "\n".join(self.store.load_raw(period_key) for period_key in keys)
        view = PeriodView(keys=keys, text=text)

        if decrypt_key is not None:
            if self.cipher is None:
                view.warnings.append("No cipher configured; showing encrypted entries as stored.")
                return view
            view.decrypted = decrypt_for_display(text, decrypt_key, self.cipher)
            view.text = view.decrypted.text
        return view

    def search(self, term: str) -> SearchReport:
        """Case-insensitive search over every plaintext period."""
        warnings: list[str] = []
        loaded = self._load_parsed(warnings)
        report = search_periods(
            [(period_key, text) for period_key, text, _ in loaded],
            term,
            self.settings.search_context_lines,
        )
        report.warnings.extend(warnings)
        return report

    def stats(self) -> StatsSummary:
        """Aggregate statistics over every period."""
        warnings: list[str] = []
        loaded = self._load_parsed(warnings)
        summary = aggregate([(period_key, entries) for period_key, _, entries in loaded])
        summary.warnings.extend(warnings)
        summary.storage_bytes = self.store.size_bytes()
        return summary


def get_cipher(settings: Settings) -> Cipher:
    """Cipher backend selected by the CIPHER setting."""
    if settings.cipher == "openssl":
        return OpenSSLCipher()
    return FernetCipher()


def get_version_control(settings: Settings) -> VersionControl:
    if settings.git_enabled:
        return GitCLI(settings.home)
    return NullVersionControl()


def get_journal(settings: Settings) -> Journal:
    """Build a Journal wired to the configured adapters."""
    store = FileEntryStore(settings.data_dir, settings.journal_file_format)
    return Journal(
        settings=settings,
        store=store,
        cipher=get_cipher(settings),
        version_control=get_version_control(settings),
        clock=SystemClock(),
    )

