"""Tests for the shared workflow layer."""

import hashlib
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from journash.adapters.fernet_cipher import FernetCipher
from journash.adapters.file_store import FileEntryStore
from journash.adapters.git_cli import GitCLI, NullVersionControl
from journash.adapters.openssl_cipher import OpenSSLCipher
from journash.config import Settings
from journash.core.encryption import PLACEHOLDER
from journash.core.entry import ENCRYPTED_MARKER, EntryKind
from journash.core.stats import StatsStatus
from journash.errors import EncryptionUnavailableError, NotFoundError
from journash.workflows import Journal, get_journal


@pytest.fixture
def journal(settings, store, cipher, clock):
    return Journal(settings=settings, store=store, cipher=cipher, clock=clock)


def at(journal, *args):
    journal.clock.now.return_value = datetime(*args)


def digest(path):
    return hashlib.sha256(path.read_bytes()).hexdigest()


class TestAppendEntry:
    def test_first_entry_creates_period_file(self, journal, data_dir):
        result = journal.append_entry(EntryKind.CODING, {"Worked on": "Setup"}, duration="1h 30m")

        assert result.path == data_dir / "01-05-2025.md"
        assert result.period_key == "01-05-2025"
        assert not result.encrypted
        content = result.path.read_text()
        assert content.startswith("# Journal Entries for May 01, 2025\n\n## Coding Session - 01-05-2025 14:30\n")
        assert "**Worked on**: \nSetup\n" in content

        [summary] = journal.list_periods()
        assert summary.key == "01-05-2025"
        assert summary.entry_count == 1
        assert summary.coding_count == 1

    def test_second_entry_same_day(self, journal):
        journal.append_entry(EntryKind.CODING, {"Worked on": "Setup"})
        at(journal, 2025, 5, 1, 21, 0)
        journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "Good day"})

        [summary] = journal.list_periods()
        assert summary.entry_count == 2
        assert summary.personal_count == 1

    def test_encrypted_entry(self, journal):
        result = journal.append_entry(
            EntryKind.PERSONAL, {"Thoughts": "Secret plan"}, encrypt_requested=True, key="pw"
        )

        assert result.encrypted
        content = result.path.read_text()
        assert "## Personal Reflection - 01-05-2025 14:30" in content
        assert ENCRYPTED_MARKER in content
        assert "Secret plan" not in content
        assert journal.list_periods()[0].encrypted_count == 1

    def test_encryption_without_cipher_falls_back(self, settings, store, clock):
        journal = Journal(settings=settings, store=store, clock=clock)

        result = journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "hi"}, encrypt_requested=True, key="pw")

        assert not result.encrypted
        assert "Saving entry without encryption" in result.warnings[0]
        assert "hi" in result.path.read_text()

    def test_cipher_failure_falls_back(self, settings, store, clock):
        cipher = MagicMock()
        cipher.encrypt.side_effect = EncryptionUnavailableError("OpenSSL is not installed")
        journal = Journal(settings=settings, store=store, cipher=cipher, clock=clock)

        result = journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "hi"}, encrypt_requested=True, key="pw")

        assert not result.encrypted
        assert "OpenSSL is not installed" in result.warnings[0]

    def test_missing_password_falls_back(self, journal):
        result = journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "hi"}, encrypt_requested=True)

        assert not result.encrypted
        assert result.warnings

    def test_duration_cannot_add_phantom_entries(self, journal):
        journal.append_entry(
            EntryKind.CODING, {"Worked on": "Setup"}, duration="1h\n---\n## Coding Session - 09-09-2020 10:00"
        )

        summary = journal.stats()

        assert summary.total_entries == 1
        assert summary.entries_by_period == {"01-05-2025": 1}

    def test_auto_commit(self, tmp_path, store, clock):
        settings = Settings(home=tmp_path, git_enabled=True, git_auto_commit=True)
        vcs = MagicMock()
        journal = Journal(settings=settings, store=store, version_control=vcs, clock=clock)

        journal.append_entry(EntryKind.CODING, {})

        vcs.commit.assert_called_once_with("Journal update - 01-05-2025 14:30")

    def test_commit_failure_is_a_warning(self, tmp_path, store, clock):
        settings = Settings(home=tmp_path, git_enabled=True, git_auto_commit=True)
        vcs = MagicMock()
        vcs.commit.side_effect = RuntimeError("git commit failed")
        journal = Journal(settings=settings, store=store, version_control=vcs, clock=clock)

        result = journal.append_entry(EntryKind.CODING, {})

        assert result.path.exists()
        assert "git commit failed" in result.warnings[0]

    def test_no_commit_when_git_disabled(self, settings, store, clock):
        vcs = MagicMock()
        journal = Journal(settings=settings, store=store, version_control=vcs, clock=clock)

        journal.append_entry(EntryKind.CODING, {})

        vcs.commit.assert_not_called()


class TestListPeriods:
    def test_reports_unreadable_and_malformed_files(self, journal, data_dir):
        (data_dir / "01-05-2025.md").write_text("## Coding Session - 01-05-2025 14:30\n\n**Worked on**: \nhalf")
        (data_dir / "02-05-2025.md").write_bytes(b"\xff\xfe\xfa")
        warnings = []

        summaries = journal.list_periods(warnings)

        assert [s.key for s in summaries] == ["01-05-2025"]
        assert len(warnings) == 2
        assert "Cannot read 02-05-2025" in warnings[0]
        assert "01-05-2025: Unterminated entry" in warnings[1]

    def test_warnings_are_optional(self, journal, data_dir):
        (data_dir / "02-05-2025.md").write_bytes(b"\xff\xfe\xfa")

        assert journal.list_periods() == []


class TestViewPeriod:
    def test_view_day(self, journal):
        journal.append_entry(EntryKind.CODING, {"Worked on": "Setup"})

        view = journal.view_period("01-05-2025")

        assert view.keys == ["01-05-2025"]
        assert "Setup" in view.text

    def test_missing_day(self, journal):
        with pytest.raises(NotFoundError, match="No entries found for 02-05-2025"):
            journal.view_period("02-05-2025")

    def test_invalid_key(self, journal):
        with pytest.raises(NotFoundError, match="Invalid date format"):
            journal.view_period("yesterday")

    def test_month_view_is_chronological(self, journal):
        at(journal, 2025, 5, 2, 9, 0)
        journal.append_entry(EntryKind.CODING, {"Worked on": "Second day"})
        at(journal, 2025, 5, 1, 9, 0)
        journal.append_entry(EntryKind.CODING, {"Worked on": "First day"})
        at(journal, 2025, 6, 1, 9, 0)
        journal.append_entry(EntryKind.CODING, {"Worked on": "Next month"})

        view = journal.view_period("05-2025")

        assert view.keys == ["01-05-2025", "02-05-2025"]
        assert view.text.index("First day") < view.text.index("Second day")
        assert "Next month" not in view.text
        assert journal.view_period("2025-05").keys == view.keys

    def test_empty_month(self, journal):
        journal.append_entry(EntryKind.CODING, {})

        with pytest.raises(NotFoundError, match="No entries found for 04-2025"):
            journal.view_period("04-2025")

    def test_decrypt_for_display(self, journal):
        journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "Secret plan"}, encrypt_requested=True, key="pw")

        view = journal.view_period("01-05-2025", decrypt_key="pw")

        assert "Secret plan" in view.text
        assert view.decrypted.replaced == 1

    def test_wrong_key_leaves_file_unchanged(self, journal, data_dir):
        journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "Secret plan"}, encrypt_requested=True, key="pw")
        path = data_dir / "01-05-2025.md"
        before = digest(path)

        view = journal.view_period("01-05-2025", decrypt_key="wrong")

        assert PLACEHOLDER in view.text
        assert view.decrypted.failed == 1
        assert digest(path) == before

    def test_decrypt_without_cipher(self, settings, store, clock):
        journal = Journal(settings=settings, store=store, clock=clock)
        journal.append_entry(EntryKind.CODING, {"Worked on": "Setup"})

        view = journal.view_period("01-05-2025", decrypt_key="pw")

        assert view.decrypted is None
        assert view.warnings


class TestSearch:
    def test_unterminated_entry_is_a_warning(self, journal, data_dir):
        (data_dir / "01-05-2025.md").write_text("## Coding Session - 01-05-2025 14:30\n\n**Worked on**: \nparser")

        report = journal.search("parser")

        assert len(report.hits) == 1
        assert "01-05-2025: Unterminated entry" in report.warnings[0]

    def test_finds_term_with_context(self, journal):
        journal.append_entry(EntryKind.CODING, {"Worked on": "Fixed the Parser"})

        report = journal.search("parser")

        [hit] = report.hits
        assert hit.period_key == "01-05-2025"
        assert hit.line == "Fixed the Parser"
        assert hit.context_before[-1] == "**Worked on**: "

    def test_skips_encrypted_period(self, journal):
        journal.append_entry(EntryKind.PERSONAL, {"Thoughts": "parser"}, encrypt_requested=True, key="pw")
        journal.append_entry(EntryKind.CODING, {"Worked on": "parser"})

        report = journal.search("parser")

        assert not report.has_matches
        assert report.skipped_encrypted == ["01-05-2025"]

    def test_uses_configured_context(self, tmp_path, store, clock):
        journal = Journal(settings=Settings(home=tmp_path, search_context_lines=0), store=store, clock=clock)
        journal.append_entry(EntryKind.CODING, {"Worked on": "parser"})

        [hit] = journal.search("parser").hits
        assert hit.context_before == []

    def test_unreadable_file_is_a_warning(self, journal, data_dir):
        journal.append_entry(EntryKind.CODING, {"Worked on": "parser"})
        (data_dir / "02-05-2025.md").write_bytes(b"\xff\xfe\xfa")

        report = journal.search("parser")

        assert len(report.hits) == 1
        assert "Cannot read 02-05-2025" in report.warnings[0]


class TestStats:
    def test_unterminated_entry_is_a_warning(self, journal, data_dir):
        (data_dir / "01-05-2025.md").write_text("## Coding Session - 01-05-2025 14:30\n\n**Worked on**: \nhalf")

        summary = journal.stats()

        assert summary.total_entries == 1
        assert summary.warnings == ["01-05-2025: Unterminated entry at line 1; treating rest of file as one entry"]

    def test_empty_journal(self, journal):
        summary = journal.stats()

        assert summary.status is StatsStatus.NO_ENTRIES
        assert summary.total_entries == 0

    def test_counts(self, journal):
        at(journal, 2025, 5, 1, 9, 0)
        journal.append_entry(EntryKind.CODING, {})
        journal.append_entry(EntryKind.PERSONAL, {}, encrypt_requested=True, key="pw")
        at(journal, 2025, 5, 3, 9, 0)
        journal.append_entry(EntryKind.CODING, {})

        summary = journal.stats()

        assert summary.status is StatsStatus.OK
        assert summary.total_entries == 3
        assert summary.most_active_period == "01-05-2025"
        assert summary.newest_period == "03-05-2025"
        assert summary.oldest_period == "01-05-2025"
        assert summary.average_per_period == 2
        assert summary.encrypted_entries == 1
        assert summary.storage_bytes > 0


class TestGetJournal:
    def test_default_wiring(self, tmp_path):
        journal = get_journal(Settings(home=tmp_path))

        assert isinstance(journal.store, FileEntryStore)
        assert journal.store.data_dir == tmp_path / "data"
        assert isinstance(journal.cipher, FernetCipher)
        assert isinstance(journal.version_control, NullVersionControl)

    def test_openssl_and_git(self, tmp_path):
        journal = get_journal(Settings(home=tmp_path, cipher="openssl", git_enabled=True))

        assert isinstance(journal.cipher, OpenSSLCipher)
        assert isinstance(journal.version_control, GitCLI)
