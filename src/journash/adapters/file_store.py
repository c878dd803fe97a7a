"""File-based entry store adapter."""

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

from journash.core.entry import EntryRecord
from journash.core.formatter import serialize, title_line
from journash.errors import EntryStoreIOError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_FILE_FORMAT = "%d-%m-%Y.md"

# Used to check that a filename pattern survives strftime -> strptime.
_PROBE = datetime(2025, 5, 17)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class FileEntryStore:
    """
    File-based entry store.

    Implements EntryStore protocol. Each period (a day or a month,
    depending on ``file_format``) gets one markdown file in ``data_dir``,
    named by formatting the entry timestamp with ``file_format``.

    The store does not create ``data_dir``. Appends are atomic per call
    (temp file + rename) but not serialized across processes.
    """

    def __init__(self, data_dir: Path | str, file_format: str = DEFAULT_FILE_FORMAT):
        self.data_dir = Path(data_dir).expanduser()
        self.file_format = file_format

        suffix = Path(file_format).suffix
        if suffix:
            self.suffix = suffix
            self.key_format = file_format[: -len(suffix)]
        else:
            self.suffix = ".md"
            self.key_format = file_format

        if not self.key_format or self.parse_key(_PROBE.strftime(self.key_format)) is None:
            raise ValueError(f"Unsupported journal file format: {file_format!r}")

    @property
    def is_daily(self) -> bool:
        """Whether periods are days (otherwise months)."""
        return any(code in self.key_format for code in ("%d", "%j"))

    def period_key_for(self, timestamp: datetime) -> str:
        return timestamp.strftime(self.key_format)

    def parse_key(self, period_key: str) -> datetime | None:
        """Calendar date of a period key, or None if it does not match the format."""
        try:
            parsed = datetime.strptime(period_key, self.key_format)
        except ValueError:
            return None
        # strptime accepts unpadded numbers; keys must be canonical.
        if parsed.strftime(self.key_format) != period_key:
            return None
        return parsed

    def display_label(self, period_key: str) -> str:
        """Human-readable period name, e.g. 'May 2025' or 'May 01, 2025'."""
        parsed = self.parse_key(period_key)
        if parsed is None:
            return period_key
        return parsed.strftime("%B %d, %Y" if self.is_daily else "%B %Y")

    def path_for(self, period_key: str) -> Path:
        if self.parse_key(period_key) is None:
            raise ValueError(f"Invalid period key {period_key!r} for format {self.file_format!r}")
        return self.data_dir / f"{period_key}{self.suffix}"

    def list_periods(self) -> list[str]:
        """Period keys with a file on disk, most recent first."""
        if not self.data_dir.is_dir():
            logger.debug(f"Content directory not found: {self.data_dir}")
            return []

        found = []
        for path in self.data_dir.glob(f"*{self.suffix}"):
            if not path.is_file():
                continue
            parsed = self.parse_key(path.stem)
            if parsed is None:
                logger.debug(f"Skipping file outside period pattern: {path.name}")
                continue
            found.append((parsed, path.stem))

        found.sort(reverse=True)
        return [key for _, key in found]

    def load_raw(self, period_key: str) -> str:
        """Full text of a period file."""
        try:
            path = self.path_for(period_key)
        except ValueError:
            raise NotFoundError(period_key) from None

        if not path.exists():
            raise NotFoundError(period_key)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise EntryStoreIOError(path, f"Failed to read journal file ({e})") from e

    def size_bytes(self) -> int:
        """Total size of all period files."""
        total = 0
        for period_key in self.list_periods():
            try:
                total += self.path_for(period_key).stat().st_size
            except OSError:
                continue
        return total

    def append(self, period_key: str, record: EntryRecord) -> Path:
        """
        Append a record to the period file, creating it with a title if absent.

        The new file content is written to a temp file in the same
        directory and renamed over the original, so a failure leaves the
        period file exactly as it was.
        """
        path = self.path_for(period_key)
        if not self.data_dir.is_dir():
            raise EntryStoreIOError(self.data_dir, "Content directory does not exist")

        block = serialize(record)
        if path.exists():
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise EntryStoreIOError(path, f"Failed to read journal file ({e})") from e
            if content and not content.endswith("\n"):
                content += "\n"
            if content and not content.endswith("\n\n"):
                content += "\n"
            content += block
        else:
            logger.debug(f"Creating new journal file with header: {path}")
            content = f"{title_line(self.display_label(period_key))}\n\n{block}"

        self._write_atomic(path, content)
        logger.info(f"Journal entry saved to {path}")
        return path

    def _write_atomic(self, path: Path, content: str) -> None:
        """Atomic write: temp file + rename so a kill can't corrupt."""
        try:
            fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise EntryStoreIOError(path, f"Failed to create temp file ({e})") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            if path.exists():
                shutil.copymode(path, tmp)
            else:
                # mkstemp creates 0600; new period files follow the umask
                os.chmod(tmp, 0o666 & ~_current_umask())
            os.replace(tmp, path)  # atomic on POSIX
        except BaseException as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            if isinstance(e, OSError):
                raise EntryStoreIOError(path, f"Failed to write journal file ({e})") from e
            raise
