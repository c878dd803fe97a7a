"""Journal entry domain model - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

ENCRYPTED_MARKER = "<!-- ENCRYPTED ENTRY -->"
HEADING_PREFIX = "## "
SEPARATOR = "---"
TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M"


class EntryKind(Enum):
    """Kind of journal entry, as written in its heading."""

    CODING = "Coding Session"
    PERSONAL = "Personal Reflection"

    @property
    def labels(self) -> tuple[str, ...]:
        """Field labels for this kind, in serialization order."""
        return FIELD_LABELS[self]

    @property
    def has_duration(self) -> bool:
        return self is EntryKind.CODING

    @classmethod
    def from_heading(cls, text: str) -> "EntryKind | None":
        """Match a heading title such as 'Coding Session'."""
        for kind in cls:
            if kind.value == text.strip():
                return kind
        return None


FIELD_LABELS: dict[EntryKind, tuple[str, ...]] = {
    EntryKind.CODING: ("Worked on", "Challenges", "Solutions", "Learned", "Next Steps"),
    EntryKind.PERSONAL: ("Grateful for", "Accomplished", "Thoughts"),
}

DURATION_LABEL = "Duration"


def _normalize_text(text: str) -> str:
    return "\n".join(text.splitlines()).strip("\n").rstrip()


@dataclass(frozen=True)
class EncryptedBlock:
    """Ciphertext standing in for an entry body."""

    ciphertext: str

    def lines(self) -> list[str]:
        """Marker line followed by the ciphertext lines."""
        return [ENCRYPTED_MARKER, *self.ciphertext.splitlines()]


@dataclass(frozen=True)
class EntryRecord:
    """One journal entry.

    Created once at append time and never modified afterwards. When
    ``encrypted_block`` is set, ``duration`` and ``fields`` are not
    written; the block's ciphertext replaces the body.
    """

    kind: EntryKind
    timestamp: datetime
    duration: str | None = None
    fields: dict[str, str] = field(default_factory=dict)
    encrypted_block: EncryptedBlock | None = None

    @property
    def encrypted(self) -> bool:
        return self.encrypted_block is not None

    @property
    def heading(self) -> str:
        return f"{HEADING_PREFIX}{self.kind.value} - {self.timestamp.strftime(TIMESTAMP_FORMAT)}"

    @classmethod
    def create(
        cls,
        kind: EntryKind,
        timestamp: datetime,
        answers: dict[str, str],
        duration: str | None = None,
    ) -> "EntryRecord":
        """Build a record with the kind's fields in their fixed order.

        Missing answers become empty strings; labels the kind does not
        define are rejected. Every line break ``str.splitlines`` knows
        (``\\r``, ``\\x0c``, ``\\u2028`` ...) becomes ``\\n`` in field text, so
        the stored lines are the record's lines. The duration is a single
        line; breaks in it collapse to spaces.
        """
        unknown = set(answers) - set(kind.labels)
        if unknown:
            raise ValueError(f"Unknown fields for {kind.value}: {', '.join(sorted(unknown))}")
        fields = {label: _normalize_text(answers.get(label, "")) for label in kind.labels}
        if duration is not None:
            duration = " ".join(part.strip() for part in duration.splitlines() if part.strip())
        return cls(
            kind=kind,
            timestamp=timestamp.replace(second=0, microsecond=0),
            duration=duration if kind.has_duration else None,
            fields=fields,
        )


@dataclass(frozen=True)
class ParsedEntry:
    """A block located in a period file.

    ``start_line`` and ``end_line`` are 0-based and half-open. ``kind`` and
    ``timestamp`` are None for legacy encrypted blocks that carry no
    heading, or for headings that do not parse.
    """

    start_line: int
    end_line: int
    lines: tuple[str, ...]
    kind: EntryKind | None
    timestamp: datetime | None
    encrypted: bool = False
    terminated: bool = True

    @property
    def raw(self) -> str:
        return "\n".join(self.lines)

    @property
    def has_heading(self) -> bool:
        return bool(self.lines) and self.lines[0].startswith(HEADING_PREFIX)
