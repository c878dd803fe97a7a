"""Entry serialization and boundary detection - no I/O dependencies.

On-disk layout of a period file::

    # Journal Entries for May 01, 2025

    ## Coding Session - 01-05-2025 14:30

    **Duration**: 1h 30m

    **Worked on**:
    Setup

    ---

Every line starting with ``## `` or the encryption marker opens a new
block. Free-text lines that would collide with those prefixes, with a
field label, or with the separator are escaped with one leading
backslash when written and unescaped when read back.
"""

import logging
import re
from datetime import datetime

from journash.errors import MalformedEntryError

from .entry import (
    DURATION_LABEL,
    ENCRYPTED_MARKER,
    HEADING_PREFIX,
    SEPARATOR,
    TIMESTAMP_FORMAT,
    EncryptedBlock,
    EntryKind,
    EntryRecord,
    ParsedEntry,
)

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(
    r"^## (?P<kind>.+?) - (?P<timestamp>\d{2}-\d{2}-\d{4} \d{2}:\d{2}|\d{4}-\d{2}-\d{2} \d{2}:\d{2})\s*$"
)
LABEL_RE = re.compile(r"^\*\*(?P<label>[^*\n]+)\*\*: ?(?P<inline>.*)$")
RESERVED_RE = re.compile(r"^(## |<!-- ENCRYPTED ENTRY|\*\*[^*\n]+\*\*:|\s*---\s*$)")

# Older revisions of the tool wrote ISO-style timestamps in headings.
_TIMESTAMP_FORMATS = (TIMESTAMP_FORMAT, "%Y-%m-%d %H:%M")


def is_heading(line: str) -> bool:
    return line.startswith(HEADING_PREFIX)


def is_marker(line: str) -> bool:
    return line.startswith(ENCRYPTED_MARKER)


def is_boundary(line: str) -> bool:
    """Whether a line opens a new block."""
    return is_heading(line) or is_marker(line)


def is_separator(line: str) -> bool:
    return line.strip() == SEPARATOR


def escape_line(line: str) -> str:
    """Prefix a backslash to free text that would read as markup."""
    if RESERVED_RE.match(line.lstrip("\\")):
        return "\\" + line
    return line


def unescape_line(line: str) -> str:
    if line.startswith("\\") and RESERVED_RE.match(line.lstrip("\\")):
        return line[1:]
    return line


def title_line(display_label: str) -> str:
    """Header written once at the top of a new period file."""
    return f"# Journal Entries for {display_label}"


def body_lines(record: EntryRecord) -> list[str]:
    """Duration and field lines of a record, each field followed by a blank line."""
    lines = []
    if record.kind.has_duration:
        duration = " ".join((record.duration or "").splitlines())
        lines.append(f"**{DURATION_LABEL}**: {duration}".rstrip())
        lines.append("")
    for label, text in record.fields.items():
        lines.append(f"**{label}**: ")
        lines.extend(escape_line(line) for line in text.splitlines())
        lines.append("")
    return lines


def serialize(record: EntryRecord) -> str:
    """Render a record as a heading-prefixed, separator-terminated block."""
    lines = [record.heading, ""]
    if record.encrypted_block is not None:
        lines.extend(record.encrypted_block.lines())
        lines.append("")
    else:
        lines.extend(body_lines(record))
    lines.extend([SEPARATOR, ""])
    return "\n".join(lines) + "\n"


def parse_timestamp(text: str) -> datetime | None:
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_heading(line: str) -> tuple[EntryKind | None, datetime | None]:
    """Extract kind and timestamp from a heading line."""
    match = HEADING_RE.match(line)
    if not match:
        return None, None
    return EntryKind.from_heading(match.group("kind")), parse_timestamp(match.group("timestamp"))


def _make_entry(lines: list[str], start: int, end: int, encrypted: bool) -> ParsedEntry:
    block = lines[start:end]
    kind, timestamp = parse_heading(block[0]) if is_heading(block[0]) else (None, None)
    legacy = encrypted and not is_heading(block[0])
    terminated = (
        end < len(lines)
        or legacy
        or any(is_separator(line) for line in block)
    )
    return ParsedEntry(
        start_line=start,
        end_line=end,
        lines=tuple(block),
        kind=kind,
        timestamp=timestamp,
        encrypted=encrypted,
        terminated=terminated,
    )


def parse_entries(
    text: str,
    strict: bool = False,
    warnings: list[str] | None = None,
) -> list[ParsedEntry]:
    """
    Locate entry blocks in a period file.

    Each block spans from its boundary line to the next boundary (or EOF).
    A marker that follows a heading with only blank lines in between is
    that entry's encrypted body; any other marker opens a legacy encrypted
    block. A trailing block with no separator is kept and logged (and
    reported through ``warnings`` when given), or raises
    MalformedEntryError when ``strict`` is set.
    """
    lines = text.splitlines()
    entries: list[ParsedEntry] = []
    start: int | None = None
    encrypted = False

    for i, line in enumerate(lines):
        if is_heading(line):
            if start is not None:
                entries.append(_make_entry(lines, start, i, encrypted))
            start, encrypted = i, False
        elif is_marker(line):
            attaches = (
                start is not None
                and not encrypted
                and is_heading(lines[start])
                and all(not prev.strip() for prev in lines[start + 1 : i])
            )
            if attaches:
                encrypted = True
                continue
            if start is not None:
                entries.append(_make_entry(lines, start, i, encrypted))
            start, encrypted = i, True

    if start is not None:
        entries.append(_make_entry(lines, start, len(lines), encrypted))

    if entries and not entries[-1].terminated:
        last = entries[-1]
        if strict:
            raise MalformedEntryError("Entry has no separator before end of file", line=last.start_line + 1)
        message = f"Unterminated entry at line {last.start_line + 1}; treating rest of file as one entry"
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)

    return entries


def split_encrypted(entry: ParsedEntry) -> tuple[list[str], list[str], list[str]]:
    """
    Split an encrypted block into (before, ciphertext, after) line lists.

    ``before`` ends with the marker line; ``after`` starts at the
    separator, if any.
    """
    lines = list(entry.lines)
    marker_index = next(i for i, line in enumerate(lines) if is_marker(line))
    end = next(
        (i for i in range(marker_index + 1, len(lines)) if is_separator(lines[i])),
        len(lines),
    )
    cipher_lines = [line.strip() for line in lines[marker_index + 1 : end] if line.strip()]
    return lines[: marker_index + 1], cipher_lines, lines[end:]


def parse_body(lines: list[str]) -> tuple[str | None, dict[str, str]]:
    """Read duration and fields from the lines following a heading."""
    duration = None
    collected: dict[str, list[str]] = {}
    current: str | None = None

    for line in lines:
        if is_separator(line):
            break
        match = LABEL_RE.match(line)
        if match:
            label, inline = match.group("label"), match.group("inline")
            if label == DURATION_LABEL:
                duration = inline.strip()
                current = None
                continue
            current = label
            collected[label] = [inline] if inline.strip() else []
            continue
        if current is not None:
            collected[current].append(unescape_line(line))

    fields = {label: "\n".join(body).strip("\n").rstrip() for label, body in collected.items()}
    return duration, fields


def parse_record(entry: ParsedEntry) -> EntryRecord:
    """Rebuild an EntryRecord from a parsed block."""
    if not entry.has_heading:
        raise MalformedEntryError("Block has no heading", line=entry.start_line + 1)
    if entry.kind is None or entry.timestamp is None:
        raise MalformedEntryError(f"Unrecognized heading: {entry.lines[0]!r}", line=entry.start_line + 1)

    if entry.encrypted:
        _, cipher_lines, _ = split_encrypted(entry)
        return EntryRecord(
            kind=entry.kind,
            timestamp=entry.timestamp,
            encrypted_block=EncryptedBlock("\n".join(cipher_lines)),
        )

    duration, fields = parse_body(list(entry.lines[1:]))
    return EntryRecord(
        kind=entry.kind,
        timestamp=entry.timestamp,
        duration=duration if entry.kind.has_duration else None,
        fields=fields,
    )
