"""Entry encryption and display-only decryption - no I/O dependencies.

Decryption never edits a file. The period text is parsed into blocks,
each encrypted block is replaced by its plaintext (or a placeholder when
the key is wrong), and the blocks are rendered back into a new string.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from journash.errors import DecryptionError, EncryptionUnavailableError
from journash.ports.cipher import Cipher

from .entry import EncryptedBlock, EntryRecord, ParsedEntry
from .formatter import body_lines, parse_entries, split_encrypted

logger = logging.getLogger(__name__)

FAILED_MARKER = "<!-- ENCRYPTED ENTRY (Decryption failed) -->"
PLACEHOLDER = "*This entry could not be decrypted. The password may be incorrect.*"


class DecryptOutcome(Enum):
    REPLACED = "replaced"
    FAILED = "failed"


@dataclass
class DecryptedView:
    """Rendered period text plus one outcome per encrypted block."""

    text: str
    outcomes: list[DecryptOutcome] = field(default_factory=list)

    @property
    def replaced(self) -> int:
        return self.outcomes.count(DecryptOutcome.REPLACED)

    @property
    def failed(self) -> int:
        return self.outcomes.count(DecryptOutcome.FAILED)


def encrypt_record(record: EntryRecord, key: str, cipher: Cipher) -> EntryRecord:
    """
    Return a copy of ``record`` whose body is replaced by ciphertext.

    The heading (kind and timestamp) stays readable. Raises
    EncryptionUnavailableError if the cipher fails or returns nothing.
    """
    if record.encrypted:
        return record
    plaintext = "\n".join(body_lines(record))
    ciphertext = cipher.encrypt(plaintext, key).strip()
    if not ciphertext:
        raise EncryptionUnavailableError("Cipher produced no output")
    return replace(record, encrypted_block=EncryptedBlock(ciphertext))


def decrypt_block(ciphertext: str, key: str, cipher: Cipher) -> str:
    """Decrypt one block's ciphertext. Raises DecryptionError on failure."""
    if not ciphertext.strip():
        raise DecryptionError("Encrypted block is empty")
    plaintext, ok = cipher.decrypt(ciphertext, key)
    if not ok or not plaintext.strip():
        raise DecryptionError("Could not decrypt entry")
    return plaintext


def _render_encrypted(entry: ParsedEntry, key: str, cipher: Cipher) -> tuple[DecryptOutcome, list[str]]:
    before, cipher_lines, after = split_encrypted(entry)
    prefix = before[:-1]  # drop the marker line

    try:
        plaintext = decrypt_block("\n".join(cipher_lines), key, cipher)
    except DecryptionError as e:
        logger.debug(f"Block at line {entry.start_line + 1} not decrypted: {e}")
        return DecryptOutcome.FAILED, [*prefix, FAILED_MARKER, PLACEHOLDER, "", *after]

    recovered = plaintext.splitlines()
    if recovered and recovered[-1].strip() and (after or not entry.has_heading):
        recovered.append("")
    return DecryptOutcome.REPLACED, [*prefix, *recovered, *after]


def decrypt_for_display(text: str, key: str, cipher: Cipher) -> DecryptedView:
    """
    Render ``text`` with every encrypted block decrypted.

    Plain blocks and the file preamble are copied through unchanged. A
    block that fails to decrypt is shown as a placeholder; the caller's
    stored file is never touched.
    """
    lines = text.splitlines()
    output: list[str] = []
    outcomes: list[DecryptOutcome] = []
    cursor = 0

    for entry in parse_entries(text):
        output.extend(lines[cursor : entry.start_line])
        cursor = entry.end_line
        if not entry.encrypted:
            output.extend(entry.lines)
            continue
        outcome, rendered = _render_encrypted(entry, key, cipher)
        outcomes.append(outcome)
        output.extend(rendered)

    output.extend(lines[cursor:])
    rendered_text = "\n".join(output)
    if text.endswith("\n"):
        rendered_text += "\n"

    view = DecryptedView(text=rendered_text, outcomes=outcomes)
    if view.failed:
        logger.warning(f"{view.failed} encrypted entries could not be decrypted")
    return view
