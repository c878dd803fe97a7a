"""Ports - interfaces/protocols for external dependencies."""

from .entry_store import EntryStore
from .cipher import Cipher
from .version_control import VersionControl
from .clock import Clock

__all__ = [
    "EntryStore",
    "Cipher",
    "VersionControl",
    "Clock",
]
